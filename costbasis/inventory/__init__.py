# coding: utf-8
from .types import (
    InventoryError,
    Unsplittable,
    InventoryType,
    Inventory,
    VolumeSplit,
    Transaction,
    OpenLot,
    RealizedMatch,
    RealizedCompact,
)
from .policies import RemovalPolicy, value_removed
from .api import Inconsistent, Holding, Portfolio
from .functions import compact, realized_to_compact, total_realized
