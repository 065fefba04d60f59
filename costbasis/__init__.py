# coding: utf-8
"""Realized and unrealized gains for a log of inventory changes, matched FIFO.
"""
from .config import CONFIG
from .inventory import (
    InventoryType,
    Transaction,
    OpenLot,
    RealizedMatch,
    RealizedCompact,
    RemovalPolicy,
    Holding,
    Portfolio,
    realized_to_compact,
    total_realized,
)
