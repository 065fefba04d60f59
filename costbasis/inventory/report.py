# coding: utf-8
"""Data structures and functions for OpenLots and RealizedMatches to prepare for
serialization and recover from deserialization.

Conversion for serialization is a two-step process.

First each OpenLot or RealizedMatch is "flattened" into an intermediate sequence
(FlatLot, FlatRealized or FlatCompact) that adds the symbol of the Holding it
came from.

Next each flat record is "exported", i.e. numbers are rounded and dates are
formatted as ISO strings.

The exported data is packed (along with metadata mapping attributes to columns)
into a tablib.Dataset container that provides serialization/deserialization.

Deserialization is the inverse.  Dataset rows are "imported", i.e. type-converted
from strings, then "unflattened" to reconstitute OpenLots in a Portfolio.

This module doesn't perform the actual reading or writing; callers handle that by
working with tablib.Dataset instances passed into/out of these functions.
"""
__all__ = [
    "FlatLot",
    "FlatRealized",
    "FlatCompact",
    "flatten_portfolio",
    "unflatten_portfolio",
    "consolidate_lots",
    "flatten_lot",
    "export_flatlot",
    "import_flatlot",
    "flatten_realized",
    "flatten_match",
    "flatten_compact",
    "export_flatrealized",
]

# stdlib imports
import datetime as _datetime
from typing import Mapping, NamedTuple, Optional, Sequence, Tuple

# 3rd party imports
import tablib

# local imports
from costbasis import utils
from costbasis.config import CONFIG
from . import functions
from .api import Holding, Portfolio
from .policies import RemovalPolicy
from .types import OpenLot, RealizedMatch, RealizedCompact


class FlatLot(NamedTuple):
    """Container for OpenLot data, suitable for serialization.

    Order of attributes defines column order of serialized data.

    Attributes:
        symbol: key of the Holding in its Portfolio.
        opendt: date the Lot was opened (None for consolidated positions).
        quantity: signed units of the Lot.
        price: per-unit basis.
        basis: signed total basis of the Lot.
    """

    symbol: str
    opendt: Optional[_datetime.date]
    quantity: float
    price: float
    basis: float


class FlatRealized(NamedTuple):
    """Container for RealizedMatch data, suitable for serialization.

    Attributes:
        symbol: key of the Holding in its Portfolio.
        closedt: date of the closing change.
        quantity: signed units closed.
        proceeds: basis of the closing change.
        opendt: date the matched Lot was opened.
        cost: basis of the matched Lot.
        gain: realized gain (+) or loss (-).
    """

    symbol: str
    closedt: _datetime.date
    quantity: float
    proceeds: float
    opendt: _datetime.date
    cost: float
    gain: float


class FlatCompact(NamedTuple):
    """Container for RealizedCompact data, suitable for serialization.

    Attributes:
        cf. FlatRealized; `opendates` lists all open dates in the group.
    """

    symbol: str
    closedt: _datetime.date
    quantity: float
    proceeds: float
    opendates: str
    cost: float
    gain: float


def flatten_portfolio(
    portfolio: Mapping[str, Holding], *, consolidate: Optional[bool] = False
) -> tablib.Dataset:
    """Convert a Portfolio into tablib.Dataset prepared for serialization.

    Columns are the fields of FlatLot; rows represent OpenLot instances.

    Args:
        portfolio: a mapping of symbol to Holding.
        consolidate: if True, report one row per Holding with its net position.
    """
    dataset = tablib.Dataset(headers=FlatLot._fields)
    for symbol, holding in sorted(portfolio.items()):
        if consolidate:
            flatlots = consolidate_lots(symbol, holding)
        else:
            flatlots = [flatten_lot(symbol, lot) for lot in holding.inventory()]
        for flatlot in flatlots:
            dataset.append(export_flatlot(flatlot))
    return dataset


def unflatten_portfolio(
    dataset: tablib.Dataset, policy: RemovalPolicy = RemovalPolicy.DEFAULT
) -> Portfolio:
    """Convert a freshly-deserialized tablib.Dataset into a Portfolio.

    Rows are taken to be in FIFO order within each symbol.

    Args:
        dataset: a tablib.Dataset with headers set to FlatLot._fields,
                 and all values as strings.
        policy: removal policy for the Holdings created.
    """
    lots: dict = {}
    for row in dataset:
        flatlot = import_flatlot(row)
        if flatlot.opendt is None:
            msg = f"Can't load consolidated position for {flatlot.symbol} as a Lot"
            raise ValueError(msg)
        if not utils.almost_zero(flatlot.quantity):
            lot = OpenLot(
                date=flatlot.opendt, quantity=flatlot.quantity, basis=flatlot.basis
            )
            lots.setdefault(flatlot.symbol, []).append(lot)

    portfolio = Portfolio(policy=policy)
    for symbol, position in lots.items():
        portfolio[symbol] = Holding.from_lots(position, policy=policy)
    return portfolio


def consolidate_lots(symbol: str, holding: Holding) -> Sequence[FlatLot]:
    """Condense a Holding into a single-element FlatLot sequence.

    Note:
        This function is completely irreversible; it loses all information about
        open dates.
    """
    quantity, price, basis = holding.position()
    if utils.almost_zero(quantity):
        return []
    return [
        FlatLot(symbol=symbol, opendt=None, quantity=quantity, price=price, basis=basis)
    ]


def flatten_lot(symbol: str, lot: OpenLot) -> FlatLot:
    return FlatLot(
        symbol=symbol,
        opendt=lot.date,
        quantity=lot.quantity,
        price=lot.price,
        basis=lot.basis,
    )


def export_flatlot(flatlot: FlatLot) -> Tuple:
    """Convert FlatLot into a row (tuple) ready for serialization.

    Do the minimum work such that the values look right when tablib.Dataset
    type-converts them during serialization.
    """
    attrs = flatlot._asdict()
    attrs.update(
        {
            "opendt": _format_date(attrs["opendt"]),
            "quantity": utils.round_number(attrs["quantity"], CONFIG.price_precision),
            "price": utils.round_number(attrs["price"], CONFIG.price_precision),
            "basis": utils.round_number(attrs["basis"], CONFIG.precision),
        }
    )
    return tuple(attrs.values())


def import_flatlot(row: Tuple) -> FlatLot:
    """Convert a freshly-deserialized tablib.Dataset row into an intermediate FlatLot.

    Note:
        This function is not the inverse of export_flatlot(); values are rounded
        on export.

    Args:
        row: tuple whose values correspond to FlatLot._fields.

    Raises:
        ValueError: if a value can't be converted.
    """
    symbol, opendt, quantity, price, basis = row
    return FlatLot(
        symbol=symbol,
        opendt=_datetime.date.fromisoformat(opendt) if opendt else None,
        quantity=float(quantity),
        price=float(price),
        basis=float(basis),
    )


def flatten_realized(
    realized: Mapping[str, Sequence[RealizedMatch]], *, compact: Optional[bool] = False
) -> tablib.Dataset:
    """Convert RealizedMatches into tablib.Dataset prepared for serialization.

    Args:
        realized: a mapping of symbol to RealizedMatches booked to its Holding.
        compact: if True, report one row per close date (q.v.
                 functions.realized_to_compact) with FlatCompact columns.
    """
    if compact:
        dataset = tablib.Dataset(headers=FlatCompact._fields)
        for symbol, matches in sorted(realized.items()):
            for summary in functions.realized_to_compact(matches):
                dataset.append(export_flatrealized(flatten_compact(symbol, summary)))
        return dataset

    dataset = tablib.Dataset(headers=FlatRealized._fields)
    for symbol, matches in sorted(realized.items()):
        for match in matches:
            dataset.append(export_flatrealized(flatten_match(symbol, match)))
    return dataset


def flatten_match(symbol: str, match: RealizedMatch) -> FlatRealized:
    return FlatRealized(
        symbol=symbol,
        closedt=match.close_date,
        quantity=match.quantity,
        proceeds=match.close_basis,
        opendt=match.open_date,
        cost=match.open_basis,
        gain=match.gain,
    )


def flatten_compact(symbol: str, summary: RealizedCompact) -> FlatCompact:
    return FlatCompact(
        symbol=symbol,
        closedt=summary.date,
        quantity=summary.quantity,
        proceeds=summary.proceeds,
        opendates=summary.open_dates,
        cost=summary.costs,
        gain=summary.gain,
    )


def export_flatrealized(flat) -> Tuple:
    """Convert FlatRealized/FlatCompact into a row (tuple) ready for serialization.
    """
    attrs = flat._asdict()
    precision = CONFIG.precision
    attrs.update(
        {
            "closedt": _format_date(attrs["closedt"]),
            "quantity": utils.round_number(attrs["quantity"], CONFIG.price_precision),
            "proceeds": utils.round_number(attrs["proceeds"], precision),
            "cost": utils.round_number(attrs["cost"], precision),
            "gain": utils.round_number(attrs["gain"], precision),
        }
    )
    if "opendt" in attrs:
        attrs["opendt"] = _format_date(attrs["opendt"])
    return tuple(attrs.values())


def _format_date(date: Optional[_datetime.date]) -> str:
    return date.isoformat() if date is not None else ""
