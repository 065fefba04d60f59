# coding: utf-8
"""
Data structures for tracking the quantity/basis history of one fungible position.

An inventory change is anything that adds to or removes from a position: a buy, a
sell, a deposit received or a withdrawal sent.  The matching engine in
inventory.api doesn't care about the concrete class of a change, only that it
implements two capabilities:

    * Inventory - exposes date, signed quantity, signed basis, and a coarse type.
    * VolumeSplit - can be divided into two records of the same type.

Sign conventions (consumers rely on these):
    * quantity is positive for a long position or an addition, negative for a
      short position or a removal.
    * basis is the total money amount of the change, never a per-unit price.
      It carries the opposite sign to quantity: cost paid is negative, proceeds
      received are positive.

Transaction is the caller-facing record (date, type, unsigned units, unit price).
OpenLot is what the engine keeps in its queue: one still-unmatched slice of
inventory.  RealizedMatch pairs a closing change with exactly one OpenLot and
carries the realized gain.  RealizedCompact sums RealizedMatches sharing a close
date.

All records are immutable NamedTuples; a changed record is a new instance, and
nothing in this package modifies one once created.
"""
from __future__ import annotations


__all__ = [
    "InventoryError",
    "Unsplittable",
    "InventoryType",
    "Inventory",
    "VolumeSplit",
    "Transaction",
    "OpenLot",
    "RealizedMatch",
    "RealizedCompact",
]


# stdlib imports
import datetime as _datetime
import enum
from typing import NamedTuple, Protocol, Tuple, TypeVar


# local imports
from costbasis import utils


class InventoryError(Exception):
    """ Base class for Exceptions defined in this package """


class Unsplittable(InventoryError, ZeroDivisionError):
    """Exception raised when prorating basis would divide by a zero quantity.
    """


@enum.unique
class InventoryType(enum.Enum):
    """Semantic category of an inventory change.

    LONG/SHORT are trades; ADD/REMOVE are non-trading transfers (deposits,
    withdrawals, sending/receiving crypto, etc.)
    """

    LONG = 1
    SHORT = 2
    ADD = 3
    REMOVE = 4

    @property
    def multiplier(self) -> int:
        """Sign applied to unsigned units: +1 increases, -1 decreases."""
        if self in (InventoryType.LONG, InventoryType.ADD):
            return 1
        return -1

    @classmethod
    def from_token(cls, token: str) -> InventoryType:
        """Map a transaction type token (case-insensitive) to an InventoryType.

        Raises:
            ValueError: if the token isn't a known alias.
        """
        try:
            return INVENTORY_TYPE_ALIASES[token.strip().lower()]
        except KeyError:
            raise ValueError(f"'{token}' is not a valid value for InventoryType")


INVENTORY_TYPE_ALIASES = {
    "long": InventoryType.LONG,
    "buy": InventoryType.LONG,
    "b": InventoryType.LONG,
    "l": InventoryType.LONG,
    "short": InventoryType.SHORT,
    "sell": InventoryType.SHORT,
    "s": InventoryType.SHORT,
    "receive": InventoryType.ADD,
    "transfer_in": InventoryType.ADD,
    "add": InventoryType.ADD,
    "deposit": InventoryType.ADD,
    "send": InventoryType.REMOVE,
    "transfer_out": InventoryType.REMOVE,
    "remove": InventoryType.REMOVE,
    "withdraw": InventoryType.REMOVE,
}


def direction_of(quantity: float) -> InventoryType:
    """LONG for positive quantity, otherwise SHORT."""
    return InventoryType.LONG if quantity > 0 else InventoryType.SHORT


class Inventory(Protocol):
    """The interface a record must implement to be booked to a Holding.

    Attributes:
        date: date of the change; changes must be booked in date order.
        quantity: signed amount of units (+ long/add, - short/remove).
        basis: signed total money amount (- cost paid, + proceeds received).
        itype: semantic category of the change.
    """

    @property
    def date(self) -> _datetime.date:
        ...

    @property
    def quantity(self) -> float:
        ...

    @property
    def basis(self) -> float:
        ...

    @property
    def itype(self) -> InventoryType:
        ...

    def direction_type(self) -> InventoryType:
        """LONG or SHORT according to the sign of quantity; not the same as itype."""
        ...


T = TypeVar("T")


class VolumeSplit(Protocol[T]):
    """A record that can be divided into two records of the same type."""

    def split(self, quantity: float) -> Tuple[T, T]:
        """Divide into (part, remainder).

        Args:
            quantity: unsigned magnitude of the first part.  Both parts keep the
                      sign of the original.
        """
        ...


class Transaction(NamedTuple):
    """An inventory change as recorded by the user or a data source.

    Attributes:
        date: transaction date.
        itype: transaction type.
        units: amount of the asset changing hands (unsigned magnitude).
        price: per-unit money amount.
    """

    date: _datetime.date
    itype: InventoryType
    units: float
    price: float

    @classmethod
    def from_string(cls, record: str) -> Transaction:
        """Parse 'YYYY-MM-DD,type,units,price' e.g. '2020-01-01,long,100.0,25.0'

        Raises:
            ValueError: if the record doesn't have 4 fields, or any field can't be
                        converted.
        """
        fields = [field.strip() for field in record.split(",")]
        if len(fields) != 4:
            raise ValueError(f"Transaction record needs 4 fields: '{record}'")
        date, itype, units, price = fields
        try:
            return cls(
                date=_datetime.date.fromisoformat(date),
                itype=InventoryType.from_token(itype),
                units=float(units),
                price=float(price),
            )
        except ValueError as err:
            raise ValueError(f"Can't parse transaction '{record}': {err}") from err

    @property
    def quantity(self) -> float:
        return self.units * self.itype.multiplier

    @property
    def basis(self) -> float:
        return -self.units * self.price * self.itype.multiplier

    def direction_type(self) -> InventoryType:
        return direction_of(self.quantity)

    def split(self, quantity: float) -> Tuple[Transaction, Transaction]:
        """Split units; price is per unit so basis is prorated automatically."""
        if utils.almost_zero(self.units):
            raise Unsplittable(f"Can't split zero-unit {self}")
        quantity = abs(quantity)
        if quantity > self.units + utils.EPSILON:
            raise ValueError(f"Can't split {quantity} units from {self}")
        return (
            self._replace(units=quantity),
            self._replace(units=self.units - quantity),
        )


class OpenLot(NamedTuple):
    """One still-open slice of inventory, waiting in a Holding to be matched.

    Attributes:
        date: date of the change that opened the slice.
        quantity: signed amount of units; + long, - short.
        basis: signed total basis; - for a long lot (cost), + for a short lot.
    """

    date: _datetime.date
    quantity: float
    basis: float

    @classmethod
    def from_inventory(cls, change: Inventory) -> OpenLot:
        return cls(date=change.date, quantity=change.quantity, basis=change.basis)

    @property
    def itype(self) -> InventoryType:
        return self.direction_type()

    @property
    def price(self) -> float:
        """Per-unit basis; positive for both long and short lots."""
        if utils.almost_zero(self.quantity):
            return 0.0
        return -self.basis / self.quantity

    def direction_type(self) -> InventoryType:
        return direction_of(self.quantity)

    def split(self, quantity: float) -> Tuple[OpenLot, OpenLot]:
        """First return is the closed portion, second is left-over inventory."""
        if utils.almost_zero(self.quantity):
            raise Unsplittable(f"Can't prorate basis of zero-quantity {self}")
        if abs(quantity) > abs(self.quantity) + utils.EPSILON:
            raise ValueError(f"Can't split {abs(quantity)} units from {self}")
        quantity = abs(quantity) * utils.sign(self.quantity)
        remainder = self.quantity - quantity
        return (
            self._replace(quantity=quantity, basis=self.basis * quantity / self.quantity),
            self._replace(
                quantity=remainder, basis=self.basis * remainder / self.quantity
            ),
        )

    def __str__(self):
        return (
            f"OpenLot: {self.date}, quantity: {self.quantity:.4f}, "
            f"price: {self.price:.4f}, basis: {self.basis:.4f}"
        )


class RealizedMatch(NamedTuple):
    """Binds a closing change to the one OpenLot (or lot fragment) it closes.

    Attributes:
        close_date: date of the closing change.
        quantity: signed units of the closing change (- for closing a long).
        close_basis: basis of the closing change, i.e. proceeds for a sale.
        open_date: date the matched lot was opened.
        open_basis: basis of the matched lot, i.e. its cost for a long.
        gain: realized gain (+) or loss (-), close_basis + open_basis.
    """

    close_date: _datetime.date
    quantity: float
    close_basis: float
    open_date: _datetime.date
    open_basis: float
    gain: float

    @classmethod
    def new(
        cls,
        close_date: _datetime.date,
        quantity: float,
        close_basis: float,
        open_date: _datetime.date,
        open_basis: float,
    ) -> RealizedMatch:
        return cls(
            close_date=close_date,
            quantity=quantity,
            close_basis=close_basis,
            open_date=open_date,
            open_basis=open_basis,
            gain=close_basis + open_basis,
        )

    @classmethod
    def match_close(cls, change: Inventory, lot: OpenLot) -> RealizedMatch:
        """Pair a closing change with the lot it closes.

        The caller is responsible for sizing `change` to exactly offset `lot`.
        """
        return cls.new(
            close_date=change.date,
            quantity=change.quantity,
            close_basis=change.basis,
            open_date=lot.date,
            open_basis=lot.basis,
        )

    def zero_profit(self) -> RealizedMatch:
        """Value the close at the lot's cost, so no gain is realized."""
        return self._replace(close_basis=-self.open_basis, gain=0.0)

    def zero_value(self) -> RealizedMatch:
        """Value the close at nothing, realizing the lot's whole basis as loss."""
        return self._replace(close_basis=0.0, gain=self.open_basis)

    def __str__(self):
        return (
            f"close_date: {self.close_date} quantity:{self.quantity:.4f}, "
            f"proceeds:{self.close_basis:.2f}, open_date: {self.open_date}, "
            f"cost_basis:{self.open_basis:.2f}, gain_loss:{self.gain:.2f}"
        )


class RealizedCompact(NamedTuple):
    """Summary of the RealizedMatches that share one close date.

    This helps when e.g. one sale closes several buys made on a variety of dates.

    Attributes:
        date: close date shared by the grouped matches.
        quantity: total units closed (unsigned magnitude).
        proceeds: sum of close_basis.
        open_dates: distinct open dates of the grouped matches, ';'-separated.
        costs: sum of open_basis.
        gain: proceeds + costs.
    """

    date: _datetime.date
    quantity: float
    proceeds: float
    open_dates: str
    costs: float
    gain: float

    def __str__(self):
        return (
            f"close_date: {self.date} quantity:{self.quantity:.4f}, "
            f"proceeds:{self.proceeds:.2f}, cost_basis:{self.costs:.2f}, "
            f"gain_loss:{self.gain:.2f}"
        )
