# coding: utf-8
"""Apply inventory changes to a position and compute realized gains, FIFO.

The main purpose of this module is to match opening and closing changes in order
to calculate realized gains and losses, and to keep an accurate tally of the
inventory that remains open.

To use this module, create a Holding per asset (or a Portfolio, which creates one
Holding per symbol on demand) and feed it inventory changes in date order through
add_transaction() or extend_transactions().  Any object implementing the
inventory.types.Inventory and inventory.types.VolumeSplit protocols may be
booked; Transaction is the ready-made implementation.

A Holding is impure: booking a change mutates its queue of OpenLots as a side
effect and returns the RealizedMatches created.  OpenLots and RealizedMatches are
immutable, so a RealizedMatch stays accurate after the Holding moves on.

Matching rules:
    * A change in the same direction as the Holding (or any change booked to an
      empty Holding) opens a new Lot at the back of the queue.
    * A change in the opposite direction closes Lots from the front of the queue,
      oldest first.  When sizes differ, either the front Lot or the change is
      split so that every RealizedMatch pairs a close with exactly one Lot.
      Whatever is left of the change after the queue is exhausted opens a Lot
      in the new direction.
    * When the queue nets out to zero the Holding resets to empty, with no
      direction.
    * Matches created by a REMOVE change are passed through the Holding's
      RemovalPolicy (q.v. inventory.policies).
"""

__all__ = [
    "Inconsistent",
    "Holding",
    "Portfolio",
]


# stdlib imports
from collections import defaultdict, deque
import logging
from typing import Deque, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple


# local imports
from costbasis import utils
from . import policies
from .types import (
    InventoryError,
    InventoryType,
    Inventory,
    OpenLot,
    RealizedMatch,
    direction_of,
)
from .policies import RemovalPolicy


class Inconsistent(InventoryError):
    """Exception raised when a Holding's state is inconsistent with a change.

    Args:
        transaction: the inventory change that couldn't be applied.
        msg: Error message detailing the inconsistency.

    Attributes:
        transaction: the inventory change that couldn't be applied.
        msg: Error message detailing the inconsistency.
    """

    def __init__(self, transaction, msg: str) -> None:
        self.transaction = transaction
        self.msg = msg
        super(Inconsistent, self).__init__(f"{transaction} inconsistent: {msg}")


class Holding:
    """FIFO queue of OpenLots for one fungible position.

    Attributes:
        policy: valuation of inventory removed by REMOVE changes.
    """

    def __init__(self, policy: RemovalPolicy = RemovalPolicy.DEFAULT) -> None:
        self._lots: Deque[OpenLot] = deque()
        self._direction: Optional[InventoryType] = None
        self._policy = policy

    @classmethod
    def from_lots(
        cls, lots: Iterable[Inventory], policy: RemovalPolicy = RemovalPolicy.DEFAULT
    ) -> "Holding":
        """Seed a Holding with existing open Lots, e.g. from a prior period.

        Lots are kept in the order given (oldest first); direction is derived from
        the net sign of their quantities.  Any Inventory record is accepted and
        stored as an OpenLot.

        Raises:
            ValueError: if any Lot has zero quantity.
        """
        holding = cls(policy=policy)
        for lot in lots:
            if utils.almost_zero(lot.quantity):
                raise ValueError(f"quantity can't be zero: {lot}")
            holding._lots.append(OpenLot.from_inventory(lot))
        if holding._lots:
            holding._direction = direction_of(holding.position()[0])
        holding.check_zero_reset()
        return holding

    @classmethod
    def from_transaction(
        cls, change: Inventory, policy: RemovalPolicy = RemovalPolicy.DEFAULT
    ) -> "Holding":
        holding = cls(policy=policy)
        holding.add_transaction(change)
        return holding

    @property
    def policy(self) -> RemovalPolicy:
        return self._policy

    @property
    def direction(self) -> Optional[InventoryType]:
        """LONG or SHORT for an open position; None when flat."""
        return self._direction

    def add_transaction(self, change: Inventory) -> List[RealizedMatch]:
        """Book one inventory change; changes must be booked in date order.

        Args:
            change: instance implementing the Inventory and VolumeSplit protocols.

        Returns:
            A sequence of RealizedMatch instances, reflecting Lots closed by the
            change, oldest first.

        Raises:
            ValueError: if the change's quantity is zero.
        """
        if utils.almost_zero(change.quantity):
            raise ValueError(f"quantity can't be zero: {change}")

        realized: List[RealizedMatch] = []
        remaining: Optional[Inventory] = change
        while remaining is not None:
            if self.match_direction(remaining):
                # Same direction (or empty Holding) - nothing to close.
                self.add_inventory(OpenLot.from_inventory(remaining))
                break
            matched, remaining = self.split_matching_first(remaining)
            realized.append(self.match_close(matched))

        if change.itype is InventoryType.REMOVE and realized:
            realized = policies.value_removed(realized, self._policy)
        return realized

    def extend_transactions(self, changes: Iterable[Inventory]) -> List[RealizedMatch]:
        """Book a series of inventory changes, which must be sorted by date.

        Returns:
            RealizedMatches created by all the changes, in booking order.
        """
        realized: List[RealizedMatch] = []
        for change in changes:
            realized.extend(self.add_transaction(change))
        return realized

    def match_direction(self, change: Inventory) -> bool:
        """True if booking the change would add to inventory rather than close it."""
        return self._direction is None or self._direction is change.direction_type()

    def add_inventory(self, lot: OpenLot) -> None:
        """Append a Lot to the back of the queue."""
        if self._direction is None:
            self._direction = lot.direction_type()
        logging.debug(f"Opening {lot}")
        self._lots.append(lot)

    def split_matching_first(
        self, change: Inventory
    ) -> Tuple[Inventory, Optional[Inventory]]:
        """Size the change and the front Lot to match each other.

        The change must be in the opposite direction to the Holding.  If the front
        Lot is larger than the change, it's split in place; the queue gets the
        matching part at the front with the remainder right behind it.  If the
        change is larger, the change is split instead.

        Returns:
            (part of change matching the front Lot,
             remainder of change or None if the whole change matched)

        Raises:
            Inconsistent: if the Holding has no Lots to match against.
        """
        if not self._lots:
            raise Inconsistent(change, "no open Lots to match against")

        front = self._lots[0]
        if utils.almost_equal(abs(change.quantity), abs(front.quantity)):
            return change, None

        if abs(front.quantity) > abs(change.quantity):
            matched_lot, remaining_lot = front.split(abs(change.quantity))
            logging.debug(f"Splitting {front} at {abs(change.quantity)}")
            self._lots.popleft()
            self._lots.appendleft(remaining_lot)
            self._lots.appendleft(matched_lot)
            return change, None

        matched, remaining = change.split(abs(front.quantity))
        return matched, remaining

    def match_close(self, change: Inventory) -> RealizedMatch:
        """Close the front Lot against a change sized to offset it exactly.

        Raises:
            Inconsistent: if the Holding has no Lots.
        """
        if not self._lots:
            raise Inconsistent(change, "no open Lots to close")
        lot = self._lots.popleft()
        self.check_zero_reset()
        match = RealizedMatch.match_close(change, lot)
        logging.debug(f"Closing {lot} -> gain {match.gain:.2f}")
        return match

    def check_zero_reset(self) -> None:
        """Reset to an empty, directionless Holding once net quantity is zero."""
        if not self._lots or utils.almost_zero(self.position()[0]):
            if self._lots:
                logging.debug(f"Net quantity is zero; dropping {len(self._lots)} Lot(s)")
            self._direction = None
            self._lots.clear()

    def inventory(self) -> List[OpenLot]:
        """Copy of the open Lots, oldest first."""
        return list(self._lots)

    def position(self) -> Tuple[float, float, float]:
        """Current position: (quantity, price per unit, total basis).

        Price is rounded half away from zero to 4 decimal places; it's zero for
        a flat position.
        """
        quantity = sum((lot.quantity for lot in self._lots), 0.0)
        basis = sum((lot.basis for lot in self._lots), 0.0)
        price = 0.0
        if abs(quantity) > utils.EPSILON:
            price = utils.round_half_away(-basis / quantity, 4)
        return quantity, price, basis

    def __str__(self):
        quantity, price, basis = self.position()
        return (
            f"Position; quantity:{quantity:.4f}, price:{price:.4f}, "
            f"basis:{basis:.4f}, inventory_count:{len(self._lots)}"
        )

    def __repr__(self):
        return (
            f"Holding(direction={self._direction}, policy={self._policy}, "
            f"lots={list(self._lots)})"
        )


class Portfolio(defaultdict):
    """Mapping container for Holdings, keyed by symbol.

    Each symbol gets its own independent Holding, created on first use with the
    Portfolio's removal policy.

    Note:
        It's convenient to inherit from collections.defaultdict; `default_factory`
        is bound to the policy at construction.
    """

    def __init__(self, *args, policy: RemovalPolicy = RemovalPolicy.DEFAULT, **kwargs):
        self.policy = policy
        defaultdict.__init__(self, self._make_holding, *args, **kwargs)

    def _make_holding(self) -> Holding:
        return Holding(policy=self.policy)

    def book(self, symbol: str, change: Inventory) -> List[RealizedMatch]:
        """Book one change to the Holding for `symbol`."""
        return self[symbol].add_transaction(change)

    def book_all(
        self, changes: Mapping[str, Sequence[Inventory]]
    ) -> Dict[str, List[RealizedMatch]]:
        """Book changes for many symbols.

        Args:
            changes: map of symbol to that symbol's changes, sorted by date.

        Returns:
            Map of symbol to the RealizedMatches booked for it.
        """
        return {
            symbol: self[symbol].extend_transactions(txs)
            for symbol, txs in changes.items()
        }
