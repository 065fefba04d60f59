# coding: utf-8
"""
Valuation policies for inventory removed by a non-trading change.

A withdrawal/transfer out (InventoryType.REMOVE) is matched FIFO against open Lots
just like a sale, but whether that match should show up as a realized gain is a
matter of tax treatment.  The Holding applies one of these policies to the matches
produced by each REMOVE change; sales (SHORT) are never affected.
"""

__all__ = [
    "RemovalPolicy",
    "drop_all",
    "value_at_cost",
    "value_at_market",
    "value_at_zero",
    "value_removed",
]


# stdlib imports
import enum
import logging
from typing import Callable, List, Mapping


# local imports
from .types import RealizedMatch


PolicyType = Callable[[List[RealizedMatch]], List[RealizedMatch]]


@enum.unique
class RemovalPolicy(enum.Enum):
    """How to value inventory removed by a transfer out.

    DEFAULT - removal is cost-basis neutral; no realized matches are reported.
    REALIZED_REMOVED_VALUE_AT_COST - report matches, valued at cost (zero gain).
    REMOVED_VALUE_AT_MARKET - report matches as booked; the removal's own price
                              is taken to be the market price.
    REMOVED_VALUE_AT_ZERO - report matches with zero proceeds, realizing a loss
                            of the full removed basis.
    """

    DEFAULT = 1
    REALIZED_REMOVED_VALUE_AT_COST = 2
    REMOVED_VALUE_AT_MARKET = 3
    REMOVED_VALUE_AT_ZERO = 4

    @classmethod
    def from_token(cls, token: str) -> "RemovalPolicy":
        """Look up a policy by (case-insensitive) name.

        Raises:
            ValueError: if the name isn't a known policy.
        """
        name = token.strip().upper()
        name = POLICY_ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError:
            choices = ", ".join(member.name for member in cls)
            raise ValueError(f"Unknown removal policy '{token}' (choose {choices})")


POLICY_ALIASES = {"ADD_REALIZED_FOR_REMOVED": "REALIZED_REMOVED_VALUE_AT_COST"}


def drop_all(realized: List[RealizedMatch]) -> List[RealizedMatch]:
    return []


def value_at_cost(realized: List[RealizedMatch]) -> List[RealizedMatch]:
    return [r.zero_profit() for r in realized]


def value_at_market(realized: List[RealizedMatch]) -> List[RealizedMatch]:
    return list(realized)


def value_at_zero(realized: List[RealizedMatch]) -> List[RealizedMatch]:
    return [r.zero_value() for r in realized]


POLICIES: Mapping[RemovalPolicy, PolicyType] = {
    RemovalPolicy.DEFAULT: drop_all,
    RemovalPolicy.REALIZED_REMOVED_VALUE_AT_COST: value_at_cost,
    RemovalPolicy.REMOVED_VALUE_AT_MARKET: value_at_market,
    RemovalPolicy.REMOVED_VALUE_AT_ZERO: value_at_zero,
}


def value_removed(
    realized: List[RealizedMatch], policy: RemovalPolicy
) -> List[RealizedMatch]:
    """Apply a removal valuation policy to the matches produced by one REMOVE change.

    Args:
        realized: matches produced by the removal, in FIFO order.
        policy: the Holding's RemovalPolicy.

    Returns:
        New list of matches (possibly empty); input records aren't modified.
    """
    logging.debug(f"Valuing {len(realized)} removed match(es) with {policy.name}")
    return POLICIES[policy](realized)
