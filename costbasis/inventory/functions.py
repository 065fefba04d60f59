# coding: utf-8
"""Aggregate functions over sequences of RealizedMatch.
"""

__all__ = [
    "compact",
    "realized_to_compact",
    "total_realized",
]


# stdlib imports
import operator
from typing import List, Sequence


# local imports
from costbasis import utils
from .types import RealizedMatch, RealizedCompact


def compact(realized: Sequence[RealizedMatch]) -> RealizedCompact:
    """Summarize RealizedMatches sharing a close date into one RealizedCompact.

    The close date is taken from the first match; the caller is responsible for
    grouping.

    Raises:
        ValueError: if `realized` is empty.
    """
    if not realized:
        raise ValueError("Can't compact an empty sequence of RealizedMatch")

    proceeds = sum(r.close_basis for r in realized)
    costs = sum(r.open_basis for r in realized)
    open_dates = utils.unique_everseen(r.open_date for r in realized)
    return RealizedCompact(
        date=realized[0].close_date,
        quantity=abs(sum(r.quantity for r in realized)),
        proceeds=proceeds,
        open_dates=";".join(d.isoformat() for d in open_dates),
        costs=costs,
        gain=proceeds + costs,
    )


def realized_to_compact(realized: Sequence[RealizedMatch]) -> List[RealizedCompact]:
    """Convert RealizedMatches into compact form by grouping by close date.

    Matches are grouped in contiguous runs of equal close date, which is how a
    Holding returns them (one closing change produces a run).  A close date that
    reappears after a different one starts a new group; it isn't merged back.
    """
    groups = utils.group_runs(realized, key=operator.attrgetter("close_date"))
    return [compact(group) for _, group in groups]


def total_realized(realized: Sequence[RealizedMatch]) -> float:
    """Sum of all gains/losses in the sequence."""
    return sum(r.gain for r in realized)
