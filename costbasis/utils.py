"""
Utility functions used by costbasis modules
"""
import itertools
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Tuple, Iterable, Callable, List, Union


EPSILON = 1e-10
"""Tolerance for every "is this effectively zero" test on quantity or basis."""


def almost_zero(number: float) -> bool:
    return abs(number) < EPSILON


def almost_equal(number0: float, number1: float) -> bool:
    return abs(number0 - number1) < EPSILON


def sign(x) -> int:
    """Extract the sign of a number (+1, -1, or 0)"""
    return (x != 0) and (1, -1)[x < 0]


def unique_everseen(iterable: Iterable, key: Callable = None) -> List:
    """List unique elements, preserving order. Remember all elements ever seen.

    https://docs.python.org/3/library/itertools.html#itertools-recipes
    """
    # unique_everseen('AAAABBBCCDAABBB') --> A B C D
    seen: set = set()
    output = []
    for element in iterable:
        k = element if key is None else key(element)
        if k not in seen:
            seen.add(k)
            output.append(element)
    return output


def group_runs(
    iterable: Iterable, key: Callable[[Any], Any]
) -> List[Tuple[Any, List]]:
    """Group contiguous runs of items sharing the same key.

    Unlike grouping after a sort, items with an equal key that are separated by
    a different key end up in separate groups.

    >>> group_runs([1, 1, 2, 1], key=lambda x: x)
    [(1, [1, 1]), (2, [2]), (1, [1])]
    """
    return [(k, list(g)) for k, g in itertools.groupby(iterable, key=key)]


def round_half_away(number: float, places: int = 4) -> float:
    """Round on the float itself, ties away from zero (0.15625 -> 0.1563)."""
    scale = 10 ** places
    return math.copysign(math.floor(abs(number) * scale + 0.5), number) / scale


def round_number(number: Union[int, float], places: int = 4) -> float:
    """Round half-up to the given number of decimal places.

    Goes through Decimal(str(number)) so that e.g. 2.675 rounds to 2.68,
    which the builtin round() doesn't do for binary floats.
    """
    d = Decimal(str(number))
    return float(d.quantize(Decimal("10") ** -places, rounding=ROUND_HALF_UP))
