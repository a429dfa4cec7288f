"""Value ordering shared by comparison operators and accumulators.

Values of different types are ordered by type, then by value:
missing < null < numbers < strings < mappings < lists < booleans < dates.
"""

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from docquery.core import MISSING, ExpressionTypeError, is_nil

NUMBER_TYPES = (int, float, Decimal)


def is_number(value: Any) -> bool:
    return isinstance(value, NUMBER_TYPES) and not isinstance(value, bool)


def type_rank(value: Any) -> int:
    if value is MISSING:
        return 0
    if value is None:
        return 1
    if isinstance(value, bool):
        return 6
    if is_number(value):
        return 2
    if isinstance(value, str):
        return 3
    if isinstance(value, Mapping):
        return 4
    if isinstance(value, (list, tuple)):
        return 5
    if isinstance(value, (date, datetime)):
        return 7
    return 8


def compare(left: Any, right: Any) -> int:
    """Compare two values, returning -1, 0, or 1."""
    left_rank, right_rank = type_rank(left), type_rank(right)
    if left_rank != right_rank:
        return -1 if left_rank < right_rank else 1

    if left_rank in (0, 1):
        return 0

    if isinstance(left, Mapping):
        # entries compare key first, then value
        flat_left = [part for item in left.items() for part in item]
        flat_right = [part for item in right.items() for part in item]
        return _compare_sequences(flat_left, flat_right)

    if isinstance(left, (list, tuple)):
        return _compare_sequences(list(left), list(right))

    try:
        if left < right:
            return -1
        if left > right:
            return 1
    except TypeError:
        raise ExpressionTypeError(
            f"Cannot compare {type(left).__name__} and {type(right).__name__}"
        )
    return 0


def _compare_sequences(left: list[Any], right: list[Any]) -> int:
    for a, b in zip(left, right):
        result = compare(a, b)
        if result:
            return result
    if len(left) == len(right):
        return 0
    return -1 if len(left) < len(right) else 1


def truthy(value: Any) -> bool:
    """Aggregation truthiness: false, null, missing and zero are false."""
    if is_nil(value) or value is False:
        return False
    if is_number(value):
        return value != 0
    return True
