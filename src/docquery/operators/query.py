"""Query comparison operators.

Raw signature is (selector, value, compare_value, options) where value is
the already resolved field. Registration wraps them into
(selector, compare_value, options) -> (document) -> bool.
"""

from typing import Any, Callable

from docquery.core import MISSING, EvaluationError, OperatorContext, Options
from docquery.core.registry import OperatorFn
from docquery.operators.compare import compare, type_rank


def _candidates(value: Any) -> list[Any]:
    """The field value itself, plus its elements when it is a list."""
    if isinstance(value, list):
        return [value, *value]
    return [value]


def _ordering(test: Callable[[int], bool]) -> OperatorFn:
    def apply(selector: str, value: Any, compare_value: Any, options: Options) -> bool:
        # only values of the same type are ordered
        return any(
            type_rank(v) == type_rank(compare_value) and test(compare(v, compare_value))
            for v in _candidates(value)
        )

    return apply


def _eq(selector: str, value: Any, compare_value: Any, options: Options) -> bool:
    if compare_value is None:
        # null matches missing fields too
        return any(v is None or v is MISSING for v in _candidates(value))
    return any(compare(v, compare_value) == 0 for v in _candidates(value))


def _in(selector: str, value: Any, compare_value: Any, options: Options) -> bool:
    if not isinstance(compare_value, list):
        raise EvaluationError("$in needs an array")
    return any(_eq(selector, value, c, options) for c in compare_value)


def _exists(selector: str, value: Any, compare_value: Any, options: Options) -> bool:
    return (value is not MISSING) == bool(compare_value)


def query_operators(ctx: OperatorContext) -> dict[str, OperatorFn]:
    """Build $eq, $ne, $gt, $gte, $lt, $lte, $in, $nin, $exists."""
    return {
        "$eq": _eq,
        "$exists": _exists,
        "$gt": _ordering(lambda c: c > 0),
        "$gte": _ordering(lambda c: c >= 0),
        "$in": _in,
        "$lt": _ordering(lambda c: c < 0),
        "$lte": _ordering(lambda c: c <= 0),
        "$ne": lambda selector, value, compare_value, options: not _eq(selector, value, compare_value, options),
        "$nin": lambda selector, value, compare_value, options: not _in(selector, value, compare_value, options),
    }
