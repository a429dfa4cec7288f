"""Projection operators.

Raw signature is (selector, value, expr, options) where value is the
resolved field; registration wraps them into (obj, expr, selector, options).
"""

from typing import Any

from docquery.core import EvaluationError, OperatorContext, Options
from docquery.core.registry import OperatorFn
from docquery.operators.compare import is_number


def _slice(selector: str, value: Any, expr: Any, options: Options) -> Any:
    """Limit the number of array elements returned.

    expr is either n (first n, or last n when negative) or [skip, n].
    """
    if not isinstance(value, list):
        return value

    if isinstance(expr, list):
        if len(expr) != 2 or not all(isinstance(e, int) for e in expr):
            raise EvaluationError("$slice expects [skip, limit]")
        skip, limit = expr
        if limit <= 0:
            raise EvaluationError("$slice limit must be positive")
        if skip < 0:
            skip = max(len(value) + skip, 0)
        return value[skip:skip + limit]

    if not is_number(expr):
        raise EvaluationError("$slice expects a number or [skip, limit]")
    n = int(expr)
    return value[:n] if n >= 0 else value[n:]


def projection_operators(ctx: OperatorContext) -> dict[str, OperatorFn]:
    """Build $slice."""
    return {"$slice": _slice}
