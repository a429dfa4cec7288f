"""Comparison, boolean and conditional expression operators."""

from collections.abc import Mapping
from typing import Any, Callable

from docquery.core import EvaluationError, OperatorContext, Options, is_nil
from docquery.core.registry import OperatorFn
from docquery.operators.compare import compare, truthy


def comparison_operators(ctx: OperatorContext) -> dict[str, OperatorFn]:
    """Build $cmp, $eq, $ne, $gt, $gte, $lt, $lte."""

    def _pair(operator: str, obj: Any, expr: Any, options: Options) -> tuple[Any, Any]:
        args = ctx.compute_value(obj, expr, None, options)
        if not isinstance(args, list) or len(args) != 2:
            raise EvaluationError(f"{operator} expression must have exactly 2 arguments")
        return args[0], args[1]

    def _comparison(operator: str, test: Callable[[int], bool]) -> OperatorFn:
        def apply(obj: Any, expr: Any, options: Options) -> bool:
            left, right = _pair(operator, obj, expr, options)
            return test(compare(left, right))

        return apply

    def _cmp(obj: Any, expr: Any, options: Options) -> int:
        left, right = _pair("$cmp", obj, expr, options)
        return compare(left, right)

    return {
        "$cmp": _cmp,
        "$eq": _comparison("$eq", lambda c: c == 0),
        "$gt": _comparison("$gt", lambda c: c > 0),
        "$gte": _comparison("$gte", lambda c: c >= 0),
        "$lt": _comparison("$lt", lambda c: c < 0),
        "$lte": _comparison("$lte", lambda c: c <= 0),
        "$ne": _comparison("$ne", lambda c: c != 0),
    }


def boolean_operators(ctx: OperatorContext) -> dict[str, OperatorFn]:
    """Build $and, $or, $not."""

    def _arguments(obj: Any, expr: Any, options: Options) -> list[Any]:
        args = ctx.compute_value(obj, expr, None, options)
        return args if isinstance(args, list) else [args]

    def _and(obj: Any, expr: Any, options: Options) -> bool:
        return all(truthy(a) for a in _arguments(obj, expr, options))

    def _or(obj: Any, expr: Any, options: Options) -> bool:
        return any(truthy(a) for a in _arguments(obj, expr, options))

    def _not(obj: Any, expr: Any, options: Options) -> bool:
        args = _arguments(obj, expr, options)
        if len(args) != 1:
            raise EvaluationError("$not expression must have exactly 1 argument")
        return not truthy(args[0])

    return {"$and": _and, "$not": _not, "$or": _or}


def conditional_operators(ctx: OperatorContext) -> dict[str, OperatorFn]:
    """Build $cond, $ifNull, $literal.

    These receive their argument unevaluated so only the taken branch is
    computed.
    """

    def _cond(obj: Any, expr: Any, options: Options) -> Any:
        if isinstance(expr, list):
            if len(expr) != 3:
                raise EvaluationError("$cond expression must have exactly 3 arguments")
            if_expr, then_expr, else_expr = expr
        elif isinstance(expr, Mapping):
            missing = {"if", "then", "else"} - set(expr)
            if missing:
                raise EvaluationError(
                    f"$cond expression is missing: {', '.join(sorted(missing))}"
                )
            if_expr, then_expr, else_expr = expr["if"], expr["then"], expr["else"]
        else:
            raise EvaluationError("$cond expression must be a list or a mapping")

        condition = ctx.compute_value(obj, if_expr, None, options)
        branch = then_expr if truthy(condition) else else_expr
        return ctx.compute_value(obj, branch, None, options)

    def _if_null(obj: Any, expr: Any, options: Options) -> Any:
        if not isinstance(expr, list) or len(expr) != 2:
            raise EvaluationError("$ifNull expression must have exactly 2 arguments")
        value = ctx.compute_value(obj, expr[0], None, options)
        if is_nil(value):
            return ctx.compute_value(obj, expr[1], None, options)
        return value

    def _literal(obj: Any, expr: Any, options: Options) -> Any:
        return expr

    return {"$cond": _cond, "$ifNull": _if_null, "$literal": _literal}
