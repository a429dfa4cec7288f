"""Arithmetic expression operators.

$add, $subtract, $multiply, $divide, $mod, $abs, $floor, $ceil.
A null or missing argument makes the result null; any other non-numeric
argument raises ExpressionTypeError.
"""

import math
from typing import Any

from docquery.core import EvaluationError, ExpressionTypeError, OperatorContext, Options, is_nil
from docquery.core.registry import OperatorFn
from docquery.operators.compare import is_number


def _check_number(operator: str, value: Any) -> None:
    if not is_number(value):
        raise ExpressionTypeError(f"{operator} expression must resolve to a number")


def _arguments(ctx: OperatorContext, operator: str, obj: Any, expr: Any, options: Options, count: int | None = None) -> list[Any]:
    args = ctx.compute_value(obj, expr, None, options)
    if not isinstance(args, list):
        args = [args]
    if count is not None and len(args) != count:
        raise EvaluationError(f"{operator} expression must have exactly {count} arguments")
    return args


def arithmetic_operators(ctx: OperatorContext) -> dict[str, OperatorFn]:
    """Build the arithmetic operators for registration."""

    def _add(obj: Any, expr: Any, options: Options) -> Any:
        args = _arguments(ctx, "$add", obj, expr, options)
        if any(is_nil(a) for a in args):
            return None
        for a in args:
            _check_number("$add", a)
        return sum(args)

    def _subtract(obj: Any, expr: Any, options: Options) -> Any:
        left, right = _arguments(ctx, "$subtract", obj, expr, options, 2)
        if is_nil(left) or is_nil(right):
            return None
        _check_number("$subtract", left)
        _check_number("$subtract", right)
        return left - right

    def _multiply(obj: Any, expr: Any, options: Options) -> Any:
        args = _arguments(ctx, "$multiply", obj, expr, options)
        if any(is_nil(a) for a in args):
            return None
        result = 1
        for a in args:
            _check_number("$multiply", a)
            result *= a
        return result

    def _divide(obj: Any, expr: Any, options: Options) -> Any:
        left, right = _arguments(ctx, "$divide", obj, expr, options, 2)
        if is_nil(left) or is_nil(right):
            return None
        _check_number("$divide", left)
        _check_number("$divide", right)
        if right == 0:
            raise EvaluationError("$divide by zero")
        return left / right

    def _mod(obj: Any, expr: Any, options: Options) -> Any:
        left, right = _arguments(ctx, "$mod", obj, expr, options, 2)
        if is_nil(left) or is_nil(right):
            return None
        _check_number("$mod", left)
        _check_number("$mod", right)
        if right == 0:
            raise EvaluationError("$mod by zero")
        # sign follows the dividend
        if isinstance(left, int) and isinstance(right, int):
            remainder = abs(left) % abs(right)
            return -remainder if left < 0 else remainder
        return math.fmod(left, right)

    def _unary(operator: str, fn: Any) -> OperatorFn:
        def apply(obj: Any, expr: Any, options: Options) -> Any:
            n = ctx.compute_value(obj, expr, None, options)
            if is_nil(n):
                return None
            _check_number(operator, n)
            if isinstance(n, float) and (math.isnan(n) or math.isinf(n)):
                return n
            return fn(n)

        return apply

    return {
        "$abs": _unary("$abs", abs),
        "$add": _add,
        "$ceil": _unary("$ceil", math.ceil),
        "$divide": _divide,
        "$floor": _unary("$floor", math.floor),
        "$mod": _mod,
        "$multiply": _multiply,
        "$subtract": _subtract,
    }
