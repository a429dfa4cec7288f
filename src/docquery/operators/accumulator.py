"""Group accumulator operators.

Each accumulator receives (collection, expr, options). When expr is None the
collection already holds resolved values (the accumulator was used inside an
expression); otherwise expr is computed against every document first.
"""

from typing import Any

from docquery.core import MISSING, OperatorContext, Options, is_nil
from docquery.core.registry import OperatorFn
from docquery.operators.compare import compare, is_number


def accumulator_operators(ctx: OperatorContext) -> dict[str, OperatorFn]:
    """Build $sum, $avg, $min, $max, $first, $last, $push, $addToSet."""

    def _push(collection: list[Any], expr: Any, options: Options) -> list[Any]:
        if expr is None:
            return list(collection)
        values = [ctx.compute_value(obj, expr, None, options) for obj in collection]
        return [v for v in values if v is not MISSING]

    def _values(collection: list[Any], expr: Any, options: Options) -> list[Any]:
        # sibling operators share $push through the group handle
        return [v for v in ctx.group["$push"](collection, expr, options) if not is_nil(v)]

    def _sum(collection: list[Any], expr: Any, options: Options) -> Any:
        if not isinstance(collection, list):
            return 0
        return sum(v for v in _values(collection, expr, options) if is_number(v))

    def _avg(collection: list[Any], expr: Any, options: Options) -> Any:
        numbers = [v for v in _values(collection, expr, options) if is_number(v)]
        if not numbers:
            return None
        return sum(numbers) / len(numbers)

    def _min(collection: list[Any], expr: Any, options: Options) -> Any:
        values = _values(collection, expr, options)
        if not values:
            return None
        result = values[0]
        for v in values[1:]:
            if compare(v, result) < 0:
                result = v
        return result

    def _max(collection: list[Any], expr: Any, options: Options) -> Any:
        values = _values(collection, expr, options)
        if not values:
            return None
        result = values[0]
        for v in values[1:]:
            if compare(v, result) > 0:
                result = v
        return result

    def _first(collection: list[Any], expr: Any, options: Options) -> Any:
        if not collection:
            return MISSING
        if expr is None:
            return collection[0]
        return ctx.compute_value(collection[0], expr, None, options)

    def _last(collection: list[Any], expr: Any, options: Options) -> Any:
        if not collection:
            return MISSING
        if expr is None:
            return collection[-1]
        return ctx.compute_value(collection[-1], expr, None, options)

    def _add_to_set(collection: list[Any], expr: Any, options: Options) -> list[Any]:
        result: list[Any] = []
        for v in ctx.group["$push"](collection, expr, options):
            # compare keeps booleans apart from numbers
            if not any(compare(v, seen) == 0 for seen in result):
                result.append(v)
        return result

    return {
        "$addToSet": _add_to_set,
        "$avg": _avg,
        "$first": _first,
        "$last": _last,
        "$max": _max,
        "$min": _min,
        "$push": _push,
        "$sum": _sum,
    }
