"""Pipeline stage operators.

Each stage receives (collection, expr, options) and returns a new list of
documents.
"""

import json
from collections.abc import Mapping
from typing import Any

from docquery.core import (
    MISSING,
    ComputeOptions,
    EvaluationError,
    InvalidExpression,
    InvalidGroupExpression,
    OperatorCategory,
    OperatorContext,
    is_nil,
    resolve,
)
from docquery.core.registry import OperatorFn
from docquery.operators.compare import is_number
from docquery.query import Query


def _set_path(obj: dict[str, Any], path: str, value: Any) -> None:
    """Assign value at a dotted path, creating intermediate mappings."""
    *parents, last = path.split(".")
    for segment in parents:
        child = obj.get(segment)
        if not isinstance(child, dict):
            child = {}
            obj[segment] = child
        obj = child
    obj[last] = value


def _unset_path(obj: dict[str, Any], path: str) -> None:
    """Remove the value at a dotted path, copying the mappings along it."""
    *parents, last = path.split(".")
    for segment in parents:
        child = obj.get(segment)
        if not isinstance(child, Mapping):
            return
        child = dict(child)
        obj[segment] = child
        obj = child
    obj.pop(last, None)


def _is_flag(value: Any) -> bool:
    return isinstance(value, bool) or is_number(value)


def _normalize_key(value: Any) -> Any:
    # 1 and 1.0 land in the same group
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Mapping):
        return {k: _normalize_key(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_key(v) for v in value]
    return value


def _group_key(value: Any) -> str:
    return json.dumps(_normalize_key(value), default=repr)


def _count(operator: str, expr: Any) -> int:
    if not isinstance(expr, int) or isinstance(expr, bool) or expr < 0:
        raise EvaluationError(f"{operator} expects a non-negative integer")
    return expr


def pipeline_operators(ctx: OperatorContext) -> dict[str, OperatorFn]:
    """Build $match, $project, $group, $redact, $limit, $skip."""

    def _match(collection: list[Any], expr: Any, options: ComputeOptions) -> list[Any]:
        return Query(expr, options, ctx.registry).find(collection)

    def _project_document(obj: Any, expr: Mapping[str, Any], options: ComputeOptions) -> dict[str, Any]:
        id_key = options.config.id_key
        fields = {k: v for k, v in expr.items() if k != id_key}

        if all(_is_flag(v) and not v for v in expr.values()):
            # exclusion mode
            excluded = dict(obj)
            for selector in expr:
                _unset_path(excluded, selector)
            return excluded

        result: dict[str, Any] = {}
        id_spec = expr.get(id_key, True)
        if _is_flag(id_spec):
            if id_spec and id_key in obj:
                result[id_key] = obj[id_key]
        else:
            fields = {id_key: id_spec, **fields}

        for selector, spec in fields.items():
            if _is_flag(spec):
                if not spec:
                    raise InvalidExpression(
                        f"Cannot exclude '{selector}' in an inclusion projection"
                    )
                value = resolve(obj, selector)
            elif isinstance(spec, Mapping) and len(spec) == 1 and ctx.registry.has_operator(
                next(iter(spec)), OperatorCategory.PROJECTION
            ):
                name, arg = next(iter(spec.items()))
                call = ctx.registry.get_operator(OperatorCategory.PROJECTION, name)
                value = call(obj, arg, selector, options)
            else:
                value = ctx.compute_value(obj, spec, None, options)

            # $$REMOVE and missing fields are left out
            if value is not MISSING:
                _set_path(result, selector, value)
        return result

    def _project(collection: list[Any], expr: Any, options: ComputeOptions) -> list[Any]:
        if not isinstance(expr, Mapping):
            raise InvalidExpression("$project specification must be a mapping")
        return [_project_document(obj, expr, options) for obj in collection]

    def _group(collection: list[Any], expr: Any, options: ComputeOptions) -> list[Any]:
        id_key = options.config.id_key
        if not isinstance(expr, Mapping) or id_key not in expr:
            raise InvalidGroupExpression(f"$group specification must include '{id_key}'")

        groups: dict[str, tuple[Any, list[Any]]] = {}
        for obj in collection:
            group_id = ctx.compute_value(obj, expr[id_key], None, options)
            if group_id is MISSING:
                group_id = None
            key = _group_key(group_id)
            if key not in groups:
                groups[key] = (group_id, [])
            groups[key][1].append(obj)

        results = []
        for group_id, members in groups.values():
            row = {id_key: group_id}
            for field, spec in expr.items():
                if field == id_key:
                    continue
                value = ctx.accumulate(members, field, spec, options)
                if value is not MISSING:
                    row[field] = value
            results.append(row)
        return results

    def _redact(collection: list[Any], expr: Any, options: ComputeOptions) -> list[Any]:
        results = []
        for obj in collection:
            # each document is its own root
            redacted = ctx.redact(obj, expr, ComputeOptions(config=options.config))
            if not is_nil(redacted):
                results.append(redacted)
        return results

    def _limit(collection: list[Any], expr: Any, options: ComputeOptions) -> list[Any]:
        return collection[:_count("$limit", expr)]

    def _skip(collection: list[Any], expr: Any, options: ComputeOptions) -> list[Any]:
        return collection[_count("$skip", expr):]

    return {
        "$group": _group,
        "$limit": _limit,
        "$match": _match,
        "$project": _project,
        "$redact": _redact,
        "$skip": _skip,
    }
