"""Expression classification.

Raw expressions are plain nested data (scalars, lists, dicts). Before
evaluation each level is classified once into one of the node types below,
which is where the single-operator-per-mapping rule is enforced.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from docquery.core.types import (
    InvalidExpression,
    InvalidGroupExpression,
    OperatorCategory,
)
from docquery.core.variables import REDACT_VARIABLES, SYSTEM_VARIABLES

if TYPE_CHECKING:
    from docquery.core.registry import OperatorRegistry


# -----------------------------------------------------------------------------
# Node Types
# -----------------------------------------------------------------------------


@dataclass
class ExpressionNode:
    """Base class for classified expressions."""
    pass


@dataclass
class Literal(ExpressionNode):
    """A scalar returned as is."""
    value: Any


@dataclass
class FieldPath(ExpressionNode):
    """A field reference such as "$a.b", stored without the leading "$"."""
    path: str


@dataclass
class SystemVariableRef(ExpressionNode):
    """A system variable, optionally followed by a path ("$$ROOT.a.b")."""
    name: str
    path: str = ""


@dataclass
class RedactVariableRef(ExpressionNode):
    """One of $$KEEP, $$PRUNE, $$DESCEND."""
    name: str


@dataclass
class SequenceExpr(ExpressionNode):
    """A list of sub-expressions."""
    items: list[Any]


@dataclass
class MappingExpr(ExpressionNode):
    """A mapping of field names to sub-expressions, none of them operators."""
    entries: Mapping[str, Any]


@dataclass
class OperatorCall(ExpressionNode):
    """A single-entry mapping whose key is a registered operator."""
    name: str
    argument: Any


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------


def _describe(expr: Any) -> str:
    return json.dumps(expr, default=str)


def _classify_mapping(
    expr: Mapping[str, Any],
    registry: OperatorRegistry,
    categories: tuple[OperatorCategory, ...],
    error: type[Exception],
    label: str,
) -> ExpressionNode:
    for key, value in expr.items():
        if registry.has_operator(key, *categories):
            # one operator per expression
            if len(expr) != 1:
                raise error(f"Invalid {label} expression '{_describe(expr)}'")
            return OperatorCall(name=key, argument=value)
    return MappingExpr(entries=expr)


def classify(expr: Any, registry: OperatorRegistry) -> ExpressionNode:
    """Classify an aggregation expression.

    Raises:
        InvalidExpression: If a mapping has an expression or accumulator
            operator key alongside other keys
    """
    if isinstance(expr, str) and expr.startswith("$"):
        if expr in REDACT_VARIABLES:
            return RedactVariableRef(name=expr)

        head, _, rest = expr.partition(".")
        if head in SYSTEM_VARIABLES:
            return SystemVariableRef(name=head, path=rest)
        return FieldPath(path=expr[1:])

    if isinstance(expr, list):
        return SequenceExpr(items=expr)

    if isinstance(expr, Mapping):
        return _classify_mapping(
            expr,
            registry,
            (OperatorCategory.EXPRESSION, OperatorCategory.ACCUMULATOR),
            InvalidExpression,
            "aggregation",
        )

    return Literal(value=expr)


def classify_group(expr: Any, registry: OperatorRegistry) -> ExpressionNode:
    """Classify a $group specification.

    Only mappings are meaningful here; anything else is returned as a Literal
    for the caller to reject.

    Raises:
        InvalidGroupExpression: If a mapping has an accumulator key alongside
            other keys
    """
    if isinstance(expr, Mapping):
        return _classify_mapping(
            expr,
            registry,
            (OperatorCategory.ACCUMULATOR,),
            InvalidGroupExpression,
            "$group",
        )
    return Literal(value=expr)
