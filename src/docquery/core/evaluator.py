"""Evaluator for docquery aggregation expressions.

Interprets nested expressions against in-memory documents, dispatching to
the operators held by an OperatorRegistry.
"""

from __future__ import annotations

from typing import Any

from docquery.core.expression import (
    ExpressionNode,
    FieldPath,
    Literal,
    MappingExpr,
    OperatorCall,
    RedactVariableRef,
    SequenceExpr,
    SystemVariableRef,
    classify,
    classify_group,
)
from docquery.core.registry import OperatorRegistry, default_registry
from docquery.core.resolve import resolve
from docquery.core.types import (
    MISSING,
    ComputeOptions,
    ExpressionTypeError,
    InvalidGroupExpression,
    OperatorCategory,
    Options,
)
from docquery.core.variables import REDACT_VARIABLES, SYSTEM_VARIABLES


class Evaluator:
    """Evaluates expressions using the operators of one registry.

    Usage:
        evaluator = Evaluator(registry)
        total = evaluator.compute_value({"a": 2, "b": 3}, {"$add": ["$a", "$b"]})
    """

    def __init__(self, registry: OperatorRegistry):
        self.registry = registry

    def compute_value(
        self,
        obj: Any,
        expr: Any,
        operator: str | None = None,
        options: Options | None = None,
    ) -> Any:
        """Compute the value of expr using obj as context.

        Args:
            obj: The current document
            expr: The expression for the given field
            operator: Operator to apply to expr, if any
            options: Evaluation options; defaults to an "_id" id key

        Returns:
            The computed value. Paths that do not exist yield MISSING.

        Raises:
            InvalidExpression: If a mapping mixes an operator with other keys
            ExpressionTypeError: If an accumulator argument is not a list
        """
        options = ComputeOptions.coerce(options)

        call = self.registry.get_operator(OperatorCategory.EXPRESSION, operator)
        if call is not None:
            return call(obj, expr, options)

        # $group accumulator operators are also valid in expressions
        call = self.registry.get_operator(OperatorCategory.ACCUMULATOR, operator)
        if call is not None:
            values = self.compute_value(obj, expr, None, options)
            if not isinstance(values, list):
                raise ExpressionTypeError(f"{operator} expression must resolve to an array")
            # values are already resolved, hence no expression
            return call(values, None, options)

        return self._evaluate(obj, classify(expr, self.registry), options)

    def accumulate(
        self,
        collection: list[Any],
        field: str | None,
        expr: Any,
        options: Options | None = None,
    ) -> Any:
        """Reduce a collection according to a $group expression.

        Args:
            collection: The documents of one group
            field: The accumulator name or output field name
            expr: The accumulator argument or a mapping of accumulators

        Raises:
            InvalidGroupExpression: If a mapping mixes an accumulator with other
                keys, or expr is neither an accumulator call nor a mapping
        """
        options = ComputeOptions.coerce(options)

        call = self.registry.get_operator(OperatorCategory.ACCUMULATOR, field)
        if call is not None:
            return call(collection, expr, options)

        node = classify_group(expr, self.registry)
        if isinstance(node, OperatorCall):
            return self.accumulate(collection, node.name, node.argument, options)
        if isinstance(node, MappingExpr):
            return {
                key: self.accumulate(collection, key, value, options)
                for key, value in node.entries.items()
            }

        raise InvalidGroupExpression(
            f"Invalid $group expression for field '{field}': {expr!r} is not an accumulator"
        )

    def redact(self, obj: Any, expr: Any, options: Options | None = None) -> Any:
        """Redact a document.

        Returns:
            The redacted document, or MISSING if it was pruned. The input is
            never modified.
        """
        options = ComputeOptions.coerce(options)
        result = self.compute_value(obj, expr, None, options)
        if isinstance(result, str) and result in REDACT_VARIABLES:
            return REDACT_VARIABLES[result](self, obj, expr, options.bind_root(obj))
        return result

    # -------------------------------------------------------------------------
    # Node type evaluators
    # -------------------------------------------------------------------------

    def _evaluate(self, obj: Any, node: ExpressionNode, options: ComputeOptions) -> Any:
        method = getattr(self, f"_eval_{type(node).__name__.lower()}")
        return method(obj, node, options)

    def _eval_literal(self, obj: Any, node: Literal, options: ComputeOptions) -> Any:
        return node.value

    def _eval_fieldpath(self, obj: Any, node: FieldPath, options: ComputeOptions) -> Any:
        return resolve(obj, node.path)

    def _eval_systemvariableref(self, obj: Any, node: SystemVariableRef, options: ComputeOptions) -> Any:
        # an unbound root defaults to the current document
        value = SYSTEM_VARIABLES[node.name](self, obj, None, options.bind_root(obj))
        if not node.path:
            return value
        return resolve(value, node.path)

    def _eval_redactvariableref(self, obj: Any, node: RedactVariableRef, options: ComputeOptions) -> Any:
        # interpreted later by redact()
        return node.name

    def _eval_sequenceexpr(self, obj: Any, node: SequenceExpr, options: ComputeOptions) -> list[Any]:
        values = [self.compute_value(obj, item, None, options) for item in node.items]
        return [None if value is MISSING else value for value in values]

    def _eval_mappingexpr(self, obj: Any, node: MappingExpr, options: ComputeOptions) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in node.entries.items():
            computed = self.compute_value(obj, value, key, options)
            if computed is not MISSING:
                result[key] = computed
        return result

    def _eval_operatorcall(self, obj: Any, node: OperatorCall, options: ComputeOptions) -> Any:
        return self.compute_value(obj, node.argument, node.name, options)


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------


def compute_value(obj: Any, expr: Any, operator: str | None = None, options: Options | None = None) -> Any:
    """Compute an expression using the process-wide registry.

    Example:
        register_all_builtins()
        compute_value({"a": {"b": 1}}, "$$ROOT.a.b")
        # 1
    """
    return default_registry().evaluator.compute_value(obj, expr, operator, options)


def accumulate(collection: list[Any], field: str | None, expr: Any, options: Options | None = None) -> Any:
    """Reduce a collection using the process-wide registry."""
    return default_registry().evaluator.accumulate(collection, field, expr, options)


def redact(obj: Any, expr: Any, options: Options | None = None) -> Any:
    """Redact a document using the process-wide registry."""
    return default_registry().evaluator.redact(obj, expr, options)
