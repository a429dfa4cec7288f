"""Query criteria matching built on the QUERY operators.

Criteria are mappings of field selectors to values or operator mappings:

    {"status": "active", "age": {"$gte": 18}, "$or": [{"a": 1}, {"b": 2}]}

A plain value is shorthand for {"$eq": value}.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from docquery.core import (
    ComputeOptions,
    EvaluationError,
    OperatorCategory,
    OperatorRegistry,
    Options,
    default_registry,
)

Predicate = Callable[[Any], bool]

LOGICAL_OPERATORS = ("$and", "$or", "$nor")


class Query:
    """Compiled query criteria.

    Usage:
        query = Query({"a": {"$gt": 3}})
        query.test({"a": 5})  # True
        adults = query.find(people)
    """

    def __init__(
        self,
        criteria: Mapping[str, Any],
        options: Options | None = None,
        registry: OperatorRegistry | None = None,
    ):
        if not isinstance(criteria, Mapping):
            raise EvaluationError(f"Query criteria must be a mapping, got {type(criteria).__name__}")
        self.criteria = criteria
        self.options = ComputeOptions.coerce(options)
        self.registry = registry or default_registry()
        self._predicates = self._compile(criteria)

    def test(self, obj: Any) -> bool:
        """Check whether a document satisfies the criteria."""
        return all(predicate(obj) for predicate in self._predicates)

    def find(self, collection: Iterable[Any]) -> list[Any]:
        """Return the documents that satisfy the criteria, in order."""
        return [obj for obj in collection if self.test(obj)]

    # -------------------------------------------------------------------------
    # Compilation
    # -------------------------------------------------------------------------

    def _compile(self, criteria: Mapping[str, Any]) -> list[Predicate]:
        predicates: list[Predicate] = []
        for selector, expr in criteria.items():
            if selector in LOGICAL_OPERATORS:
                predicates.append(self._compile_logical(selector, expr))
            elif selector.startswith("$"):
                raise EvaluationError(f"Unknown top-level query operator: {selector}")
            else:
                predicates.extend(self._compile_field(selector, expr))
        return predicates

    def _compile_logical(self, operator: str, expr: Any) -> Predicate:
        if not isinstance(expr, list) or not expr:
            raise EvaluationError(f"{operator} expects a non-empty array")
        queries = [Query(criteria, self.options, self.registry) for criteria in expr]

        if operator == "$and":
            return lambda obj: all(q.test(obj) for q in queries)
        if operator == "$or":
            return lambda obj: any(q.test(obj) for q in queries)
        return lambda obj: not any(q.test(obj) for q in queries)

    def _compile_field(self, selector: str, expr: Any) -> list[Predicate]:
        if _is_operator_mapping(expr):
            conditions = list(expr.items())
        else:
            conditions = [("$eq", expr)]

        predicates = []
        for name, value in conditions:
            call = self.registry.get_operator(OperatorCategory.QUERY, name)
            if call is None:
                raise EvaluationError(f"Unknown query operator: {name}")
            predicates.append(call(selector, value, self.options))
        return predicates


def _is_operator_mapping(expr: Any) -> bool:
    return (
        isinstance(expr, Mapping)
        and len(expr) > 0
        and all(isinstance(key, str) and key.startswith("$") for key in expr)
    )
