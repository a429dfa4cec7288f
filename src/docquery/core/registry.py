"""Operator registry for docquery.

Maps (category, name) to an operator implementation. Operators are added
through add_operators(), which hands each factory a capability bundle so
leaf operators can evaluate sub-expressions without importing the evaluator.

Example:
    registry = OperatorRegistry()
    registry.add_operators(
        OperatorCategory.EXPRESSION,
        lambda ctx: {
            "$double": lambda obj, expr, options: (
                ctx.compute_value(obj, expr, None, options) * 2
            ),
        },
    )
    registry.seal()
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from docquery.core.resolve import resolve
from docquery.core.types import (
    DuplicateOperator,
    InvalidOperatorName,
    OperatorCategory,
    Options,
    RegistrySealedError,
)

if TYPE_CHECKING:
    from docquery.core.evaluator import Evaluator

logger = logging.getLogger(__name__)

OPERATOR_NAME = re.compile(r"^\$[a-zA-Z0-9_]*$")

OperatorFn = Callable[..., Any]
OperatorFactory = Callable[["OperatorContext"], Mapping[str, OperatorFn]]


@dataclass
class OperatorContext:
    """Capabilities handed to an operator factory.

    Attributes:
        registry: The registry the operators are being added to
        group: Read-only view of the raw operators returned by the same
            factory, populated once the factory returns
        state: Mutable state shared between operators of one factory
    """

    registry: OperatorRegistry
    group: Mapping[str, OperatorFn] = field(default_factory=lambda: MappingProxyType({}))
    state: dict[str, Any] = field(default_factory=dict)

    def compute_value(self, obj: Any, expr: Any, operator: str | None = None, options: Options | None = None) -> Any:
        return self.registry.evaluator.compute_value(obj, expr, operator, options)

    def accumulate(self, collection: list[Any], name: str | None, expr: Any, options: Options | None = None) -> Any:
        return self.registry.evaluator.accumulate(collection, name, expr, options)

    def redact(self, obj: Any, expr: Any, options: Options | None = None) -> Any:
        return self.registry.evaluator.redact(obj, expr, options)

    @staticmethod
    def resolve(obj: Any, selector: str, unwrap_array: bool = False) -> Any:
        return resolve(obj, selector, unwrap_array=unwrap_array)


class OperatorRegistry:
    """Registry of operators by category.

    Registration happens once, before evaluation starts. After seal() the
    registry is read-only. There is no removal operation.
    """

    def __init__(self) -> None:
        self._operators: dict[OperatorCategory, dict[str, OperatorFn]] = {
            category: {} for category in OperatorCategory
        }
        self._sealed = False
        self._evaluator: Evaluator | None = None

    @property
    def evaluator(self) -> Evaluator:
        """Evaluator bound to this registry."""
        if self._evaluator is None:
            from docquery.core.evaluator import Evaluator

            self._evaluator = Evaluator(self)
        return self._evaluator

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """End the registration phase."""
        self._sealed = True
        logger.debug(
            "Operator registry sealed with %d operators",
            sum(len(ops) for ops in self._operators.values()),
        )

    def get_operator(self, category: OperatorCategory, name: Any) -> OperatorFn | None:
        """Return the operator implementation, or None if not registered."""
        if not isinstance(name, str):
            return None
        return self._operators[category].get(name)

    def has_operator(self, name: Any, *categories: OperatorCategory) -> bool:
        """Check whether name is registered in any of the given categories."""
        return any(self.get_operator(c, name) is not None for c in categories)

    def use_operators(self, category: OperatorCategory, operators: Mapping[str, OperatorFn]) -> None:
        """Merge fully wrapped operators into a category, overwriting on collision."""
        self._check_not_sealed()
        self._operators[category].update(operators)

    def add_operators(self, category: OperatorCategory, factory: OperatorFactory) -> None:
        """Add new operators built by factory.

        Args:
            category: The operator category to extend
            factory: Callable receiving an OperatorContext and returning a
                mapping of operator name to raw implementation

        Raises:
            InvalidOperatorName: If a name does not match ^\\$[A-Za-z0-9_]*$
            DuplicateOperator: If a name is already registered in category
            RegistrySealedError: If the registry has been sealed
        """
        self._check_not_sealed()

        context = OperatorContext(registry=self)
        new_operators = dict(factory(context))
        context.group = MappingProxyType(new_operators)

        for name in new_operators:
            if not isinstance(name, str) or not OPERATOR_NAME.match(name):
                raise InvalidOperatorName(name)
            if self.get_operator(category, name) is not None:
                raise DuplicateOperator(name, category)

        wrapped = {name: _wrap(category, fn) for name, fn in new_operators.items()}
        self.use_operators(category, wrapped)
        logger.debug(
            "Registered %s operators: %s", category.value, ", ".join(sorted(wrapped))
        )

    def list_operators(self, category: OperatorCategory) -> list[str]:
        """List registered operator names in a category."""
        return sorted(self._operators[category])

    def export_documentation(self) -> dict[str, list[str]]:
        """Export registered operator names keyed by category value."""
        return {
            category.value: self.list_operators(category) for category in OperatorCategory
        }

    def _check_not_sealed(self) -> None:
        if self._sealed:
            raise RegistrySealedError("Operator registry is sealed; register operators at startup")


def _wrap(category: OperatorCategory, fn: OperatorFn) -> OperatorFn:
    """Adapt a raw operator to the calling convention of its category."""
    if category is OperatorCategory.QUERY:

        def query_operator(selector: str, value: Any, options: Options | None) -> Callable[[Any], bool]:
            def predicate(obj: Any) -> bool:
                # value of field must be fully resolved
                lhs = resolve(obj, selector, unwrap_array=True)
                return fn(selector, lhs, value, options)

            return predicate

        return query_operator

    if category is OperatorCategory.PROJECTION:

        def projection_operator(obj: Any, expr: Any, selector: str, options: Options | None) -> Any:
            lhs = resolve(obj, selector)
            return fn(selector, lhs, expr, options)

        return projection_operator

    return fn


# -----------------------------------------------------------------------------
# Process-wide registry
# -----------------------------------------------------------------------------

_default_registry: OperatorRegistry | None = None


def default_registry() -> OperatorRegistry:
    """Return the process-wide registry, creating it empty on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = OperatorRegistry()
    return _default_registry


def get_operator(category: OperatorCategory, name: str) -> OperatorFn | None:
    return default_registry().get_operator(category, name)


def use_operators(category: OperatorCategory, operators: Mapping[str, OperatorFn]) -> None:
    default_registry().use_operators(category, operators)


def add_operators(category: OperatorCategory, factory: OperatorFactory) -> None:
    default_registry().add_operators(category, factory)
