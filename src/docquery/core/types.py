"""Core types shared by the docquery evaluators.

Defines operator categories, the absent-value marker, evaluation options,
and the error taxonomy raised by the registry and the evaluators.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class OperatorCategory(Enum):
    """Operator groups. The category decides the calling convention."""

    ACCUMULATOR = "accumulator"
    EXPRESSION = "expression"
    PIPELINE = "pipeline"
    PROJECTION = "projection"
    QUERY = "query"


class _Missing:
    """Marker for a value that is absent, as opposed to an explicit null."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Missing:
        return self


MISSING = _Missing()


def is_missing(value: Any) -> bool:
    return value is MISSING


def is_nil(value: Any) -> bool:
    """True for an explicit null or an absent value."""
    return value is None or value is MISSING


# -----------------------------------------------------------------------------
# Options
# -----------------------------------------------------------------------------


@dataclass
class Config:
    """Settings threaded through every evaluation.

    Attributes:
        id_key: Field treated as the document identifier by consumers
    """

    id_key: str = "_id"

    @classmethod
    def from_env(cls) -> Config:
        """Create config from environment variables.

        Resolution order:
        1. DOCQUERY_ID_KEY env var
        2. Default: "_id"
        """
        id_key = os.environ.get("DOCQUERY_ID_KEY")
        if id_key:
            return cls(id_key=id_key)
        return cls()


@dataclass
class Options:
    """Options passed down to every operator."""

    config: Config = field(default_factory=Config)


@dataclass
class ComputeOptions(Options):
    """Options for compute_value() and redact().

    Attributes:
        root: The top-level document of the current evaluation chain, bound
            the first time a system variable is resolved
    """

    root: Any = None

    @classmethod
    def coerce(cls, options: Options | Mapping[str, Any] | None) -> ComputeOptions:
        """Build ComputeOptions from None, a mapping, plain Options, or ComputeOptions.

        A mapping may carry "config" (a Config or a mapping with "id_key") and
        "root"; missing entries take their defaults.
        """
        if options is None:
            return cls()
        if isinstance(options, Mapping):
            config = options.get("config")
            if isinstance(config, Mapping):
                config = Config(id_key=config.get("id_key", "_id"))
            return cls(config=config or Config(), root=options.get("root"))
        if isinstance(options, ComputeOptions):
            if options.config is None:
                options.config = Config()
            return options
        return cls(config=options.config or Config())

    def bind_root(self, document: Any) -> ComputeOptions:
        """Return options with root bound, keeping an existing binding."""
        if self.root is not None:
            return self
        return replace(self, root=document)


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------


class QueryError(Exception):
    """Base class for all docquery errors."""
    pass


class RegistryError(QueryError):
    """Malformed operator registration."""
    pass


class InvalidOperatorName(RegistryError):
    """Operator name does not match ^\\$[A-Za-z0-9_]*$."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid operator name {name}")


class DuplicateOperator(RegistryError):
    """Operator already registered in its category."""

    def __init__(self, name: str, category: OperatorCategory):
        self.name = name
        self.category = category
        super().__init__(f"{name} already exists for '{category.value}' operators")


class RegistrySealedError(RegistryError):
    """Registration attempted after the registration phase ended."""
    pass


class EvaluationError(QueryError):
    """Malformed expression supplied at evaluation time."""
    pass


class InvalidExpression(EvaluationError):
    """An expression mapping mixes an operator key with other keys."""
    pass


class InvalidGroupExpression(EvaluationError):
    """A group specification is malformed."""
    pass


class ExpressionTypeError(EvaluationError, TypeError):
    """An operator input has the wrong type."""
    pass
