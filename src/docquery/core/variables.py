"""Built-in variables consulted during evaluation.

System variables ($$ROOT, $$CURRENT, $$REMOVE) resolve against the
evaluation context. Redact variables ($$KEEP, $$PRUNE, $$DESCEND) are
returned as literals by compute_value() and only interpreted by redact().

Every handler takes (evaluator, obj, expr, options).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from docquery.core.types import MISSING, ComputeOptions, is_nil

if TYPE_CHECKING:
    from docquery.core.evaluator import Evaluator

VariableFn = Callable[["Evaluator", Any, Any, ComputeOptions], Any]


# -----------------------------------------------------------------------------
# System variables
# -----------------------------------------------------------------------------


def _root(evaluator: Evaluator, obj: Any, expr: Any, options: ComputeOptions) -> Any:
    return options.root


def _current(evaluator: Evaluator, obj: Any, expr: Any, options: ComputeOptions) -> Any:
    return obj


def _remove(evaluator: Evaluator, obj: Any, expr: Any, options: ComputeOptions) -> Any:
    return MISSING


SYSTEM_VARIABLES: dict[str, VariableFn] = {
    "$$ROOT": _root,
    "$$CURRENT": _current,
    "$$REMOVE": _remove,
}


# -----------------------------------------------------------------------------
# Redact variables
# -----------------------------------------------------------------------------


def _keep(evaluator: Evaluator, obj: Any, expr: Any, options: ComputeOptions) -> Any:
    return obj


def _prune(evaluator: Evaluator, obj: Any, expr: Any, options: ComputeOptions) -> Any:
    return MISSING


def _descend(evaluator: Evaluator, obj: Any, expr: Any, options: ComputeOptions) -> Any:
    """Redact nested documents of obj.

    Only traverses when expr holds a $cond. Returns a new mapping; obj is
    left untouched.
    """
    if not isinstance(expr, Mapping) or "$cond" not in expr:
        return obj
    if not isinstance(obj, Mapping):
        return obj

    result: dict[str, Any] = {}
    for key, current in obj.items():
        if isinstance(current, list):
            redacted: Any = []
            for elem in current:
                if isinstance(elem, Mapping):
                    elem = evaluator.redact(elem, expr, options)
                if not is_nil(elem):
                    redacted.append(elem)
        elif isinstance(current, Mapping):
            redacted = evaluator.redact(current, expr, options)
        else:
            result[key] = current
            continue

        # pruned fields are dropped
        if not is_nil(redacted):
            result[key] = redacted
    return result


REDACT_VARIABLES: dict[str, VariableFn] = {
    "$$KEEP": _keep,
    "$$PRUNE": _prune,
    "$$DESCEND": _descend,
}
