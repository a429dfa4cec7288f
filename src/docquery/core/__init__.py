"""Expression and aggregation evaluation core.

This module provides:
- OperatorRegistry: Registry for operators by category
- Evaluator: compute_value, accumulate and redact over documents
- resolve: Dotted field-path resolution
- Options, errors and the MISSING marker
"""

from docquery.core.evaluator import Evaluator, accumulate, compute_value, redact
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
from docquery.core.registry import (
    OperatorContext,
    OperatorRegistry,
    add_operators,
    default_registry,
    get_operator,
    use_operators,
)
from docquery.core.resolve import resolve
from docquery.core.types import (
    MISSING,
    ComputeOptions,
    Config,
    DuplicateOperator,
    EvaluationError,
    ExpressionTypeError,
    InvalidExpression,
    InvalidGroupExpression,
    InvalidOperatorName,
    OperatorCategory,
    Options,
    QueryError,
    RegistryError,
    RegistrySealedError,
    is_missing,
    is_nil,
)
from docquery.core.variables import REDACT_VARIABLES, SYSTEM_VARIABLES

__all__ = [
    # Evaluator
    "Evaluator",
    "accumulate",
    "compute_value",
    "redact",
    # Expressions
    "ExpressionNode",
    "FieldPath",
    "Literal",
    "MappingExpr",
    "OperatorCall",
    "RedactVariableRef",
    "SequenceExpr",
    "SystemVariableRef",
    "classify",
    "classify_group",
    # Registry
    "OperatorContext",
    "OperatorRegistry",
    "add_operators",
    "default_registry",
    "get_operator",
    "use_operators",
    # Resolution
    "resolve",
    # Types
    "MISSING",
    "ComputeOptions",
    "Config",
    "OperatorCategory",
    "Options",
    "is_missing",
    "is_nil",
    # Errors
    "DuplicateOperator",
    "EvaluationError",
    "ExpressionTypeError",
    "InvalidExpression",
    "InvalidGroupExpression",
    "InvalidOperatorName",
    "QueryError",
    "RegistryError",
    "RegistrySealedError",
    # Variables
    "REDACT_VARIABLES",
    "SYSTEM_VARIABLES",
]
