"""docquery: MongoDB-style expression and aggregation evaluation.

Usage:
    from docquery import aggregate, compute_value, register_all_builtins

    # At application startup
    register_all_builtins()

    compute_value({"a": 5}, {"$add": ["$a", 1]})  # 6
    aggregate(documents, [{"$match": {"status": "active"}}])
"""

from docquery.aggregator import Aggregator, aggregate
from docquery.core import (
    MISSING,
    ComputeOptions,
    Config,
    DuplicateOperator,
    EvaluationError,
    Evaluator,
    ExpressionTypeError,
    InvalidExpression,
    InvalidGroupExpression,
    InvalidOperatorName,
    OperatorCategory,
    OperatorContext,
    OperatorRegistry,
    Options,
    QueryError,
    RegistryError,
    RegistrySealedError,
    accumulate,
    add_operators,
    compute_value,
    default_registry,
    get_operator,
    redact,
    resolve,
    use_operators,
)
from docquery.operators import register_all_builtins
from docquery.query import Query

__all__ = [
    # Entry points
    "Aggregator",
    "Evaluator",
    "Query",
    "accumulate",
    "aggregate",
    "compute_value",
    "redact",
    "resolve",
    # Registry
    "OperatorCategory",
    "OperatorContext",
    "OperatorRegistry",
    "add_operators",
    "default_registry",
    "get_operator",
    "register_all_builtins",
    "use_operators",
    # Options
    "MISSING",
    "ComputeOptions",
    "Config",
    "Options",
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
]
