"""Built-in operators for docquery.

Call register_all_builtins() once at application startup, before any
evaluation. Registering twice into the same registry raises
DuplicateOperator.

Categories:
- Expression: $abs $add $ceil $divide $floor $mod $multiply $subtract,
  $cmp $eq $ne $gt $gte $lt $lte, $and $or $not, $cond $ifNull $literal
- Accumulator: $sum $avg $min $max $first $last $push $addToSet
- Query: $eq $ne $gt $gte $lt $lte $in $nin $exists
- Projection: $slice
- Pipeline: $match $project $group $redact $limit $skip
"""

from docquery.core import OperatorCategory, OperatorRegistry, default_registry
from docquery.operators.accumulator import accumulator_operators
from docquery.operators.arithmetic import arithmetic_operators
from docquery.operators.logic import (
    boolean_operators,
    comparison_operators,
    conditional_operators,
)
from docquery.operators.pipeline import pipeline_operators
from docquery.operators.projection import projection_operators
from docquery.operators.query import query_operators


def register_all_builtins(registry: OperatorRegistry | None = None) -> OperatorRegistry:
    """Register all built-in operators.

    Args:
        registry: Target registry; defaults to the process-wide registry

    Returns:
        The registry the operators were added to
    """
    registry = registry or default_registry()
    registry.add_operators(OperatorCategory.EXPRESSION, arithmetic_operators)
    registry.add_operators(OperatorCategory.EXPRESSION, comparison_operators)
    registry.add_operators(OperatorCategory.EXPRESSION, boolean_operators)
    registry.add_operators(OperatorCategory.EXPRESSION, conditional_operators)
    registry.add_operators(OperatorCategory.ACCUMULATOR, accumulator_operators)
    registry.add_operators(OperatorCategory.QUERY, query_operators)
    registry.add_operators(OperatorCategory.PROJECTION, projection_operators)
    registry.add_operators(OperatorCategory.PIPELINE, pipeline_operators)
    return registry


__all__ = [
    "accumulator_operators",
    "arithmetic_operators",
    "boolean_operators",
    "comparison_operators",
    "conditional_operators",
    "pipeline_operators",
    "projection_operators",
    "query_operators",
    "register_all_builtins",
]
