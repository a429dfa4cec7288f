"""Aggregation pipeline execution.

A pipeline is a list of single-entry stage mappings, each naming a
registered PIPELINE operator:

    [
        {"$match": {"status": "active"}},
        {"$group": {"_id": "$region", "total": {"$sum": "$amount"}}},
    ]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from docquery.core import (
    ComputeOptions,
    InvalidExpression,
    OperatorCategory,
    OperatorRegistry,
    Options,
    default_registry,
)

logger = logging.getLogger(__name__)


class Aggregator:
    """Runs a pipeline of stages over a collection.

    Usage:
        aggregator = Aggregator([{"$match": {"a": {"$gt": 1}}}, {"$limit": 10}])
        results = aggregator.run(documents)
    """

    def __init__(
        self,
        pipeline: list[Mapping[str, Any]],
        options: Options | None = None,
        registry: OperatorRegistry | None = None,
    ):
        if not isinstance(pipeline, list):
            raise InvalidExpression("Pipeline must be a list of stages")
        self.pipeline = pipeline
        self.options = ComputeOptions.coerce(options)
        self.registry = registry or default_registry()
        self._stages = [self._stage(stage) for stage in pipeline]

    def _stage(self, stage: Any) -> tuple[str, Any]:
        if not isinstance(stage, Mapping) or len(stage) != 1:
            raise InvalidExpression(f"Invalid pipeline stage: {stage!r}")
        name, expr = next(iter(stage.items()))
        if self.registry.get_operator(OperatorCategory.PIPELINE, name) is None:
            raise InvalidExpression(f"Unknown pipeline operator: {name}")
        return name, expr

    def run(self, collection: Iterable[Any]) -> list[Any]:
        """Apply every stage in order and return the resulting documents."""
        documents = list(collection)
        for name, expr in self._stages:
            call = self.registry.get_operator(OperatorCategory.PIPELINE, name)
            documents = call(documents, expr, self.options)
            logger.debug("Stage %s produced %d documents", name, len(documents))
        return documents


def aggregate(
    collection: Iterable[Any],
    pipeline: list[Mapping[str, Any]],
    options: Options | None = None,
    registry: OperatorRegistry | None = None,
) -> list[Any]:
    """Run a pipeline over a collection.

    This is the main entry point for aggregation.
    """
    return Aggregator(pipeline, options, registry).run(collection)
