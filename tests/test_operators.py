"""Tests for the built-in operators.

Tests cover:
- Arithmetic: $add, $subtract, $multiply, $divide, $mod, $abs, $floor, $ceil
- Comparison and boolean: $cmp, $eq, $gt, ..., $and, $or, $not
- Conditionals: $cond, $ifNull, $literal
- Accumulators: $sum, $avg, $min, $max, $first, $last, $push, $addToSet
- Value ordering helpers
"""

import math

import pytest

from docquery.core import (
    MISSING,
    EvaluationError,
    ExpressionTypeError,
    OperatorRegistry,
)
from docquery.operators import register_all_builtins
from docquery.operators.compare import compare, is_number, truthy


@pytest.fixture
def evaluator():
    return register_all_builtins(OperatorRegistry()).evaluator


@pytest.fixture
def compute(evaluator):
    def run(expr, doc=None):
        return evaluator.compute_value(doc if doc is not None else {}, expr)

    return run


# =============================================================================
# Arithmetic
# =============================================================================


class TestArithmetic:
    def test_add(self, compute):
        assert compute({"$add": [1, 2, 3]}) == 6
        assert compute({"$add": ["$a", 0.5]}, {"a": 2}) == 2.5

    def test_add_null_propagates(self, compute):
        assert compute({"$add": [1, None]}) is None
        assert compute({"$add": [1, "$missing"]}) is None

    def test_add_rejects_strings(self, compute):
        with pytest.raises(ExpressionTypeError):
            compute({"$add": [1, "x"]})

    def test_subtract(self, compute):
        assert compute({"$subtract": ["$a", "$b"]}, {"a": 5, "b": 2}) == 3

    def test_subtract_needs_two_arguments(self, compute):
        with pytest.raises(EvaluationError):
            compute({"$subtract": [1, 2, 3]})

    def test_multiply(self, compute):
        assert compute({"$multiply": [2, 3, 4]}) == 24

    def test_divide(self, compute):
        assert compute({"$divide": [7, 2]}) == 3.5

    def test_divide_by_zero(self, compute):
        with pytest.raises(EvaluationError):
            compute({"$divide": [1, 0]})

    def test_mod_sign_follows_dividend(self, compute):
        assert compute({"$mod": [7, 3]}) == 1
        assert compute({"$mod": [-7, 3]}) == -1
        assert compute({"$mod": [7.5, 2]}) == 1.5

    def test_floor(self, compute):
        assert compute({"$floor": 2.7}) == 2
        assert compute({"$floor": "$a"}, {"a": -2.5}) == -3

    def test_floor_null(self, compute):
        assert compute({"$floor": None}) is None
        assert compute({"$floor": "$missing"}) is None

    def test_floor_nan(self, compute):
        assert math.isnan(compute({"$floor": float("nan")}))

    @pytest.mark.parametrize("value", ["abc", True, [1]])
    def test_floor_rejects_non_numbers(self, compute, value):
        with pytest.raises(ExpressionTypeError):
            compute({"$floor": {"$literal": value}})

    def test_ceil_and_abs(self, compute):
        assert compute({"$ceil": 2.1}) == 3
        assert compute({"$abs": -4}) == 4


# =============================================================================
# Comparison, boolean, conditional
# =============================================================================


class TestComparison:
    @pytest.mark.parametrize(
        "operator,expected",
        [("$eq", False), ("$ne", True), ("$gt", True), ("$gte", True), ("$lt", False), ("$lte", False)],
    )
    def test_numeric(self, compute, operator, expected):
        assert compute({operator: ["$a", 3]}, {"a": 5}) is expected

    def test_cmp(self, compute):
        assert compute({"$cmp": [1, 2]}) == -1
        assert compute({"$cmp": ["b", "a"]}) == 1
        assert compute({"$cmp": [2, 2.0]}) == 0

    def test_cross_type_order(self, compute):
        assert compute({"$lt": [None, 0]}) is True
        assert compute({"$lt": [100, "a"]}) is True
        assert compute({"$gt": [True, {"a": 1}]}) is True

    def test_requires_two_arguments(self, compute):
        with pytest.raises(EvaluationError):
            compute({"$eq": [1]})


class TestBoolean:
    def test_and(self, compute):
        assert compute({"$and": [True, 1, "x"]}) is True
        assert compute({"$and": [True, 0]}) is False

    def test_or(self, compute):
        assert compute({"$or": [False, None, "x"]}) is True
        assert compute({"$or": [False, "$missing"]}) is False

    def test_not(self, compute):
        assert compute({"$not": [False]}) is True
        assert compute({"$not": "$a"}, {"a": 1}) is False


class TestConditional:
    def test_cond_list_form(self, compute):
        expr = {"$cond": [{"$gte": ["$qty", 100]}, "bulk", "retail"]}
        assert compute(expr, {"qty": 150}) == "bulk"
        assert compute(expr, {"qty": 5}) == "retail"

    def test_cond_mapping_form(self, compute):
        expr = {"$cond": {"if": "$flag", "then": "$a", "else": "$b"}}
        assert compute(expr, {"flag": True, "a": 1, "b": 2}) == 1
        assert compute(expr, {"flag": False, "a": 1, "b": 2}) == 2

    def test_cond_missing_branch(self, compute):
        with pytest.raises(EvaluationError):
            compute({"$cond": {"if": True, "then": 1}})

    def test_if_null(self, compute):
        assert compute({"$ifNull": ["$missing", "default"]}) == "default"
        assert compute({"$ifNull": ["$a", "default"]}, {"a": 1}) == 1

    def test_literal(self, compute):
        assert compute({"$literal": "$a"}, {"a": 1}) == "$a"
        assert compute({"$literal": {"$add": [1, 2]}}) == {"$add": [1, 2]}


# =============================================================================
# Accumulators
# =============================================================================


class TestAccumulators:
    @pytest.fixture
    def collection(self):
        return [{"a": 3, "t": "x"}, {"a": 1, "t": "y"}, {"a": 2, "t": "x"}, {"t": "z"}]

    def test_sum_ignores_non_numbers(self, evaluator, collection):
        assert evaluator.accumulate(collection, "$sum", "$a") == 6
        assert evaluator.accumulate(collection, "$sum", "$t") == 0

    def test_avg(self, evaluator, collection):
        assert evaluator.accumulate(collection, "$avg", "$a") == 2
        assert evaluator.accumulate(collection, "$avg", "$missing") is None

    def test_min_max(self, evaluator, collection):
        assert evaluator.accumulate(collection, "$min", "$a") == 1
        assert evaluator.accumulate(collection, "$max", "$a") == 3
        assert evaluator.accumulate([], "$max", "$a") is None

    def test_first_last(self, evaluator, collection):
        assert evaluator.accumulate(collection, "$first", "$t") == "x"
        assert evaluator.accumulate(collection, "$last", "$t") == "z"
        assert evaluator.accumulate([], "$first", "$t") is MISSING

    def test_push_skips_missing(self, evaluator, collection):
        assert evaluator.accumulate(collection, "$push", "$a") == [3, 1, 2]

    def test_add_to_set(self, evaluator, collection):
        assert evaluator.accumulate(collection, "$addToSet", "$t") == ["x", "y", "z"]

    def test_add_to_set_keeps_booleans_apart(self, evaluator):
        docs = [{"a": 1}, {"a": True}, {"a": 1.0}, {"a": [1]}, {"a": [1.0]}]
        result = evaluator.accumulate(docs, "$addToSet", "$a")

        assert result == [1, True, [1]]
        assert result[1] is True

    def test_resolved_values(self, evaluator):
        assert evaluator.compute_value({"v": [5, 1, 5]}, {"$addToSet": "$v"}) == [5, 1]
        assert evaluator.compute_value({"v": [5, 1, 5]}, {"$first": "$v"}) == 5
        assert evaluator.compute_value({"v": [2, 4]}, {"$avg": "$v"}) == 3


# =============================================================================
# Helpers
# =============================================================================


class TestCompareHelpers:
    def test_is_number(self):
        assert is_number(1)
        assert is_number(1.5)
        assert not is_number(True)
        assert not is_number("1")

    def test_compare_lists(self):
        assert compare([1, 2], [1, 3]) == -1
        assert compare([1, 2], [1, 2]) == 0
        assert compare([1, 2, 0], [1, 2]) == 1

    def test_compare_mappings(self):
        assert compare({"a": 1}, {"a": 1}) == 0
        assert compare({"a": 1}, {"a": 2}) == -1

    def test_missing_sorts_before_null(self):
        assert compare(MISSING, None) == -1

    @pytest.mark.parametrize("value,expected", [(0, False), (None, False), (MISSING, False), ("", True), ([], True), (2, True)])
    def test_truthy(self, value, expected):
        assert truthy(value) is expected
