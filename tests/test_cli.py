"""Tests for docquery CLI commands."""

import json

import pytest
from click.testing import CliRunner

from docquery.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def documents_file(tmp_path):
    path = tmp_path / "documents.json"
    path.write_text(
        json.dumps(
            [
                {"_id": 1, "region": "north", "amount": 10},
                {"_id": 2, "region": "south", "amount": 5},
                {"_id": 3, "region": "north", "amount": 7},
            ]
        )
    )
    return path


class TestAggregate:
    def test_yaml_pipeline(self, runner, tmp_path, documents_file):
        pipeline = tmp_path / "pipeline.yaml"
        pipeline.write_text(
            "- $match:\n"
            "    amount: {$gte: 6}\n"
            "- $group:\n"
            "    _id: $region\n"
            "    total: {$sum: $amount}\n"
        )

        result = runner.invoke(cli, ["aggregate", str(pipeline), str(documents_file)])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [{"_id": "north", "total": 17}]

    def test_documents_from_stdin(self, runner, tmp_path):
        pipeline = tmp_path / "pipeline.json"
        pipeline.write_text(json.dumps([{"$project": {"_id": 0, "x": {"$add": ["$a", 1]}}}]))

        result = runner.invoke(cli, ["aggregate", str(pipeline)], input=json.dumps([{"a": 1}]))

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [{"x": 2}]

    def test_id_key_option(self, runner, tmp_path, documents_file):
        pipeline = tmp_path / "pipeline.json"
        pipeline.write_text(json.dumps([{"$group": {"key": "$region", "n": {"$sum": 1}}}]))

        result = runner.invoke(
            cli, ["--id-key", "key", "aggregate", str(pipeline), str(documents_file)]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [{"key": "north", "n": 2}, {"key": "south", "n": 1}]

    def test_invalid_pipeline_reports_error(self, runner, tmp_path, documents_file):
        pipeline = tmp_path / "pipeline.json"
        pipeline.write_text(json.dumps([{"$nope": 1}]))

        result = runner.invoke(cli, ["aggregate", str(pipeline), str(documents_file)])

        assert result.exit_code == 1
        assert "Unknown pipeline operator" in result.output

    def test_unparseable_pipeline(self, runner, tmp_path, documents_file):
        pipeline = tmp_path / "pipeline.yaml"
        pipeline.write_text("- [unclosed\n")

        result = runner.invoke(cli, ["aggregate", str(pipeline), str(documents_file)])

        assert result.exit_code == 1
        assert "cannot parse pipeline" in result.output


class TestFind:
    def test_find(self, runner, tmp_path, documents_file):
        criteria = tmp_path / "criteria.json"
        criteria.write_text(json.dumps({"region": "north"}))

        result = runner.invoke(cli, ["find", str(criteria), str(documents_file)])

        assert result.exit_code == 0, result.output
        assert [doc["_id"] for doc in json.loads(result.output)] == [1, 3]

    def test_single_document_input(self, runner, tmp_path):
        criteria = tmp_path / "criteria.json"
        criteria.write_text(json.dumps({"a": {"$exists": True}}))

        result = runner.invoke(cli, ["find", str(criteria)], input=json.dumps({"a": 1}))

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [{"a": 1}]

    def test_invalid_documents(self, runner, tmp_path):
        criteria = tmp_path / "criteria.json"
        criteria.write_text(json.dumps({}))

        result = runner.invoke(cli, ["find", str(criteria)], input="42")

        assert result.exit_code == 1
        assert "documents must be a list" in result.output


class TestOperators:
    def test_lists_all_categories(self, runner):
        result = runner.invoke(cli, ["operators"])

        assert result.exit_code == 0
        for category in ("accumulator", "expression", "pipeline", "projection", "query"):
            assert category in result.output
        assert "$floor" in result.output

    def test_filter_by_category(self, runner):
        result = runner.invoke(cli, ["operators", "--category", "projection"])

        assert result.exit_code == 0
        assert "$slice" in result.output
        assert "$floor" not in result.output
