"""Query and aggregation CLI commands."""

import json
import logging
from typing import IO, Any

import click
import yaml

from docquery.aggregator import Aggregator
from docquery.core import QueryError
from docquery.query import Query

logger = logging.getLogger(__name__)


def _load(stream: IO[str], what: str) -> Any:
    """Parse a YAML or JSON document from an open file."""
    try:
        return yaml.safe_load(stream)
    except yaml.YAMLError as e:
        click.echo(click.style(f"Error: cannot parse {what}: {e}", fg="red"), err=True)
        raise SystemExit(1)


def _load_documents(stream: IO[str]) -> list[Any]:
    documents = _load(stream, "documents")
    if documents is None:
        logger.warning("No documents found in %s", getattr(stream, "name", "input"))
        return []
    if isinstance(documents, dict):
        return [documents]
    if not isinstance(documents, list):
        click.echo(click.style("Error: documents must be a list or a mapping", fg="red"), err=True)
        raise SystemExit(1)
    return documents


def _emit(results: list[Any], indent: int | None) -> None:
    click.echo(json.dumps(results, indent=indent, default=str))


@click.command()
@click.argument("pipeline_file", type=click.File("r"))
@click.argument("documents_file", type=click.File("r"), default="-")
@click.option("--indent", default=2, show_default=True, help="JSON output indentation.")
@click.pass_obj
def aggregate(obj: dict[str, Any], pipeline_file: IO[str], documents_file: IO[str], indent: int):
    """Run an aggregation pipeline over a list of documents.

    PIPELINE_FILE holds a list of stages; DOCUMENTS_FILE (default: stdin)
    holds the documents. Both may be YAML or JSON.
    """
    pipeline = _load(pipeline_file, "pipeline")
    documents = _load_documents(documents_file)

    try:
        results = Aggregator(pipeline, obj["options"], obj["registry"]).run(documents)
    except QueryError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    _emit(results, indent)


@click.command()
@click.argument("criteria_file", type=click.File("r"))
@click.argument("documents_file", type=click.File("r"), default="-")
@click.option("--indent", default=2, show_default=True, help="JSON output indentation.")
@click.pass_obj
def find(obj: dict[str, Any], criteria_file: IO[str], documents_file: IO[str], indent: int):
    """Print the documents matching query criteria."""
    criteria = _load(criteria_file, "criteria")
    documents = _load_documents(documents_file)

    try:
        results = Query(criteria or {}, obj["options"], obj["registry"]).find(documents)
    except QueryError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    _emit(results, indent)
