"""docquery CLI entry point."""

import logging

import click

from docquery.core import Config, ComputeOptions, OperatorRegistry
from docquery.operators import register_all_builtins


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.option(
    "--id-key",
    default=None,
    help="Field used as the document identifier (default: $DOCQUERY_ID_KEY or _id).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, id_key: str | None):
    """Evaluate MongoDB-style queries and pipelines over JSON/YAML documents."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    config = Config(id_key=id_key) if id_key else Config.from_env()
    registry = register_all_builtins(OperatorRegistry())
    registry.seal()

    ctx.obj = {"options": ComputeOptions(config=config), "registry": registry}


# Register subcommands
from docquery.cli.operators_cmd import operators  # noqa: E402
from docquery.cli.run_cmd import aggregate, find  # noqa: E402

cli.add_command(aggregate)
cli.add_command(find)
cli.add_command(operators)
