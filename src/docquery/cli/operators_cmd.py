"""Operator listing CLI command."""

from typing import Any

import click

from docquery.core import OperatorCategory


@click.command()
@click.option(
    "--category",
    type=click.Choice([c.value for c in OperatorCategory]),
    default=None,
    help="Only list operators of this category.",
)
@click.pass_obj
def operators(obj: dict[str, Any], category: str | None):
    """List registered operators by category."""
    documentation = obj["registry"].export_documentation()

    for name, operator_names in documentation.items():
        if category is not None and name != category:
            continue
        click.echo(click.style(f"{name} ({len(operator_names)})", bold=True))
        for operator_name in operator_names:
            click.echo(f"  {operator_name}")
