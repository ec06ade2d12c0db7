"""Command-line interface for table-patterns."""

from __future__ import annotations

import click

from table_patterns.cli import RichGroup
from table_patterns.cli.commands import build, init, keys, patterns, validate


@click.group(cls=RichGroup)
@click.version_option(package_name="table-patterns")
def cli() -> None:
    """Compile entity models into a single-table DynamoDB design.

    Config-driven generation:

        $ tp build

    Or with explicit config:

        $ tp build --config tp.yml
    """


cli.add_command(init)
cli.add_command(build)
cli.add_command(validate)
cli.add_command(keys)
cli.add_command(patterns)


if __name__ == "__main__":
    cli()
