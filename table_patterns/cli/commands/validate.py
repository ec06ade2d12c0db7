"""Validate command for table-patterns CLI."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from table_patterns.cli import RichCommand, format_error, format_success
from table_patterns.cli.formatting import print_diagnostics
from table_patterns.cli.utils import fail, resolve_config
from table_patterns.core import compile_config
from table_patterns.exceptions import TablePatternsError
from table_patterns.log import configure_logging

console = Console()


@click.command(cls=RichCommand)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to tp.yml config file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show suggestions and debug logs",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Show full exception stacktraces for troubleshooting",
)
def validate(config: Path | None, verbose: bool, debug: bool) -> None:
    """Validate configuration and models, then check the compiled design.

    Checks that:
    - tp.yml is valid
    - Input directory exists
    - Models parse correctly
    - No two entities share a partition-key prefix

    Missing patterns and warnings are reported but do not fail validation.

    ## Examples

    Validate using tp.yml in current directory:

        $ tp validate

    Validate before building:

        $ tp validate && tp build
    """
    configure_logging(verbose)
    cfg, config_path = resolve_config(console, config, debug)
    console.print(f"[green]Config valid:[/green] {config_path}")

    if not cfg.input_path.exists():
        console.print(f"[red]Input directory not found:[/red] {cfg.input_path}")
        raise click.ClickException("Input directory not found")
    console.print(f"[green]Input exists:[/green] {cfg.input_path}")

    try:
        schema = compile_config(cfg)
    except FileNotFoundError as e:
        fail(console, "File not found", e, debug)
    except yaml.YAMLError as e:
        fail(console, "YAML parsing error", e, debug)
    except ValidationError as e:
        fail(console, "Model validation error", e, debug)
    except TablePatternsError as e:
        fail(console, "Model error", e, debug)

    console.print(f"[green]Models valid:[/green] {len(schema.entities)} models")
    for entity in schema.entities:
        console.print(f"  - {entity.name} [dim]({entity.entity_type})[/dim]")

    console.print(
        f"[green]Indexes:[/green] {len(schema.gsi_definitions)} GSIs, "
        f"{len(schema.lsi_definitions)} LSIs"
    )

    print_diagnostics(console, schema, verbose=verbose)

    if not schema.is_deployable:
        console.print(
            format_error(
                f"{len(schema.conflicts)} key conflict(s) found",
                "Give each entity a distinct entity_type",
            )
        )
        raise click.ClickException(f"{len(schema.conflicts)} key conflict(s) found")

    console.print()
    console.print(
        format_success(
            "All checks passed",
            f"{len(schema.missing_patterns)} missing patterns, {len(schema.warnings)} warnings",
        )
    )
