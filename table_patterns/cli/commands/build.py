"""Build command for table-patterns CLI."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from table_patterns.cli import RichCommand, format_warning
from table_patterns.cli.formatting import print_diagnostics
from table_patterns.cli.utils import build_file_tree, fail, resolve_config
from table_patterns.core import run_build
from table_patterns.exceptions import TablePatternsError
from table_patterns.log import configure_logging

console = Console()


@click.command(cls=RichCommand)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to tp.yml config file (auto-detected if not specified)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Preview what would be generated without writing files",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show detailed output and debug logs",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Show full exception stacktraces for troubleshooting",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with an error when the schema has key conflicts",
)
def build(
    config: Path | None,
    dry_run: bool,
    verbose: bool,
    debug: bool,
    strict: bool,
) -> None:
    """Compile models into a single-table design and write its documentation.

    Reads configuration from tp.yml and generates:
    - README.md, keys.md, gsi.md, lsi.md, sparse.md, access-patterns.md
    - schema.json (full compiler output) and table.json (CreateTable shape)

    ## Examples

    Build using tp.yml in current directory:

        $ tp build

    Preview without writing files:

        $ tp build --dry-run

    Fail CI when entities share a partition prefix:

        $ tp build --strict
    """
    configure_logging(verbose)
    cfg, config_path = resolve_config(console, config, debug)

    console.print()
    console.print("[bold]table-patterns[/bold]", highlight=False)
    console.print()
    console.print(f"[dim]Config:[/dim] {config_path}")

    if dry_run:
        console.print("[yellow]Dry run mode[/yellow]")
        console.print()

    try:
        files, stats, project_path, schema = run_build(cfg, dry_run=dry_run, verbose=verbose)
    except FileNotFoundError as e:
        fail(console, "File not found", e, debug)
    except yaml.YAMLError as e:
        fail(console, "YAML parsing error", e, debug)
    except ValidationError as e:
        fail(console, "Model validation error", e, debug)
    except TablePatternsError as e:
        fail(console, "Model error", e, debug)

    action = "Would generate" if dry_run else "Generated"
    console.print(
        f"\n[bold green]{action} {stats.files} files[/bold green] "
        f"[dim]({stats.entities} entities, {stats.gsis} GSIs, {stats.lsis} LSIs, "
        f"{stats.access_patterns} access patterns)[/dim]"
    )

    if verbose or dry_run:
        console.print()
        console.print(build_file_tree(files, project_path))

    if schema.conflicts or schema.missing_patterns or schema.warnings:
        console.print()
        print_diagnostics(console, schema, verbose=verbose)

    if schema.is_deployable:
        return

    if strict:
        raise click.ClickException(
            f"{len(schema.conflicts)} key conflict(s) found (--strict)"
        )
    console.print()
    console.print(
        format_warning(
            "Schema is not deployable",
            "Entities sharing a partition prefix overwrite each other's items. "
            "Use --strict to fail the build.",
        )
    )
