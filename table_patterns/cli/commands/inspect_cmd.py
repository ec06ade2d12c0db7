"""Inspection commands for table-patterns CLI: ``tp keys`` and ``tp patterns``."""

from __future__ import annotations

import json
from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from table_patterns.cli import RichCommand
from table_patterns.cli.formatting import (
    access_patterns_table,
    index_table,
    key_patterns_table,
)
from table_patterns.cli.utils import fail, resolve_config
from table_patterns.compiler import CompiledSchema
from table_patterns.core import compile_config
from table_patterns.exceptions import TablePatternsError
from table_patterns.log import configure_logging

console = Console()


def _compile(config: Path | None, debug: bool) -> CompiledSchema:
    cfg, _ = resolve_config(console, config, debug)
    try:
        return compile_config(cfg)
    except FileNotFoundError as e:
        fail(console, "File not found", e, debug)
    except yaml.YAMLError as e:
        fail(console, "YAML parsing error", e, debug)
    except ValidationError as e:
        fail(console, "Model validation error", e, debug)
    except TablePatternsError as e:
        fail(console, "Model error", e, debug)


def _check_model(schema: CompiledSchema, model: str | None) -> None:
    if model and schema.get_entity(model) is None:
        raise click.ClickException(f"Model '{model}' not found")


config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to tp.yml config file",
)
model_option = click.option("--model", "-m", help="Only show this model")
json_option = click.option("--json", "as_json", is_flag=True, help="Print JSON instead of tables")
debug_option = click.option(
    "--debug",
    is_flag=True,
    help="Show full exception stacktraces for troubleshooting",
)


@click.command(cls=RichCommand)
@config_option
@model_option
@json_option
@debug_option
def keys(config: Path | None, model: str | None, as_json: bool, debug: bool) -> None:
    """Show key templates and secondary indexes.

    ## Examples

        $ tp keys
        $ tp keys --model Post --json
    """
    configure_logging()
    schema = _compile(config, debug)
    _check_model(schema, model)

    templates = [t for t in schema.key_patterns if not model or t.entity == model]

    if as_json:
        click.echo(
            json.dumps(
                {t.entity: t.pattern.templates() for t in templates},
                indent=2,
            )
        )
        return

    console.print(key_patterns_table(templates))
    if not model:
        console.print(index_table(schema))


@click.command(cls=RichCommand)
@config_option
@model_option
@json_option
@click.option("--inefficient", is_flag=True, help="Only show scan-based patterns")
@debug_option
def patterns(
    config: Path | None,
    model: str | None,
    as_json: bool,
    inefficient: bool,
    debug: bool,
) -> None:
    """Show the access pattern catalog.

    ## Examples

        $ tp patterns
        $ tp patterns --model User
        $ tp patterns --inefficient --json
    """
    configure_logging()
    schema = _compile(config, debug)
    _check_model(schema, model)

    selected = schema.access_patterns
    if model:
        entity = schema.get_entity(model)
        assert entity is not None
        selected = entity.access_patterns
    if inefficient:
        selected = [p for p in selected if not p.efficient]

    if as_json:
        click.echo(json.dumps([p.model_dump(mode="json") for p in selected], indent=2))
        return

    console.print(access_patterns_table(selected))
    if not model:
        for suggestion in schema.suggestions:
            console.print(f"[dim]- {suggestion}[/dim]")
