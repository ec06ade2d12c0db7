"""CLI utility functions for table-patterns."""

from __future__ import annotations

import traceback
from pathlib import Path
from typing import NoReturn

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.tree import Tree

from table_patterns.config import TPConfig, find_config, load_config
from table_patterns.exceptions import TablePatternsError


FILE_STYLES = {".md": "green", ".json": "yellow"}


def build_file_tree(files: list[Path], project_path: Path) -> Tree:
    """Build a Rich Tree of generated files under ``project_path``.

    Markdown documents are green, JSON documents yellow; paths outside the
    project folder are left out.
    """
    tree = Tree(f"[bold]{project_path.name}/[/bold]")
    for path in sorted(files, key=lambda p: (p.suffix, p.name)):
        if not path.is_relative_to(project_path):
            continue
        style = FILE_STYLES.get(path.suffix, "white")
        tree.add(f"[{style}]{path.relative_to(project_path)}[/{style}]")
    return tree


def fail(console: Console, label: str, error: Exception, debug: bool) -> NoReturn:
    """Print an error (with traceback when debugging) and abort the command."""
    if debug:
        console.print(traceback.format_exc())
    console.print(f"[red]{label}:[/red] {error}")
    raise click.ClickException(str(error))


def resolve_config(
    console: Console, config: Path | None, debug: bool
) -> tuple[TPConfig, Path]:
    """Load an explicit or auto-detected tp.yml, converting errors to ClickException."""
    try:
        if config:
            return load_config(config), config
        found_config = find_config()
        if found_config is None:
            console.print("[red]No tp.yml found[/red]")
            console.print("\nCreate one with [bold]tp init[/bold], or pass --config")
            raise click.ClickException("Config file not found")
        return load_config(found_config), found_config
    except FileNotFoundError as e:
        fail(console, "Config file not found", e, debug)
    except yaml.YAMLError as e:
        fail(console, "YAML parsing error", e, debug)
    except ValidationError as e:
        fail(console, "Config validation error", e, debug)
    except TablePatternsError as e:
        fail(console, "Config error", e, debug)
