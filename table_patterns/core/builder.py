"""Core build logic for table-patterns.

Loads model declarations, compiles them and writes the documentation
artifacts selected in ``output_options``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from table_patterns.adapters import JsonGenerator, MarkdownGenerator
from table_patterns.compiler import CompiledSchema, SchemaCompiler
from table_patterns.ingestion import RegistryBuilder

if TYPE_CHECKING:
    from table_patterns.config import TPConfig

# Module-level console for output
console = Console()


@dataclass
class BuildStatistics:
    """Statistics collected during a build."""

    entities: int = 0
    gsis: int = 0
    lsis: int = 0
    access_patterns: int = 0
    warnings: int = 0
    files: int = 0


def compile_config(config: TPConfig, verbose: bool = False) -> CompiledSchema:
    """Load models from ``config.input`` and compile them with ``config.table``.

    Raises:
        click.ClickException: If no model declarations are found
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Loading models...", total=None)
        registry = RegistryBuilder.from_directory(config.input_path, config.table)
        progress.update(task, completed=True)

    if not len(registry):
        raise click.ClickException(f"No models found in {config.input_path}")

    if verbose:
        console.print(f"[dim]Models:[/dim]  {len(registry)} entities")
        for entity in registry:
            console.print(
                f"          [cyan]{entity.name}[/cyan] "
                f"[dim]({len(entity.attributes)} attributes, "
                f"{len(entity.relationships)} relationships)[/dim]"
            )

    return SchemaCompiler(config.table).compile(registry)


def run_build(
    config: TPConfig,
    dry_run: bool = False,
    verbose: bool = False,
) -> tuple[list[Path], BuildStatistics, Path, CompiledSchema]:
    """Execute the build process.

    Args:
        config: Parsed TPConfig
        dry_run: If True, don't write files
        verbose: If True, show detailed output

    Returns:
        Tuple of (generated file paths, build statistics, project_path, schema)
    """
    project_path = config.project_path

    console.print(f"[dim]Input:[/dim]  {config.input_path}")
    console.print(f"[dim]Output:[/dim] {project_path}")
    console.print()

    schema = compile_config(config, verbose=verbose)

    all_files: dict[Path, str] = {}
    if config.output_options.markdown:
        for filename, content in MarkdownGenerator().generate(schema).items():
            all_files[project_path / filename] = content
    if config.output_options.json_:
        for filename, content in JsonGenerator().generate(schema).items():
            all_files[project_path / filename] = content

    stats = BuildStatistics(
        entities=len(schema.entities),
        gsis=len(schema.gsi_definitions),
        lsis=len(schema.lsi_definitions),
        access_patterns=len(schema.access_patterns),
        warnings=len(schema.warnings),
        files=len(all_files),
    )

    if dry_run:
        return list(all_files.keys()), stats, project_path, schema

    written: list[Path] = []
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Writing files...", total=len(all_files))

        for file_path, content in all_files.items():
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
            written.append(file_path)
            progress.advance(task)

    return written, stats, project_path, schema
