"""Rich formatting utilities for CLI output.

Panels for errors, warnings and successes, plus tables for compiler
results (key patterns, index layout, access patterns).
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from table_patterns.compiler import CompiledSchema
from table_patterns.domain import AccessPattern, KeyPatternTemplate

PANEL_WIDTH = 78


def _panel(title: str, color: str, message: str, detail: str | None) -> Panel:
    content = f"[bold {color}]{message}[/bold {color}]"
    if detail:
        content += f"\n\n[dim]{detail}[/dim]"
    return Panel(
        content,
        title=f"[bold {color}]{title}[/bold {color}]",
        border_style=color,
        width=PANEL_WIDTH,
        expand=False,
    )


def format_error(message: str, context: str | None = None) -> Panel:
    """Create formatted error panel.

    Args:
        message: Error message
        context: Optional hint for resolving the error

    Returns:
        Panel with error formatting
    """
    return _panel("Error", "red", message, context)


def format_warning(message: str, context: str | None = None) -> Panel:
    return _panel("Warning", "yellow", message, context)


def format_success(message: str, details: str | None = None) -> Panel:
    return _panel("Success", "green", f"✓ {message}", details)


def key_patterns_table(templates: list[KeyPatternTemplate]) -> Table:
    """One row per key attribute per entity, with the example resolution."""
    table = Table(title="Key Patterns", show_lines=False)
    table.add_column("Entity", style="cyan")
    table.add_column("Key")
    table.add_column("Template", style="green")
    table.add_column("Example", style="dim")

    for template in templates:
        examples = template.example.as_item_keys()
        first = True
        for key, value in template.pattern.templates().items():
            table.add_row(template.entity if first else "", key, value, examples[key])
            first = False

    return table


def access_patterns_table(patterns: list[AccessPattern]) -> Table:
    table = Table(title="Access Patterns")
    table.add_column("Pattern", style="cyan")
    table.add_column("Operation")
    table.add_column("Index")
    table.add_column("Key Condition", style="dim")
    table.add_column("Efficient")

    for pattern in patterns:
        efficient = "[green]yes[/green]" if pattern.efficient else "[red]no[/red]"
        table.add_row(
            pattern.name,
            pattern.operation.value,
            pattern.index,
            pattern.key_condition,
            efficient,
        )

    return table


def index_table(schema: CompiledSchema) -> Table:
    table = Table(title="Secondary Indexes")
    table.add_column("Index", style="cyan")
    table.add_column("Kind")
    table.add_column("Partition Key")
    table.add_column("Sort Key")
    table.add_column("Projection", style="dim")

    for definition in schema.gsi_definitions + schema.lsi_definitions:
        table.add_row(
            definition.name,
            definition.kind.value.upper(),
            definition.partition_key or schema.table.partition_key,
            definition.sort_key or "-",
            definition.projection.type.value,
        )

    return table


def print_diagnostics(console: Console, schema: CompiledSchema, verbose: bool = False) -> None:
    """Print conflicts, missing patterns, warnings and (verbose) suggestions."""
    for conflict in schema.conflicts:
        console.print(f"[red]✗[/red] {conflict}")

    if schema.missing_patterns:
        console.print(f"\n[yellow]Missing patterns ({len(schema.missing_patterns)}):[/yellow]")
        for missing in schema.missing_patterns:
            console.print(f"  - {missing}")

    if schema.warnings:
        console.print(f"\n[yellow]Warnings ({len(schema.warnings)}):[/yellow]")
        for warning in schema.warnings:
            console.print(f"  - {warning}")

    if verbose:
        for note in schema.notes:
            console.print(f"[dim]Note: {note}[/dim]")
        if schema.suggestions:
            console.print("\n[bold]Suggestions:[/bold]")
            for suggestion in schema.suggestions:
                console.print(f"  - {suggestion}")
