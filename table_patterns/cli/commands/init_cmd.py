"""Init command for table-patterns CLI."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from table_patterns.cli import RichCommand

console = Console()

CONFIG_TEMPLATE = """\
# table-patterns configuration

# Project name (used for output folder)
# project: my_project

input: ./models
output: ./schema

# Single-table settings (defaults shown)
table:
  name: app
  partition_key: pk
  sort_key: sk
  key_delimiter: "#"
  entity_type_attribute: _et
  gsi_count: 5
  soft_delete_attribute: deletedAt
  ttl_attribute: ttl
  # index_overloading: false
  # max_patterns_per_index: 5

# Output options
output_options:
  markdown: true
  json: true
"""

EXAMPLE_MODELS = """\
models:
  - name: User
    attributes:
      email:
        unique: true
        validation: required|email
      name:
        required: true
    has_many: [Post]
    traits:
      timestamps: true

  - name: Post
    attributes:
      title:
        required: true
      status:
    belongs_to: [User]
    traits:
      timestamps: true
      soft_deletes: true
"""


@click.command(cls=RichCommand)
@click.option(
    "--example",
    is_flag=True,
    help="Also write an example models/blog.yml",
)
def init(example: bool) -> None:
    """Create a tp.yml config file.

    Generates a starter config file in the current directory
    with sensible defaults.

    ## Examples

    Create a new config file:

        $ tp init

    Create config plus an example model file:

        $ tp init --example
    """
    config_path = Path("tp.yml")

    if config_path.exists():
        console.print(f"[yellow]{config_path} already exists[/yellow]")
        raise click.ClickException("Config file already exists")

    config_path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    console.print(f"[green]Created {config_path}[/green]")

    if example:
        models_path = Path("models") / "blog.yml"
        if models_path.exists():
            console.print(f"[yellow]{models_path} already exists, skipped[/yellow]")
        else:
            models_path.parent.mkdir(parents=True, exist_ok=True)
            models_path.write_text(EXAMPLE_MODELS, encoding="utf-8")
            console.print(f"[green]Created {models_path}[/green]")

    console.print("\nEdit the file and run:")
    console.print("  tp build")
