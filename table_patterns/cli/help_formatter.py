"""Custom Click help formatting for table-patterns commands.

Help is rendered with plain Click formatting at a wider width. Command
docstrings use ``## Heading`` lines for sections, which are shown as
``Heading:`` in terminal help.
"""

from __future__ import annotations

import re

import click

HELP_WIDTH = 88

_HEADING_RE = re.compile(r"^(\s*)## (.+)$", re.MULTILINE)


def plain_headings(text: str) -> str:
    """Convert ``## Examples`` lines to ``Examples:``."""
    return _HEADING_RE.sub(r"\1\2:", text)


def render_help(command: click.Command, ctx: click.Context) -> str:
    formatter = click.HelpFormatter(width=HELP_WIDTH)
    command.format_help(ctx, formatter)
    return plain_headings(formatter.getvalue())


class RichCommand(click.Command):
    """Click command with wide help and docstring section headings."""

    def get_help(self, ctx: click.Context) -> str:
        return render_help(self, ctx)


class RichGroup(click.Group):
    """Click group with wide help and docstring section headings."""

    def get_help(self, ctx: click.Context) -> str:
        return render_help(self, ctx)
