"""CLI commands for table-patterns.

This package contains all CLI command definitions, organized by functionality.
Commands are registered on the ``tp`` group in __main__.py.
"""

from __future__ import annotations

from table_patterns.cli.commands.build import build
from table_patterns.cli.commands.init_cmd import init
from table_patterns.cli.commands.inspect_cmd import keys, patterns
from table_patterns.cli.commands.validate import validate

__all__ = [
    "build",
    "init",
    "keys",
    "patterns",
    "validate",
]
