"""CLI utilities for table-patterns.

Rich-based formatting helpers, config loading shared by the commands, and
Click help formatters.
"""

from __future__ import annotations

from table_patterns.cli.formatting import (
    format_error,
    format_success,
    format_warning,
)
from table_patterns.cli.help_formatter import RichCommand, RichGroup

__all__ = [
    "format_error",
    "format_success",
    "format_warning",
    "RichCommand",
    "RichGroup",
]
