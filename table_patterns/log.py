"""Logging setup for table-patterns.

Library modules log through loguru's ``logger``. The package namespace is
disabled on import so embedding applications stay quiet; the CLI enables it.
"""

from __future__ import annotations

import os
import sys

from loguru import logger

LOG_LEVEL_ENV = "TABLE_PATTERNS_LOG_LEVEL"


def configure_logging(verbose: bool = False) -> None:
    """Route table-patterns logs to stderr.

    Level is DEBUG when ``verbose``, otherwise ``$TABLE_PATTERNS_LOG_LEVEL``
    (default WARNING).
    """
    level = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.enable("table_patterns")
