"""Core build orchestration shared by CLI commands."""

from table_patterns.core.builder import BuildStatistics, compile_config, run_build

__all__ = ["BuildStatistics", "compile_config", "run_build"]
