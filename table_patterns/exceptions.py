"""table-patterns exception hierarchy.

Only malformed input raises. Schemas that cannot be built optimally are
reported as warnings and missing patterns on the registry instead.
"""

from __future__ import annotations


class TablePatternsError(Exception):
    """Base exception for all table-patterns errors."""


class ModelDefinitionError(TablePatternsError):
    """Raised when a raw model declaration cannot be parsed."""

    def __init__(self, model_name: str, detail: str) -> None:
        self.model_name = model_name
        super().__init__(f"Invalid model '{model_name}': {detail}")


class DuplicateModelError(ModelDefinitionError):
    """Raised when two declarations share a model name."""

    def __init__(self, model_name: str) -> None:
        super().__init__(model_name, "declared more than once")


class ModelFileError(TablePatternsError):
    """Raised when a model file does not have the expected structure."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Invalid model file '{path}': {detail}")


class ConfigError(TablePatternsError):
    """Raised when a tp.yml file is structurally invalid."""
