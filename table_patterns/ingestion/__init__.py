"""Ingestion layer - YAML loading and registry building."""

from table_patterns.ingestion.builder import (
    RegistryBuilder,
    to_entity_type,
    to_foreign_key,
)
from table_patterns.ingestion.loader import YamlLoader

__all__ = ["RegistryBuilder", "YamlLoader", "to_entity_type", "to_foreign_key"]
