"""
table-patterns: single-table DynamoDB schema compiler.

Architecture:
    YAML → Ingestion (RegistryBuilder) → ModelRegistry → Compiler → CompiledSchema → Adapter → .md/.json

Layers:
    - domain/: Entity descriptors and compiler output types (keys, indexes, access patterns)
    - ingestion/: YAML loading and registry construction
    - compiler/: Key templates, GSI/LSI/sparse index derivation, access patterns, validation
    - adapters/: Documentation rendering (markdown, JSON)

Key Concepts:
    - Index slots are a bounded, first-come-first-served budget (GSI1..GSI5)
    - Unsatisfiable requirements become warnings and missing patterns, never exceptions
    - Each compilation owns its registry; nothing is shared between runs
"""

from loguru import logger

from table_patterns.compiler import CompiledSchema, SchemaCompiler, compile_models
from table_patterns.config import TableConfig, TPConfig, load_config
from table_patterns.ingestion import RegistryBuilder, YamlLoader
from table_patterns.registry import ModelRegistry

__version__ = "0.1.0"

logger.disable("table_patterns")

__all__ = [
    "CompiledSchema",
    "ModelRegistry",
    "RegistryBuilder",
    "SchemaCompiler",
    "TPConfig",
    "TableConfig",
    "YamlLoader",
    "compile_models",
    "load_config",
]
