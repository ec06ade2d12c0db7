"""SchemaCompiler - runs every compiler stage over a registry.

Stage order:
    1. Dangling relationship check (warn once, then skip silently)
    2. Base key patterns
    3. GSI derivation (relationships, then unique attributes)
    4. Sparse index derivation from the next free GSI slot
    5. LSI derivation
    6. Access pattern catalog
    7. Validation (prefix conflicts, index overload, duplicate GSI keys)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field

from table_patterns.compiler.access_patterns import (
    AccessPatternGenerator,
    AccessPatternReport,
)
from table_patterns.compiler.gsi import (
    GsiDerivationResult,
    GsiDeriver,
    validate_gsi_definitions,
)
from table_patterns.compiler.keys import KeyPatternGenerator, KeyPatternValidation
from table_patterns.compiler.lsi import LsiDerivationResult, LsiDeriver
from table_patterns.compiler.sparse import SparseDerivationResult, SparseIndexDeriver
from table_patterns.config import TableConfig
from table_patterns.domain import (
    AccessPattern,
    EntityDescriptor,
    IndexDefinition,
    KeyConflict,
    KeyPatternTemplate,
    MissingPattern,
)
from table_patterns.exceptions import TablePatternsError
from table_patterns.ingestion import RegistryBuilder
from table_patterns.registry import ModelRegistry


class CompiledSchema(BaseModel):
    """Everything the compiler derived for one registry."""

    table: TableConfig
    entities: list[EntityDescriptor]
    key_patterns: list[KeyPatternTemplate]
    gsi: GsiDerivationResult
    sparse: SparseDerivationResult
    lsi: LsiDerivationResult
    access: AccessPatternReport
    validation: KeyPatternValidation
    index_assignments: dict[str, int] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    missing_patterns: list[MissingPattern] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)

    @property
    def is_deployable(self) -> bool:
        """False when two entities share a partition prefix."""
        return not self.validation.conflicts

    @property
    def conflicts(self) -> list[KeyConflict]:
        return self.validation.conflicts

    @property
    def gsi_definitions(self) -> list[IndexDefinition]:
        """Relationship, unique and sparse GSIs ordered by slot."""
        definitions = self.gsi.definitions + self.sparse.definitions
        return sorted(definitions, key=lambda d: int(d.name.removeprefix("GSI")))

    @property
    def lsi_definitions(self) -> list[IndexDefinition]:
        return self.lsi.definitions

    @property
    def access_patterns(self) -> list[AccessPattern]:
        return self.access.patterns

    @property
    def suggestions(self) -> list[str]:
        return self.access.suggestions

    def get_entity(self, name: str) -> EntityDescriptor | None:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def summary(self) -> str:
        return (
            f"CompiledSchema: {len(self.entities)} entities, "
            f"{len(self.gsi_definitions)} GSIs, {len(self.lsi_definitions)} LSIs, "
            f"{len(self.access_patterns)} access patterns, "
            f"{len(self.warnings)} warnings"
        )


class SchemaCompiler:
    """
    Compile a ModelRegistry into a CompiledSchema.

    The registry is annotated in place and must not have been compiled before.
    """

    def __init__(self, table: TableConfig | None = None) -> None:
        self.table = table or TableConfig()
        self.keys = KeyPatternGenerator(self.table)

    def compile(self, registry: ModelRegistry) -> CompiledSchema:
        if registry.index_assignments:
            raise TablePatternsError(
                "Registry has already been compiled; build a fresh registry per compilation"
            )

        logger.debug(f"Compiling {registry.summary()}")
        registry.check_relationships()

        for entity in registry:
            entity.key_pattern = self.keys.base_pattern(entity)

        gsi = GsiDeriver(registry, self.table, self.keys).derive()
        sparse = SparseIndexDeriver(registry, self.table, self.keys).derive(
            start_index=registry.next_free_index()
        )
        lsi = LsiDeriver(registry, self.table).derive()
        access = AccessPatternGenerator(registry, self.table, self.keys).generate(
            sparse=sparse, lsi=lsi
        )

        validation = self.keys.validate(registry.entities)
        for warning in validation.warnings:
            registry.warn(warning)
        for conflict in validation.conflicts:
            logger.warning(str(conflict))
        for error in validate_gsi_definitions(gsi.definitions + sparse.definitions):
            registry.warn(error)

        schema = CompiledSchema(
            table=self.table,
            entities=registry.entities,
            key_patterns=[self.keys.generate(entity) for entity in registry],
            gsi=gsi,
            sparse=sparse,
            lsi=lsi,
            access=access,
            validation=validation,
            index_assignments=dict(registry.index_assignments),
            warnings=list(registry.warnings),
            missing_patterns=list(registry.missing_patterns),
            notes=list(lsi.notes),
        )
        logger.debug(schema.summary())
        return schema


def compile_models(
    models: list[dict[str, Any]], table: TableConfig | None = None
) -> CompiledSchema:
    """Build a fresh registry from raw model dicts and compile it."""
    registry = RegistryBuilder.from_dicts(models, table)
    return SchemaCompiler(table).compile(registry)


def compile_directory(path: str | Path, table: TableConfig | None = None) -> CompiledSchema:
    """Load model YAML files from ``path`` and compile them."""
    registry = RegistryBuilder.from_directory(path, table)
    return SchemaCompiler(table).compile(registry)
