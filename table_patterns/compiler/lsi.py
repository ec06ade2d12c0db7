"""LsiDeriver - local secondary indexes for time-ordered and declared sort keys."""

from __future__ import annotations

from loguru import logger
from pydantic import BaseModel, Field

from table_patterns.config import MAX_LSI_COUNT, TableConfig
from table_patterns.domain import (
    EntityDescriptor,
    IndexDefinition,
    IndexKind,
    Projection,
)
from table_patterns.registry import ModelRegistry

MAX_LSI_PER_ENTITY = 2

PARTITION_SIZE_NOTE = (
    "LSIs have a 10GB item collection limit per partition key. "
    "Monitor partition sizes to avoid hitting this limit."
)


class LsiCandidate(BaseModel):
    attribute: str
    projection: Projection = Field(default_factory=Projection)

    model_config = {"frozen": True}


class LsiUsage(BaseModel):
    """Documentation for one derived LSI."""

    name: str
    entity: str
    sort_key: str
    description: str
    projected_attributes: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class LsiDerivationResult(BaseModel):
    definitions: list[IndexDefinition] = Field(default_factory=list)
    usages: list[LsiUsage] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)

    def for_entity(self, entity: str) -> list[LsiUsage]:
        return [u for u in self.usages if u.entity == entity]


def lsi_name(entity_name: str, attribute: str) -> str:
    """``PostByCreatedAtLSI``"""
    return f"{entity_name}By{attribute[:1].upper()}{attribute[1:]}LSI"


class LsiDeriver:
    """
    Derive LSIs, at most two per entity and five per table.

    LSIs reuse the table partition key, so each one only names an alternate
    sort attribute.
    """

    def __init__(self, registry: ModelRegistry, table: TableConfig | None = None) -> None:
        self.registry = registry
        self.table = table or TableConfig()

    def candidates(self, entity: EntityDescriptor) -> list[LsiCandidate]:
        found: list[LsiCandidate] = []

        for attr in entity.attributes:
            if not attr.is_timestamp:
                continue
            if attr.name in (entity.primary_key, self.table.soft_delete_attribute):
                continue
            found.append(LsiCandidate(attribute=attr.name))

        for index in entity.indexes:
            if index.kind == IndexKind.LSI and index.columns:
                # Only the first column can act as the LSI sort key
                found.append(
                    LsiCandidate(attribute=index.columns[0], projection=index.projection)
                )

        unique: dict[str, LsiCandidate] = {}
        for candidate in found:
            unique.setdefault(candidate.attribute, candidate)
        return list(unique.values())[:MAX_LSI_PER_ENTITY]

    def derive(self) -> LsiDerivationResult:
        result = LsiDerivationResult()

        for entity in self.registry:
            for candidate in self.candidates(entity):
                if len(result.definitions) >= MAX_LSI_COUNT:
                    message = (
                        f"Cannot create LSI for {entity.name}.{candidate.attribute} "
                        f"- exceeded max LSI count of {MAX_LSI_COUNT}"
                    )
                    result.warnings.append(message)
                    self.registry.warn(message)
                    continue

                name = lsi_name(entity.name, candidate.attribute)
                result.definitions.append(
                    IndexDefinition(
                        name=name,
                        kind=IndexKind.LSI,
                        sort_key=candidate.attribute,
                        projection=candidate.projection,
                    )
                )
                result.usages.append(
                    LsiUsage(
                        name=name,
                        entity=entity.name,
                        sort_key=candidate.attribute,
                        description=f"Query {entity.name} items sorted by {candidate.attribute}",
                        projected_attributes=list(candidate.projection.attributes),
                    )
                )

        if result.definitions:
            result.notes.append(PARTITION_SIZE_NOTE)

        logger.debug(f"LSI derivation: {len(result.definitions)} indexes")
        return result
