"""SparseIndexDeriver - GSIs that only index items defining an attribute.

Sparse indexes share the GSI budget with the GSI deriver; numbering starts at
the caller-supplied offset (normally the next free slot).
"""

from __future__ import annotations

from enum import Enum

from loguru import logger
from pydantic import BaseModel, Field

from table_patterns.compiler.keys import KeyPatternGenerator
from table_patterns.config import TableConfig
from table_patterns.domain import (
    EntityDescriptor,
    IndexDefinition,
    IndexKind,
    MissingPattern,
    MissingSource,
    gsi_name,
)
from table_patterns.registry import ModelRegistry

MAX_SPARSE_PER_ENTITY = 2

STATUS_NAMES = frozenset({"active", "enabled", "published"})


class SparseKind(str, Enum):
    """Why an attribute is a sparse-index candidate."""

    SOFT_DELETE = "soft_delete"
    STATUS_FILTER = "status_filter"
    OPTIONAL_ATTRIBUTE = "optional_attribute"
    TTL_EXPIRY = "ttl_expiry"


class SparseCandidate(BaseModel):
    attribute: str
    kind: SparseKind
    description: str
    cost_savings: str

    model_config = {"frozen": True}


class SparseIndexUsage(BaseModel):
    """A sparse index assigned to one entity attribute."""

    index: int
    name: str
    entity: str
    attribute: str
    kind: SparseKind
    pk_pattern: str
    sk_pattern: str
    description: str
    cost_savings: str

    model_config = {"frozen": True}


class SparseDerivationResult(BaseModel):
    definitions: list[IndexDefinition] = Field(default_factory=list)
    usages: list[SparseIndexUsage] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def for_entity(self, entity: str) -> list[SparseIndexUsage]:
        return [u for u in self.usages if u.entity == entity]


def is_status_like(name: str) -> bool:
    lowered = name.lower()
    return "status" in lowered or "state" in lowered or lowered in STATUS_NAMES


class SparseIndexDeriver:
    """Assign sparse GSIs to candidate attributes, at most two per entity."""

    def __init__(
        self,
        registry: ModelRegistry,
        table: TableConfig | None = None,
        keys: KeyPatternGenerator | None = None,
    ) -> None:
        self.registry = registry
        self.table = table or TableConfig()
        self.keys = keys or KeyPatternGenerator(self.table)

    def candidates(self, entity: EntityDescriptor) -> list[SparseCandidate]:
        """Candidates in priority order, truncated to the per-entity limit."""
        found: list[SparseCandidate] = []
        soft_delete_attr = self.table.soft_delete_attribute

        if entity.traits.soft_deletes:
            found.append(
                SparseCandidate(
                    attribute=soft_delete_attr,
                    kind=SparseKind.SOFT_DELETE,
                    description=f"Query non-deleted {entity.name} items",
                    cost_savings=(
                        "Only active items are indexed, reducing write costs and index size"
                    ),
                )
            )

        for attr in entity.attributes:
            if is_status_like(attr.name):
                found.append(
                    SparseCandidate(
                        attribute=attr.name,
                        kind=SparseKind.STATUS_FILTER,
                        description=(
                            f"Query {entity.name} items by {attr.name} "
                            "(only items with this attribute are indexed)"
                        ),
                        cost_savings=(
                            f"Only items with {attr.name} set are indexed, "
                            "ideal for status-based filtering"
                        ),
                    )
                )

        # Declarations without an explicit type count as global indexes
        gsi_columns = {
            column
            for index in entity.indexes
            if index.kind != IndexKind.LSI
            for column in index.columns
        }
        for attr in entity.attributes:
            if (
                attr.nullable
                and not attr.unique
                and "Id" not in attr.name
                and attr.name in gsi_columns
                and attr.name != soft_delete_attr
            ):
                found.append(
                    SparseCandidate(
                        attribute=attr.name,
                        kind=SparseKind.OPTIONAL_ATTRIBUTE,
                        description=f"Query {entity.name} items by optional {attr.name}",
                        cost_savings=(
                            f"Only items with {attr.name} are indexed, "
                            "saving storage for items without this attribute"
                        ),
                    )
                )

        if entity.traits.ttl:
            found.append(
                SparseCandidate(
                    attribute=self.table.ttl_attribute,
                    kind=SparseKind.TTL_EXPIRY,
                    description=f"Query {entity.name} items by expiry time",
                    cost_savings=(
                        "Only items with TTL set are indexed, useful for expiry notifications"
                    ),
                )
            )

        unique: list[SparseCandidate] = []
        seen: set[str] = set()
        for candidate in found:
            if candidate.attribute not in seen:
                seen.add(candidate.attribute)
                unique.append(candidate)
        return unique[:MAX_SPARSE_PER_ENTITY]

    def derive(self, start_index: int | None = None) -> SparseDerivationResult:
        """
        Assign sparse indexes starting at ``start_index``.

        Args:
            start_index: First GSI number to try; defaults to the registry's
                next free slot.
        """
        result = SparseDerivationResult()
        start = start_index if start_index is not None else self.registry.next_free_index()

        for entity in self.registry:
            for candidate in self.candidates(entity):
                number = self.registry.next_free_index(start)
                if number > self.table.gsi_count:
                    message = (
                        f"Cannot create sparse index for {entity.name}.{candidate.attribute} "
                        f"- exceeded max GSI count of {self.table.gsi_count}"
                    )
                    result.warnings.append(message)
                    self.registry.warn(message)
                    self.registry.add_missing(
                        MissingPattern(
                            entity=entity.name,
                            source=MissingSource.SPARSE_INDEX,
                            attribute=candidate.attribute,
                            reason="No GSI slot left for sparse index",
                        )
                    )
                    continue

                template = self.keys.sparse_shape(
                    entity,
                    candidate.attribute,
                    soft_delete=candidate.kind == SparseKind.SOFT_DELETE,
                )
                self.registry.assign_index(
                    f"{entity.name}:sparse:{candidate.attribute}", number
                )
                if entity.key_pattern is None:
                    entity.key_pattern = self.keys.base_pattern(entity)
                entity.key_pattern.indexes[number] = template

                key_names = self.table.gsi_key_names(number)
                result.definitions.append(
                    IndexDefinition(
                        name=gsi_name(number),
                        kind=IndexKind.GSI,
                        partition_key=key_names.pk,
                        sort_key=key_names.sk,
                    )
                )
                result.usages.append(
                    SparseIndexUsage(
                        index=number,
                        name=gsi_name(number),
                        entity=entity.name,
                        attribute=candidate.attribute,
                        kind=candidate.kind,
                        pk_pattern=template.pk,
                        sk_pattern=template.sk,
                        description=candidate.description,
                        cost_savings=candidate.cost_savings,
                    )
                )

        logger.debug(f"Sparse derivation: {len(result.usages)} sparse indexes")
        return result
