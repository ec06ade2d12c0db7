"""GsiDeriver - assigns relationship and unique-attribute lookups to GSI slots.

Slots are a bounded budget (``table.gsi_count``, at most 5) handed out
first-come-first-served:

    pass 0  relationships pinned to an explicit ``index: N``
    pass 1  belongs_to / belongs_to_many / has_one relationships, declaration order
    pass 2  unique attributes, declaration order

Candidates that find no slot are recorded as missing patterns on the registry.
"""

from __future__ import annotations

from enum import Enum

from loguru import logger
from pydantic import BaseModel, Field

from table_patterns.compiler.keys import KeyPatternGenerator
from table_patterns.config import MAX_GSI_SLOTS, TableConfig
from table_patterns.domain import (
    AttributeDescriptor,
    EntityDescriptor,
    IndexDefinition,
    IndexKeyTemplate,
    IndexKind,
    KeyPattern,
    MissingPattern,
    MissingSource,
    RelationshipDescriptor,
    RelationshipKind,
    gsi_name,
)
from table_patterns.registry import ModelRegistry


class GsiPatternSource(str, Enum):
    """What placed a pattern on a GSI."""

    RELATIONSHIP = "relationship"
    UNIQUE_ATTRIBUTE = "unique_attribute"


class EstimatedLoad(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def for_pattern_count(cls, count: int) -> EstimatedLoad:
        if count > 3:
            return cls.HIGH
        if count > 1:
            return cls.MEDIUM
        return cls.LOW


class GsiAccessPattern(BaseModel):
    """One entity's use of a GSI."""

    entity: str
    source: str  # e.g. "belongs_to(User)" or "unique:email"
    type: GsiPatternSource
    pk_pattern: str
    sk_pattern: str
    description: str

    model_config = {"frozen": True}

    @property
    def partition_prefix(self) -> str:
        return self.pk_pattern.split("{", 1)[0]


class GsiUsage(BaseModel):
    """Patterns sharing one GSI."""

    index: int
    name: str
    patterns: list[GsiAccessPattern]
    estimated_load: EstimatedLoad

    @property
    def overloaded(self) -> bool:
        return len(self.patterns) > 1


class OptimizationKind(str, Enum):
    CONSOLIDATE = "consolidate"
    SPLIT = "split"


class GsiOptimization(BaseModel):
    """Suggested change to the GSI layout."""

    kind: OptimizationKind
    description: str
    affected: list[int]
    benefit: str

    model_config = {"frozen": True}


class GsiDerivationResult(BaseModel):
    definitions: list[IndexDefinition] = Field(default_factory=list)
    usages: list[GsiUsage] = Field(default_factory=list)
    optimizations: list[GsiOptimization] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class GsiDeriver:
    """
    Derive GSI assignments for a registry.

    Mutates the registry: assigned numbers go into ``index_assignments`` and
    onto each relationship, index templates onto each entity's key pattern,
    and exhausted candidates into ``missing_patterns``.
    """

    def __init__(
        self,
        registry: ModelRegistry,
        table: TableConfig | None = None,
        keys: KeyPatternGenerator | None = None,
    ) -> None:
        self.registry = registry
        self.table = table or TableConfig()
        self.keys = keys or KeyPatternGenerator(self.table)
        self._patterns: dict[int, list[GsiAccessPattern]] = {}
        self._warnings: list[str] = []

    def derive(self) -> GsiDerivationResult:
        self._patterns = {}
        self._warnings = []

        candidates = [
            (entity, rel)
            for entity in self.registry
            for rel in entity.relationships
            if rel.kind.requires_index
            and rel.requires_index
            and self.registry.has(rel.related_model)
        ]

        for entity, rel in candidates:
            if rel.pinned_index is not None:
                self._place_pinned(entity, rel)

        for entity, rel in candidates:
            if rel.index is None:
                self._place_relationship(entity, rel)

        for entity in self.registry:
            for attr in entity.unique_attributes:
                self._place_unique(entity, attr)

        result = GsiDerivationResult(warnings=list(self._warnings))
        for number in sorted(self._patterns):
            patterns = self._patterns[number]
            result.definitions.append(self.definition(number))
            result.usages.append(
                GsiUsage(
                    index=number,
                    name=gsi_name(number),
                    patterns=patterns,
                    estimated_load=EstimatedLoad.for_pattern_count(len(patterns)),
                )
            )
        result.optimizations = self.analyze(result.usages)

        logger.debug(
            f"GSI derivation: {len(result.definitions)} indexes, "
            f"{len(result.warnings)} warnings"
        )
        return result

    def definition(self, number: int) -> IndexDefinition:
        key_names = self.table.gsi_key_names(number)
        return IndexDefinition(
            name=gsi_name(number),
            kind=IndexKind.GSI,
            partition_key=key_names.pk,
            sort_key=key_names.sk,
        )

    # --- Placement ---

    def _place_pinned(self, entity: EntityDescriptor, rel: RelationshipDescriptor) -> None:
        number = rel.pinned_index
        assert number is not None
        pattern = self._relationship_pattern(entity, rel)
        if pattern is None:
            return

        if not 1 <= number <= self.table.gsi_count:
            self._warn(
                f"{entity.name}.{rel.source} pins GSI{number} outside 1..{self.table.gsi_count}; "
                "assigning automatically"
            )
            return
        if number in self._key_pattern(entity).indexes:
            self._warn(
                f"{entity.name}.{rel.source} pins GSI{number} which {entity.name} already uses; "
                "assigning automatically"
            )
            return

        self._assign_relationship(entity, rel, number, pattern)

    def _place_relationship(self, entity: EntityDescriptor, rel: RelationshipDescriptor) -> None:
        pattern = self._relationship_pattern(entity, rel)
        if pattern is None:
            return

        number = None
        if self.table.index_overloading and rel.kind in (
            RelationshipKind.BELONGS_TO,
            RelationshipKind.BELONGS_TO_MANY,
        ):
            number = self._find_consolidatable(entity, pattern)
        if number is None:
            number = self._next_slot()
        if number is None:
            self._exhausted(
                f"Cannot assign GSI for {entity.name}.{rel.source}",
                MissingPattern(
                    entity=entity.name,
                    source=MissingSource.RELATIONSHIP,
                    relationship=rel.kind,
                    related_model=rel.related_model,
                    reason="No GSI assigned for reverse lookup",
                ),
            )
            return

        self._assign_relationship(entity, rel, number, pattern)

    def _place_unique(self, entity: EntityDescriptor, attr: AttributeDescriptor) -> None:
        number = self._next_slot()
        if number is None:
            self._exhausted(
                f"Cannot assign GSI for unique attribute {entity.name}.{attr.name}",
                MissingPattern(
                    entity=entity.name,
                    source=MissingSource.UNIQUE_ATTRIBUTE,
                    attribute=attr.name,
                    reason="No GSI assigned for unique lookup",
                ),
            )
            return

        template = self.keys.unique_shape(entity, attr)
        self.registry.assign_index(f"{entity.name}:unique:{attr.name}", number)
        self._key_pattern(entity).indexes[number] = template
        self._patterns.setdefault(number, []).append(
            GsiAccessPattern(
                entity=entity.name,
                source=f"unique:{attr.name}",
                type=GsiPatternSource.UNIQUE_ATTRIBUTE,
                pk_pattern=template.pk,
                sk_pattern=template.sk,
                description=f"Get {entity.name} by unique {attr.name}",
            )
        )

    def _assign_relationship(
        self,
        entity: EntityDescriptor,
        rel: RelationshipDescriptor,
        number: int,
        pattern: GsiAccessPattern,
    ) -> None:
        rel.index = number
        self.registry.assign_index(rel.assignment_key(entity.name), number)
        self._key_pattern(entity).indexes[number] = IndexKeyTemplate(
            pk=pattern.pk_pattern, sk=pattern.sk_pattern
        )
        self._patterns.setdefault(number, []).append(pattern)

    def _relationship_pattern(
        self, entity: EntityDescriptor, rel: RelationshipDescriptor
    ) -> GsiAccessPattern | None:
        related = self.registry.get(rel.related_model)
        template = (
            self.keys.relationship_shape(entity, rel, related) if related is not None else None
        )
        if template is None:
            self._warn(f"{entity.name}.{rel.source} has no index key shape; skipping")
            return None

        if rel.kind == RelationshipKind.BELONGS_TO_MANY:
            description = (
                f"Get all {entity.name}s associated with a {rel.related_model} (many-to-many)"
            )
        elif rel.kind == RelationshipKind.HAS_ONE:
            description = f"Get the {rel.related_model} of a {entity.name}"
        else:
            description = f"Get all {entity.name}s belonging to a {rel.related_model}"

        return GsiAccessPattern(
            entity=entity.name,
            source=rel.source,
            type=GsiPatternSource.RELATIONSHIP,
            pk_pattern=template.pk,
            sk_pattern=template.sk,
            description=description,
        )

    def _find_consolidatable(
        self, entity: EntityDescriptor, pattern: GsiAccessPattern
    ) -> int | None:
        """An existing relationship GSI whose partition prefix differs from ``pattern``."""
        indexes = self._key_pattern(entity).indexes
        for number, patterns in sorted(self._patterns.items()):
            if number in indexes:
                continue
            if any(p.type != GsiPatternSource.RELATIONSHIP for p in patterns):
                continue
            if len(patterns) >= self.table.max_patterns_per_index:
                continue
            if patterns[0].partition_prefix != pattern.partition_prefix:
                return number
        return None

    def _next_slot(self) -> int | None:
        number = self.registry.next_free_index()
        if number > self.table.gsi_count:
            return None
        return number

    def _exhausted(self, message: str, missing: MissingPattern) -> None:
        hint = (
            f"increase table.gsi_count (up to {MAX_GSI_SLOTS})"
            if self.table.gsi_count < MAX_GSI_SLOTS
            else "enable table.index_overloading or drop lower-value lookups"
        )
        self._warn(f"{message} - exceeded max GSI count of {self.table.gsi_count}; {hint}")
        self.registry.add_missing(missing)

    def _warn(self, message: str) -> None:
        self._warnings.append(message)
        self.registry.warn(message)

    def _key_pattern(self, entity: EntityDescriptor) -> KeyPattern:
        if entity.key_pattern is None:
            entity.key_pattern = self.keys.base_pattern(entity)
        return entity.key_pattern

    # --- Analysis ---

    def analyze(self, usages: list[GsiUsage]) -> list[GsiOptimization]:
        """Consolidation and split suggestions for the derived layout."""
        optimizations: list[GsiOptimization] = []

        single = [u for u in usages if len(u.patterns) == 1]
        if len(single) >= 2:
            optimizations.append(
                GsiOptimization(
                    kind=OptimizationKind.CONSOLIDATE,
                    description=(
                        f"GSIs {', '.join(u.name for u in single)} each have only one "
                        "access pattern and could potentially be consolidated"
                    ),
                    affected=[u.index for u in single],
                    benefit="Reduce GSI count and associated costs",
                )
            )

        for usage in usages:
            if len(usage.patterns) > self.table.max_patterns_per_index:
                optimizations.append(
                    GsiOptimization(
                        kind=OptimizationKind.SPLIT,
                        description=(
                            f"{usage.name} has {len(usage.patterns)} access patterns "
                            "which may cause hot partition issues"
                        ),
                        affected=[usage.index],
                        benefit="Reduce risk of throttling and improve query performance",
                    )
                )

        high = [u for u in usages if u.estimated_load == EstimatedLoad.HIGH]
        unused = self.table.gsi_count - len(self.registry.used_index_numbers)
        if unused > 0 and high:
            optimizations.append(
                GsiOptimization(
                    kind=OptimizationKind.SPLIT,
                    description=(
                        f"You have {unused} unused GSI slots. "
                        "Consider splitting high-load GSIs for better performance."
                    ),
                    affected=[u.index for u in high],
                    benefit="Better load distribution and query performance",
                )
            )

        return optimizations


def validate_gsi_definitions(definitions: list[IndexDefinition]) -> list[str]:
    """Errors for duplicate index names or duplicate key attribute pairs."""
    errors: list[str] = []

    names = [d.name for d in definitions]
    duplicate_names = sorted({n for n in names if names.count(n) > 1})
    if duplicate_names:
        errors.append(f"Duplicate GSI names: {', '.join(duplicate_names)}")

    combos = [f"{d.partition_key}:{d.sort_key}" for d in definitions]
    duplicate_combos = sorted({c for c in combos if combos.count(c) > 1})
    if duplicate_combos:
        errors.append(
            f"Duplicate PK/SK combinations across GSIs: {', '.join(duplicate_combos)}"
        )

    return errors
