"""KeyPatternGenerator - partition/sort key templates for every entity.

Templates are plain strings with ``{attributeName}`` placeholders joined to
entity prefixes by the table delimiter:

    base          POST#{id} / POST#{id}
    belongs_to    USER#{userId} / POST#{id}
    has_one       USER#{id} / PROFILE#{profileId}
    unique        EMAIL#{email} / USER#{id}
    sparse        POST#STATUS / {status}#{id}
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, Field
from typing_extensions import assert_never

from table_patterns.config import TableConfig
from table_patterns.domain import (
    AttributeDescriptor,
    EntityDescriptor,
    IndexKeyTemplate,
    KeyConflict,
    KeyPattern,
    KeyPatternTemplate,
    RelationshipDescriptor,
    RelationshipKind,
    ResolvedKey,
)

PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")

# Example values used in generated documentation
EXAMPLE_PRIMARY_KEY = "123"
EXAMPLE_FOREIGN_KEY = "456"

# Sort-key marker for the sparse index listing non-deleted items
ACTIVE_MARKER = "ACTIVE"


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def placeholders(template: str) -> list[str]:
    """Placeholder names in a template, in order of appearance."""
    return PLACEHOLDER_RE.findall(template)


def resolve_template(template: str, values: Mapping[str, str]) -> str:
    """Substitute ``{name}`` with ``values[name]``, or with ``name`` when absent."""
    return PLACEHOLDER_RE.sub(lambda m: str(values.get(m.group(1), m.group(1))), template)


class KeyPatternValidation(BaseModel):
    """Outcome of the key validation pass."""

    valid: bool
    conflicts: list[KeyConflict] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class KeyPatternGenerator:
    """Build and resolve key templates using the table's delimiter."""

    # Relationships sharing one GSI number before it counts as overloaded
    OVERLOAD_THRESHOLD = 5

    def __init__(self, table: TableConfig | None = None) -> None:
        self.table = table or TableConfig()

    @property
    def delimiter(self) -> str:
        return self.table.key_delimiter

    def _key(self, prefix: str, placeholder: str) -> str:
        return f"{prefix}{self.delimiter}{{{placeholder}}}"

    # --- Shapes ---

    def base_pattern(self, entity: EntityDescriptor) -> KeyPattern:
        """Main-table pattern: pk = sk = ``{ENTITY}#{primaryKey}``."""
        key = self._key(entity.entity_type, entity.primary_key)
        return KeyPattern(pk=key, sk=key)

    def relationship_shape(
        self,
        entity: EntityDescriptor,
        relationship: RelationshipDescriptor,
        related: EntityDescriptor,
    ) -> IndexKeyTemplate | None:
        """Index templates for one relationship; ``None`` when no index is needed."""
        kind = relationship.kind
        if kind is RelationshipKind.BELONGS_TO:
            return self._belongs_to_shape(entity, relationship, related)
        elif kind is RelationshipKind.BELONGS_TO_MANY:
            return self._belongs_to_shape(entity, relationship, related)
        elif kind is RelationshipKind.HAS_ONE:
            return self._has_one_shape(entity, related)
        elif kind is RelationshipKind.HAS_MANY:
            # Children share the parent partition
            return None
        else:
            assert_never(kind)

    def _belongs_to_shape(
        self,
        entity: EntityDescriptor,
        relationship: RelationshipDescriptor,
        related: EntityDescriptor,
    ) -> IndexKeyTemplate:
        return IndexKeyTemplate(
            pk=self._key(related.entity_type, relationship.foreign_key),
            sk=self._key(entity.entity_type, entity.primary_key),
        )

    def _has_one_shape(
        self, entity: EntityDescriptor, related: EntityDescriptor
    ) -> IndexKeyTemplate:
        return IndexKeyTemplate(
            pk=self._key(entity.entity_type, entity.primary_key),
            sk=self._key(related.entity_type, f"{lower_first(related.name)}Id"),
        )

    def unique_shape(
        self, entity: EntityDescriptor, attribute: AttributeDescriptor
    ) -> IndexKeyTemplate:
        return IndexKeyTemplate(
            pk=self._key(attribute.name.upper(), attribute.name),
            sk=self._key(entity.entity_type, entity.primary_key),
        )

    def sparse_shape(
        self, entity: EntityDescriptor, attribute: str, soft_delete: bool = False
    ) -> IndexKeyTemplate:
        """Sparse templates; only items defining the attribute carry these keys.

        The soft-delete index is inverted: items carry the keys while the
        deletion marker is unset, so the index lists active items.
        """
        d = self.delimiter
        if soft_delete:
            return IndexKeyTemplate(
                pk=f"{entity.entity_type}{d}{ACTIVE_MARKER}",
                sk=self._key(entity.entity_type, entity.primary_key),
            )
        return IndexKeyTemplate(
            pk=f"{entity.entity_type}{d}{attribute.upper()}",
            sk=f"{{{attribute}}}{d}{{{entity.primary_key}}}",
        )

    def hierarchical_key(
        self, parent_type: str, parent_id: str, child_type: str, child_id: str
    ) -> ResolvedKey:
        """Key for a child item stored in its parent's partition."""
        d = self.delimiter
        return ResolvedKey(
            pk=f"{parent_type}{d}{parent_id}",
            sk=f"{child_type}{d}{child_id}",
        )

    def collection_key(
        self, parent_type: str, parent_id: str, child_type: str
    ) -> ResolvedKey:
        """Partition key plus the ``begins_with`` sort-key prefix for a child collection."""
        d = self.delimiter
        return ResolvedKey(pk=f"{parent_type}{d}{parent_id}", sk=f"{child_type}{d}")

    # --- Resolution ---

    def resolve(self, pattern: KeyPattern, values: Mapping[str, str]) -> ResolvedKey:
        """Substitute every placeholder; unknown placeholders fall back to their names."""
        return ResolvedKey(
            pk=resolve_template(pattern.pk, values),
            sk=resolve_template(pattern.sk, values),
            indexes={
                number: IndexKeyTemplate(
                    pk=resolve_template(template.pk, values),
                    sk=resolve_template(template.sk, values),
                )
                for number, template in pattern.indexes.items()
            },
        )

    def example_values(self, entity: EntityDescriptor) -> dict[str, str]:
        """Documentation values for every placeholder in the entity's pattern."""
        pattern = entity.key_pattern or self.base_pattern(entity)
        foreign_keys = {
            rel.foreign_key
            for rel in entity.relationships
            if rel.kind in (RelationshipKind.BELONGS_TO, RelationshipKind.BELONGS_TO_MANY)
        }

        values: dict[str, str] = {}
        for template in pattern.templates().values():
            for name in placeholders(template):
                if name == entity.primary_key:
                    values[name] = EXAMPLE_PRIMARY_KEY
                elif name in foreign_keys or name.endswith("Id"):
                    values[name] = EXAMPLE_FOREIGN_KEY
                else:
                    values[name] = f"<{name}>"
        return values

    def example(self, entity: EntityDescriptor) -> ResolvedKey:
        pattern = entity.key_pattern or self.base_pattern(entity)
        return self.resolve(pattern, self.example_values(entity))

    def generate(self, entity: EntityDescriptor) -> KeyPatternTemplate:
        """Documented key pattern for an entity (base pattern if none assigned yet)."""
        pattern = entity.key_pattern or self.base_pattern(entity)
        index_count = len(pattern.indexes)
        description = f"Primary key for {entity.name} items"
        if index_count:
            description += f" with {index_count} secondary index template(s)"
        return KeyPatternTemplate(
            name=f"{entity.name} key pattern",
            description=description,
            entity=entity.name,
            pattern=pattern,
            example=self.example(entity),
        )

    # --- Validation ---

    def validate(self, entities: Iterable[EntityDescriptor]) -> KeyPatternValidation:
        """
        Detect partition-prefix collisions and overloaded index numbers.

        One conflict is reported per shared prefix, naming every entity using it.
        """
        entities = list(entities)
        by_prefix: dict[str, list[str]] = {}
        for entity in entities:
            pattern = entity.key_pattern or self.base_pattern(entity)
            by_prefix.setdefault(pattern.partition_prefix, []).append(entity.name)

        conflicts = [
            KeyConflict(prefix=prefix, entities=names)
            for prefix, names in by_prefix.items()
            if len(names) > 1
        ]

        usage: dict[int, int] = {}
        for entity in entities:
            for rel in entity.relationships:
                if rel.index is not None:
                    usage[rel.index] = usage.get(rel.index, 0) + 1

        warnings = [
            f"GSI{number} is overloaded with {count} relationship patterns; "
            "consider spreading them across more indexes"
            for number, count in sorted(usage.items())
            if count > self.OVERLOAD_THRESHOLD
        ]

        return KeyPatternValidation(
            valid=not conflicts, conflicts=conflicts, warnings=warnings
        )
