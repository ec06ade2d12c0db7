"""ModelRegistry - the catalog every compiler stage reads and annotates.

The registry is built once from parsed declarations, annotated by the
compiler stages, then treated as read-only by consumers. It owns the
index-assignment table and the diagnostics accumulated along the way, so
independent compilations never share state.
"""

from __future__ import annotations

from collections.abc import Iterator

from loguru import logger

from table_patterns.domain import (
    EntityDescriptor,
    MissingPattern,
    RelationshipDescriptor,
)
from table_patterns.exceptions import DuplicateModelError


class ModelRegistry:
    """Entity catalog plus index assignments, warnings and missing patterns."""

    def __init__(self, entities: list[EntityDescriptor] | None = None) -> None:
        self._entities: dict[str, EntityDescriptor] = {}
        self.index_assignments: dict[str, int] = {}
        self.warnings: list[str] = []
        self.missing_patterns: list[MissingPattern] = []
        for entity in entities or []:
            self.add(entity)

    def add(self, entity: EntityDescriptor) -> None:
        """Register an entity.

        Raises:
            DuplicateModelError: If an entity with the same name exists.
        """
        if entity.name in self._entities:
            raise DuplicateModelError(entity.name)
        self._entities[entity.name] = entity

    def get(self, name: str) -> EntityDescriptor | None:
        return self._entities.get(name)

    def has(self, name: str) -> bool:
        return name in self._entities

    @property
    def entities(self) -> list[EntityDescriptor]:
        """Entities in declaration order."""
        return list(self._entities.values())

    @property
    def names(self) -> list[str]:
        return list(self._entities.keys())

    def __iter__(self) -> Iterator[EntityDescriptor]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, name: object) -> bool:
        return name in self._entities

    # --- Diagnostics ---

    def warn(self, message: str) -> None:
        """Append a warning; warnings are never raised."""
        logger.warning(message)
        self.warnings.append(message)

    def add_missing(self, missing: MissingPattern) -> None:
        logger.debug(f"Missing pattern: {missing}")
        self.missing_patterns.append(missing)

    # --- Index assignments ---

    def assign_index(self, key: str, number: int) -> None:
        logger.debug(f"Assigned GSI{number} to {key}")
        self.index_assignments[key] = number

    def assigned_index(self, key: str) -> int | None:
        return self.index_assignments.get(key)

    @property
    def used_index_numbers(self) -> set[int]:
        return set(self.index_assignments.values())

    def next_free_index(self, start: int = 1) -> int:
        """Lowest index number >= ``start`` not yet in the assignment table."""
        used = self.used_index_numbers
        number = start
        while number in used:
            number += 1
        return number

    # --- Relationship resolution ---

    def related_entity(
        self, relationship: RelationshipDescriptor
    ) -> EntityDescriptor | None:
        return self._entities.get(relationship.related_model)

    def check_relationships(self) -> int:
        """Warn once for every relationship whose related model is not registered.

        Returns:
            Number of dangling relationships found.
        """
        dangling = 0
        for entity in self._entities.values():
            for rel in entity.relationships:
                if rel.related_model not in self._entities:
                    dangling += 1
                    self.warn(
                        f"Related model {rel.related_model} not found for "
                        f"{entity.name}.{rel.source}; relationship skipped"
                    )
        return dangling

    def summary(self) -> str:
        return (
            f"ModelRegistry: {len(self._entities)} entities, "
            f"{len(self.index_assignments)} index assignments, "
            f"{len(self.warnings)} warnings, "
            f"{len(self.missing_patterns)} missing patterns"
        )
