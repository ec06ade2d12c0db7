"""Relationship domain - typed links between entities."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, model_validator


class RelationshipKind(str, Enum):
    """Closed set of relationship kinds."""

    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    BELONGS_TO = "belongs_to"
    BELONGS_TO_MANY = "belongs_to_many"

    @property
    def requires_index(self) -> bool:
        """Has-many children live in the parent partition; every other kind needs a GSI."""
        return self is not RelationshipKind.HAS_MANY


class RelationshipDescriptor(BaseModel):
    """A relationship from one entity to another."""

    kind: RelationshipKind
    related_model: str
    foreign_key: str
    local_key: str
    pivot_entity: str | None = None
    requires_index: bool = True
    # Explicit GSI number from the declaration, if any
    pinned_index: int | None = None
    # Assigned GSI number, filled in by the GSI deriver
    index: int | None = None

    model_config = {"frozen": False}

    @model_validator(mode="before")
    @classmethod
    def default_requires_index(cls, data: Any) -> Any:
        """Take ``requires_index`` from the kind unless given explicitly."""
        if isinstance(data, dict) and "requires_index" not in data:
            try:
                kind = RelationshipKind(data.get("kind"))
            except ValueError:
                return data
            data = {**data, "requires_index": kind.requires_index}
        return data

    @property
    def source(self) -> str:
        """Short label such as ``belongs_to(User)``."""
        return f"{self.kind.value}({self.related_model})"

    def assignment_key(self, entity_name: str) -> str:
        """Key used in the registry index-assignment table."""
        return f"{entity_name}:{self.kind.value}:{self.related_model}"
