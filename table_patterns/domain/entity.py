"""EntityDescriptor - one parsed model, annotated as the compiler runs."""

from typing import Any

from pydantic import BaseModel, Field

from table_patterns.domain.access_pattern import AccessPattern
from table_patterns.domain.attribute import AttributeDescriptor
from table_patterns.domain.index import IndexKind, Projection
from table_patterns.domain.keys import KeyPattern
from table_patterns.domain.relationship import RelationshipDescriptor, RelationshipKind


class Traits(BaseModel):
    """Behavioural traits of a model."""

    timestamps: bool = False
    soft_deletes: bool = False
    uuid: bool = False
    ttl: bool = False
    versioning: bool = False

    model_config = {"frozen": True, "extra": "forbid"}


class IndexDeclaration(BaseModel):
    """An index explicitly declared on the raw model."""

    name: str | None = None
    columns: list[str]
    unique: bool = False
    kind: IndexKind | None = None
    projection: Projection = Field(default_factory=Projection)

    model_config = {"frozen": True}


class EntityDescriptor(BaseModel):
    """
    A declared entity.

    ``key_pattern`` and ``access_patterns`` start empty and are filled in by the
    compiler stages; ``raw`` keeps the original declaration for diagnostics.
    """

    name: str
    entity_type: str
    primary_key: str = "id"
    attributes: list[AttributeDescriptor] = Field(default_factory=list)
    relationships: list[RelationshipDescriptor] = Field(default_factory=list)
    traits: Traits = Field(default_factory=Traits)
    indexes: list[IndexDeclaration] = Field(default_factory=list)

    key_pattern: KeyPattern | None = None
    access_patterns: list[AccessPattern] = Field(default_factory=list)

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    model_config = {"frozen": False}

    @property
    def unique_attributes(self) -> list[AttributeDescriptor]:
        return [a for a in self.attributes if a.unique]

    def get_attribute(self, name: str) -> AttributeDescriptor | None:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

    def relationships_of(self, kind: RelationshipKind) -> list[RelationshipDescriptor]:
        return [r for r in self.relationships if r.kind == kind]

    def declared_index_columns(self, kind: IndexKind | None = None) -> set[str]:
        """Columns named in explicit index declarations, optionally filtered by kind."""
        columns: set[str] = set()
        for index in self.indexes:
            if kind is None or index.kind == kind:
                columns.update(index.columns)
        return columns

    def summary(self) -> str:
        return (
            f"EntityDescriptor({self.name}): "
            f"{len(self.attributes)} attributes, "
            f"{len(self.relationships)} relationships"
        )
