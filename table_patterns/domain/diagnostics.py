"""Diagnostics produced while compiling - never raised, always collected."""

from enum import Enum

from pydantic import BaseModel

from table_patterns.domain.relationship import RelationshipKind


class MissingSource(str, Enum):
    """What kind of candidate could not get an index."""

    RELATIONSHIP = "relationship"
    UNIQUE_ATTRIBUTE = "unique_attribute"
    SPARSE_INDEX = "sparse_index"


class MissingPattern(BaseModel):
    """An access pattern the compiler could not back with an index."""

    entity: str
    source: MissingSource
    reason: str
    relationship: RelationshipKind | None = None
    related_model: str | None = None
    attribute: str | None = None

    model_config = {"frozen": True}

    @property
    def label(self) -> str:
        """``Post.belongs_to(User)`` or ``User.email``."""
        if self.relationship is not None:
            return f"{self.entity}.{self.relationship.value}({self.related_model})"
        return f"{self.entity}.{self.attribute}"

    def __str__(self) -> str:
        qualifier = {
            MissingSource.RELATIONSHIP: "",
            MissingSource.UNIQUE_ATTRIBUTE: " (unique)",
            MissingSource.SPARSE_INDEX: " (sparse)",
        }[self.source]
        return f"{self.label}{qualifier} - {self.reason}"


class KeyConflict(BaseModel):
    """Two or more entities claiming the same partition-key prefix."""

    prefix: str
    entities: list[str]

    model_config = {"frozen": True}

    def __str__(self) -> str:
        names = ", ".join(self.entities[:-1]) + f" and {self.entities[-1]}"
        quantifier = "both" if len(self.entities) == 2 else "all"
        return f'PK pattern conflict: {names} {quantifier} use prefix "{self.prefix}"'
