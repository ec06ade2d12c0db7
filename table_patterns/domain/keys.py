"""Key templates and resolved keys.

Templates are plain strings with ``{attributeName}`` placeholders, e.g.
``POST#{id}`` or ``USER#{userId}``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class IndexKeyTemplate(BaseModel):
    """Partition/sort template pair for one secondary index slot."""

    pk: str
    sk: str

    model_config = {"frozen": True}


class KeyPattern(BaseModel):
    """
    Key templates for one entity.

    ``indexes`` maps a GSI number (1-5) to the templates the entity writes into
    that index's key attributes.
    """

    pk: str
    sk: str
    indexes: dict[int, IndexKeyTemplate] = Field(default_factory=dict)

    model_config = {"frozen": False}

    @property
    def partition_prefix(self) -> str:
        """Literal portion of the partition template before the first placeholder."""
        return self.pk.split("{", 1)[0]

    def templates(self) -> dict[str, str]:
        """Flatten to ``{"pk": ..., "sk": ..., "gsi1pk": ..., "gsi1sk": ...}``."""
        flat = {"pk": self.pk, "sk": self.sk}
        for number in sorted(self.indexes):
            template = self.indexes[number]
            flat[f"gsi{number}pk"] = template.pk
            flat[f"gsi{number}sk"] = template.sk
        return flat


class ResolvedKey(BaseModel):
    """A KeyPattern with placeholders substituted by values."""

    pk: str
    sk: str
    indexes: dict[int, IndexKeyTemplate] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def as_item_keys(self) -> dict[str, str]:
        """Flatten to the same shape as :meth:`KeyPattern.templates`."""
        flat = {"pk": self.pk, "sk": self.sk}
        for number in sorted(self.indexes):
            flat[f"gsi{number}pk"] = self.indexes[number].pk
            flat[f"gsi{number}sk"] = self.indexes[number].sk
        return flat


class KeyPatternTemplate(BaseModel):
    """Documented key pattern for an entity, with an example resolution."""

    name: str
    description: str
    entity: str
    pattern: KeyPattern
    example: ResolvedKey

    model_config = {"frozen": True}
