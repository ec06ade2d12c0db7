"""Index definitions consumed by table-provisioning tooling."""

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class IndexKind(str, Enum):
    """Secondary index kinds."""

    GSI = "gsi"
    LSI = "lsi"


class ProjectionType(str, Enum):
    """Which attributes an index copies from the base table."""

    ALL = "ALL"
    KEYS_ONLY = "KEYS_ONLY"
    INCLUDE = "INCLUDE"


class Projection(BaseModel):
    """Projection specification for an index."""

    type: ProjectionType = ProjectionType.ALL
    attributes: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_include_attributes(self) -> "Projection":
        """INCLUDE needs an explicit attribute list; the others take none."""
        if self.type == ProjectionType.INCLUDE and not self.attributes:
            raise ValueError("INCLUDE projection requires at least one attribute")
        if self.type != ProjectionType.INCLUDE and self.attributes:
            raise ValueError(f"{self.type.value} projection does not take attributes")
        return self


class IndexDefinition(BaseModel):
    """
    A secondary index to provision.

    LSIs reuse the table partition key, so ``partition_key`` is None for them.
    """

    name: str
    kind: IndexKind
    partition_key: str | None = None
    sort_key: str | None = None
    projection: Projection = Field(default_factory=Projection)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_key_shape(self) -> "IndexDefinition":
        if self.kind == IndexKind.GSI and not self.partition_key:
            raise ValueError(f"GSI '{self.name}' requires a partition key")
        if self.kind == IndexKind.LSI:
            if self.partition_key is not None:
                raise ValueError(f"LSI '{self.name}' reuses the table partition key")
            if not self.sort_key:
                raise ValueError(f"LSI '{self.name}' requires a sort key")
        return self


def gsi_name(number: int) -> str:
    """Index name for a GSI slot (``GSI1`` .. ``GSI5``)."""
    return f"GSI{number}"
