"""Attribute domain - declared entity attributes and their storage types."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class StorageType(str, Enum):
    """DynamoDB attribute type descriptors."""

    STRING = "S"
    NUMBER = "N"
    BINARY = "B"
    BOOLEAN = "BOOL"
    NULL = "NULL"
    MAP = "M"
    LIST = "L"
    STRING_SET = "SS"
    NUMBER_SET = "NS"
    BINARY_SET = "BS"


_CAST_TYPES: dict[str, StorageType] = {
    "integer": StorageType.NUMBER,
    "int": StorageType.NUMBER,
    "float": StorageType.NUMBER,
    "double": StorageType.NUMBER,
    "number": StorageType.NUMBER,
    "decimal": StorageType.NUMBER,
    "boolean": StorageType.BOOLEAN,
    "bool": StorageType.BOOLEAN,
    "array": StorageType.LIST,
    "list": StorageType.LIST,
    "object": StorageType.MAP,
    "json": StorageType.MAP,
    "map": StorageType.MAP,
    "set": StorageType.STRING_SET,
    "binary": StorageType.BINARY,
}

TIMESTAMP_CASTS = frozenset({"datetime", "date", "timestamp"})


def infer_storage_type(cast: str | None, rules: list[str]) -> StorageType:
    """Infer the stored attribute type from a cast, falling back to validation hints."""
    if cast:
        return _CAST_TYPES.get(cast.lower(), StorageType.STRING)

    joined = "|".join(rules)
    if "integer" in joined or "numeric" in joined:
        return StorageType.NUMBER
    if "boolean" in joined:
        return StorageType.BOOLEAN
    if "array" in joined:
        return StorageType.LIST
    return StorageType.STRING


class AttributeDescriptor(BaseModel):
    """
    A declared attribute of an entity.

    Flags mirror the declarative model: uniqueness drives GSI lookups,
    nullability and explicit index declarations drive sparse indexes.
    """

    name: str
    required: bool = False
    unique: bool = False
    nullable: bool = True
    hidden: bool = False
    fillable: bool = True
    cast: str | None = None
    default: Any = None
    validation: list[str] = Field(default_factory=list)
    storage_type: StorageType = StorageType.STRING

    model_config = {"frozen": True}

    @property
    def is_timestamp(self) -> bool:
        """Whether the attribute looks like a point in time."""
        lowered = self.name.lower()
        return (
            (self.cast is not None and self.cast.lower() in TIMESTAMP_CASTS)
            or "date" in lowered
            or "time" in lowered
            or self.name in ("createdAt", "updatedAt")
        )
