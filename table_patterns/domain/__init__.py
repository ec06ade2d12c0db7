"""Domain layer - entity descriptors and compiler output types.

This layer contains storage-agnostic descriptions of declared models plus the
artifacts the compiler produces for them (key templates, index definitions,
access patterns, diagnostics). Rendering belongs in adapters/.
"""

from table_patterns.domain.access_pattern import (
    MAIN_INDEX,
    SCAN_INDEX,
    AccessPattern,
    AccessPatternCategory,
    AccessPatternMatrix,
    Operation,
)
from table_patterns.domain.attribute import (
    AttributeDescriptor,
    StorageType,
    infer_storage_type,
)
from table_patterns.domain.diagnostics import KeyConflict, MissingPattern, MissingSource
from table_patterns.domain.entity import EntityDescriptor, IndexDeclaration, Traits
from table_patterns.domain.index import (
    IndexDefinition,
    IndexKind,
    Projection,
    ProjectionType,
    gsi_name,
)
from table_patterns.domain.keys import (
    IndexKeyTemplate,
    KeyPattern,
    KeyPatternTemplate,
    ResolvedKey,
)
from table_patterns.domain.relationship import RelationshipDescriptor, RelationshipKind

__all__ = [
    # Access patterns
    "MAIN_INDEX",
    "SCAN_INDEX",
    "AccessPattern",
    "AccessPatternCategory",
    "AccessPatternMatrix",
    "Operation",
    # Attributes
    "AttributeDescriptor",
    "StorageType",
    "infer_storage_type",
    # Diagnostics
    "KeyConflict",
    "MissingPattern",
    "MissingSource",
    # Entity
    "EntityDescriptor",
    "IndexDeclaration",
    "Traits",
    # Indexes
    "IndexDefinition",
    "IndexKind",
    "Projection",
    "ProjectionType",
    "gsi_name",
    # Keys
    "IndexKeyTemplate",
    "KeyPattern",
    "KeyPatternTemplate",
    "ResolvedKey",
    # Relationships
    "RelationshipDescriptor",
    "RelationshipKind",
]
