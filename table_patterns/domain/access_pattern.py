"""Access pattern domain - documented ways of reading an entity."""

from enum import Enum

from pydantic import BaseModel, Field


class Operation(str, Enum):
    """DynamoDB read operation."""

    GET = "get"
    QUERY = "query"
    SCAN = "scan"


class AccessPatternCategory(str, Enum):
    """Grouping used in documentation."""

    ENTITY_BY_ID = "entity_by_id"
    ENTITY_LIST = "entity_list"
    PARENT_TO_CHILD = "relationship_parent_to_child"
    CHILD_TO_PARENT = "relationship_child_to_parent"
    UNIQUE_LOOKUP = "unique_lookup"
    STATUS_FILTER = "status_filter"
    TIME_RANGE = "time_range"
    COLLECTION = "collection"

    @property
    def display_name(self) -> str:
        return _CATEGORY_TITLES[self]


_CATEGORY_TITLES = {
    AccessPatternCategory.ENTITY_BY_ID: "Entity by ID",
    AccessPatternCategory.ENTITY_LIST: "Entity Listing",
    AccessPatternCategory.PARENT_TO_CHILD: "Parent to Child Queries",
    AccessPatternCategory.CHILD_TO_PARENT: "Child to Parent Queries",
    AccessPatternCategory.UNIQUE_LOOKUP: "Unique Attribute Lookups",
    AccessPatternCategory.STATUS_FILTER: "Status Filtering",
    AccessPatternCategory.TIME_RANGE: "Time Range Queries",
    AccessPatternCategory.COLLECTION: "Collection Queries",
}

MAIN_INDEX = "main"
SCAN_INDEX = "scan"


class AccessPattern(BaseModel):
    """
    A named way of retrieving data, tagged with its efficiency.

    ``index`` is ``main``, ``scan``, a GSI name such as ``GSI2`` or an LSI name.
    """

    name: str
    description: str
    entity_type: str
    operation: Operation
    index: str
    key_condition: str
    example_pk: str
    example_sk: str | None = None
    efficient: bool
    category: AccessPatternCategory
    required_params: list[str] = Field(default_factory=list)
    optional_params: list[str] = Field(default_factory=list)
    example_code: str = ""
    performance_notes: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class AccessPatternMatrix(BaseModel):
    """Per-entity summary of which access paths exist."""

    entity: str
    get_by_id: bool = True
    list_all: bool = True
    query_by_parent: list[str] = Field(default_factory=list)
    query_children: list[str] = Field(default_factory=list)
    unique_lookups: list[str] = Field(default_factory=list)
    efficient_patterns: int = 0
    inefficient_patterns: int = 0
