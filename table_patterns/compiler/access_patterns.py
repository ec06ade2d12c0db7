"""AccessPatternGenerator - catalog of the ways each entity can be read.

Runs after index derivation; every pattern is tagged efficient (key lookup or
index query) or inefficient (scan with filter).
"""

from __future__ import annotations

from loguru import logger
from pydantic import BaseModel, Field

from table_patterns.compiler.keys import (
    EXAMPLE_FOREIGN_KEY,
    EXAMPLE_PRIMARY_KEY,
    KeyPatternGenerator,
)
from table_patterns.compiler.lsi import LsiDerivationResult
from table_patterns.compiler.sparse import SparseDerivationResult, SparseKind
from table_patterns.config import TableConfig
from table_patterns.domain import (
    MAIN_INDEX,
    SCAN_INDEX,
    AccessPattern,
    AccessPatternCategory,
    AccessPatternMatrix,
    EntityDescriptor,
    MissingPattern,
    Operation,
    RelationshipDescriptor,
    RelationshipKind,
    gsi_name,
)
from table_patterns.registry import ModelRegistry

PAGING_PARAMS = ["limit", "cursor"]
SORTED_PARAMS = ["limit", "sort_direction"]


class AccessPatternReport(BaseModel):
    patterns: list[AccessPattern] = Field(default_factory=list)
    matrix: list[AccessPatternMatrix] = Field(default_factory=list)
    missing_patterns: list[MissingPattern] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @property
    def efficient_count(self) -> int:
        return sum(1 for p in self.patterns if p.efficient)

    @property
    def scan_count(self) -> int:
        return sum(1 for p in self.patterns if p.operation == Operation.SCAN)

    def for_entity(self, entity_type: str) -> list[AccessPattern]:
        return [p for p in self.patterns if p.entity_type == entity_type]


def _query_code(pk_name: str, pk_value: str, index: str | None = None, sk: str = "") -> str:
    index_arg = f'IndexName="{index}", ' if index else ""
    return f'table.query({index_arg}KeyConditionExpression=Key("{pk_name}").eq("{pk_value}"){sk})'


class AccessPatternGenerator:
    """
    Build the access-pattern catalog from an annotated registry.

    Patterns are also attached to each entity's ``access_patterns``. Missing
    patterns are taken from the registry as recorded by the derivers, not
    recomputed.
    """

    def __init__(
        self,
        registry: ModelRegistry,
        table: TableConfig | None = None,
        keys: KeyPatternGenerator | None = None,
    ) -> None:
        self.registry = registry
        self.table = table or TableConfig()
        self.keys = keys or KeyPatternGenerator(self.table)

    @property
    def d(self) -> str:
        return self.table.key_delimiter

    def generate(
        self,
        sparse: SparseDerivationResult | None = None,
        lsi: LsiDerivationResult | None = None,
    ) -> AccessPatternReport:
        report = AccessPatternReport(missing_patterns=list(self.registry.missing_patterns))

        for entity in self.registry:
            patterns = self._entity_patterns(entity, sparse, lsi, report.suggestions)
            entity.access_patterns = patterns
            report.patterns.extend(patterns)
            report.matrix.append(self._matrix(entity, patterns))

        if report.missing_patterns:
            report.suggestions.append(
                f"{len(report.missing_patterns)} access patterns lack efficient index support. "
                "Consider increasing table.gsi_count or enabling table.index_overloading."
            )
        if report.scan_count:
            report.suggestions.append(
                f"{report.scan_count} patterns require table scans. "
                "Review access patterns and consider adding GSIs."
            )

        logger.debug(
            f"Generated {len(report.patterns)} access patterns "
            f"({report.efficient_count} efficient)"
        )
        return report

    def _entity_patterns(
        self,
        entity: EntityDescriptor,
        sparse: SparseDerivationResult | None,
        lsi: LsiDerivationResult | None,
        suggestions: list[str],
    ) -> list[AccessPattern]:
        patterns = [self.get_by_id(entity), self.list_all(entity)]

        for rel in entity.relationships:
            related = self.registry.related_entity(rel)
            if related is None:
                continue
            pattern = self.relationship_pattern(entity, rel, related)
            if pattern is not None:
                patterns.append(pattern)

        for attr in entity.unique_attributes:
            number = self.registry.assigned_index(f"{entity.name}:unique:{attr.name}")
            if number is not None:
                patterns.append(self.unique_lookup(entity, attr.name, number))

        sparse_usages = sparse.for_entity(entity.name) if sparse else []
        for usage in sparse_usages:
            patterns.append(self.sparse_query(entity, usage.attribute, usage.kind, usage.index))

        for usage in lsi.for_entity(entity.name) if lsi else []:
            patterns.append(self.lsi_query(entity, usage.name, usage.sort_key))

        has_active_index = any(u.kind == SparseKind.SOFT_DELETE for u in sparse_usages)
        if entity.traits.soft_deletes and not has_active_index:
            patterns.append(self.active_scan(entity))
            suggestions.append(
                f"Consider adding a sparse GSI for {entity.name} soft delete filtering "
                "to improve query performance"
            )

        return patterns

    def _matrix(
        self, entity: EntityDescriptor, patterns: list[AccessPattern]
    ) -> AccessPatternMatrix:
        matrix = AccessPatternMatrix(entity=entity.name)
        for rel in entity.relationships:
            if not self.registry.has(rel.related_model):
                continue
            if rel.kind == RelationshipKind.HAS_MANY:
                matrix.query_children.append(rel.related_model)
            elif rel.kind == RelationshipKind.BELONGS_TO and rel.index is not None:
                matrix.query_by_parent.append(rel.related_model)
        for attr in entity.unique_attributes:
            if self.registry.assigned_index(f"{entity.name}:unique:{attr.name}") is not None:
                matrix.unique_lookups.append(attr.name)
        matrix.efficient_patterns = sum(1 for p in patterns if p.efficient)
        matrix.inefficient_patterns = len(patterns) - matrix.efficient_patterns
        return matrix

    # --- Pattern builders ---

    def get_by_id(self, entity: EntityDescriptor) -> AccessPattern:
        base = self.keys.base_pattern(entity)
        pk, sk = self.table.partition_key, self.table.sort_key
        example = f"{entity.entity_type}{self.d}{EXAMPLE_PRIMARY_KEY}"
        return AccessPattern(
            name=f"Get {entity.name} by ID",
            description=f"Retrieve a single {entity.name} by its primary key",
            entity_type=entity.entity_type,
            operation=Operation.GET,
            index=MAIN_INDEX,
            key_condition=f"{pk} = {base.pk} AND {sk} = {base.sk}",
            example_pk=example,
            example_sk=example,
            efficient=True,
            category=AccessPatternCategory.ENTITY_BY_ID,
            required_params=[entity.primary_key],
            example_code=f'table.get_item(Key={{"{pk}": "{example}", "{sk}": "{example}"}})',
            performance_notes=[
                "Single item read - very efficient",
                "Consumes 0.5 RCU for items up to 4KB (eventually consistent)",
            ],
        )

    def list_all(self, entity: EntityDescriptor) -> AccessPattern:
        et = self.table.entity_type_attribute
        return AccessPattern(
            name=f"List all {entity.name}s",
            description=f"Retrieve all {entity.name} entities (requires scan with filter)",
            entity_type=entity.entity_type,
            operation=Operation.SCAN,
            index=SCAN_INDEX,
            key_condition=f"Scan with filter: {et} = '{entity.name}'",
            example_pk="N/A (full table scan)",
            efficient=False,
            category=AccessPatternCategory.ENTITY_LIST,
            optional_params=list(PAGING_PARAMS),
            example_code=f'table.scan(FilterExpression=Attr("{et}").eq("{entity.name}"))',
            performance_notes=[
                "WARNING: Full table scan required",
                "Consider using a GSI with entity type as partition key for large datasets",
                "Use pagination to limit memory usage",
            ],
        )

    def relationship_pattern(
        self,
        entity: EntityDescriptor,
        rel: RelationshipDescriptor,
        related: EntityDescriptor,
    ) -> AccessPattern | None:
        """Pattern for one relationship; ``None`` when its index was never assigned."""
        d = self.d
        if rel.kind == RelationshipKind.HAS_MANY:
            pk, sk = self.table.partition_key, self.table.sort_key
            collection = self.keys.collection_key(
                entity.entity_type, EXAMPLE_PRIMARY_KEY, related.entity_type
            )
            return AccessPattern(
                name=f"List {related.name}s for {entity.name}",
                description=f"Query all {related.name} items belonging to a {entity.name}",
                entity_type=related.entity_type,
                operation=Operation.QUERY,
                index=MAIN_INDEX,
                key_condition=(
                    f"{pk} = {entity.entity_type}{d}{{{entity.primary_key}}} "
                    f"AND begins_with({sk}, {related.entity_type}{d})"
                ),
                example_pk=collection.pk,
                example_sk=collection.sk,
                efficient=True,
                category=AccessPatternCategory.PARENT_TO_CHILD,
                required_params=[entity.primary_key],
                optional_params=list(SORTED_PARAMS),
                example_code=_query_code(
                    pk, collection.pk, sk=f' & Key("{sk}").begins_with("{collection.sk}")'
                ),
                performance_notes=[
                    "Efficient query using pk/sk pattern",
                    "Results are sorted by sort key",
                ],
            )

        if rel.index is None:
            return None

        index = gsi_name(rel.index)
        key_names = self.table.gsi_key_names(rel.index)

        if rel.kind == RelationshipKind.HAS_ONE:
            example_pk = f"{entity.entity_type}{d}{EXAMPLE_PRIMARY_KEY}"
            return AccessPattern(
                name=f"Get {related.name} for {entity.name}",
                description=f"Retrieve the {related.name} owned by a {entity.name}",
                entity_type=related.entity_type,
                operation=Operation.QUERY,
                index=index,
                key_condition=(
                    f"{key_names.pk} = {entity.entity_type}{d}{{{entity.primary_key}}} "
                    f"AND begins_with({key_names.sk}, {related.entity_type}{d})"
                ),
                example_pk=example_pk,
                example_sk=f"{related.entity_type}{d}",
                efficient=True,
                category=AccessPatternCategory.PARENT_TO_CHILD,
                required_params=[entity.primary_key],
                example_code=_query_code(key_names.pk, example_pk, index),
                performance_notes=[f"Uses {index} for efficient query", "Returns at most one item"],
            )

        example_pk = f"{related.entity_type}{d}{EXAMPLE_FOREIGN_KEY}"
        key_condition = f"{key_names.pk} = {related.entity_type}{d}{{{rel.foreign_key}}}"
        code = _query_code(key_names.pk, example_pk, index)

        if rel.kind == RelationshipKind.BELONGS_TO_MANY:
            return AccessPattern(
                name=f"Get {entity.name}s for {related.name} (many-to-many)",
                description=f"Query all {entity.name} items associated with a {related.name}",
                entity_type=entity.entity_type,
                operation=Operation.QUERY,
                index=index,
                key_condition=key_condition,
                example_pk=example_pk,
                efficient=True,
                category=AccessPatternCategory.COLLECTION,
                required_params=[rel.foreign_key],
                optional_params=["limit"],
                example_code=code,
                performance_notes=[
                    f"Adjacency list through {rel.pivot_entity}",
                    "May require BatchGetItem for full related items",
                ],
            )

        return AccessPattern(
            name=f"Get {entity.name}s for {related.name}",
            description=f"Query all {entity.name} items belonging to a {related.name}",
            entity_type=entity.entity_type,
            operation=Operation.QUERY,
            index=index,
            key_condition=key_condition,
            example_pk=example_pk,
            efficient=True,
            category=AccessPatternCategory.CHILD_TO_PARENT,
            required_params=[rel.foreign_key],
            optional_params=list(SORTED_PARAMS),
            example_code=code,
            performance_notes=[
                f"Uses {index} for efficient query",
                "Returns all children for the given parent",
            ],
        )

    def unique_lookup(self, entity: EntityDescriptor, attribute: str, number: int) -> AccessPattern:
        index = gsi_name(number)
        key_names = self.table.gsi_key_names(number)
        example_pk = f"{attribute.upper()}{self.d}<{attribute}>"
        return AccessPattern(
            name=f"Get {entity.name} by {attribute}",
            description=f"Retrieve a {entity.name} by unique {attribute}",
            entity_type=entity.entity_type,
            operation=Operation.QUERY,
            index=index,
            key_condition=f"{key_names.pk} = {attribute.upper()}{self.d}{{{attribute}}}",
            example_pk=example_pk,
            efficient=True,
            category=AccessPatternCategory.UNIQUE_LOOKUP,
            required_params=[attribute],
            example_code=_query_code(key_names.pk, example_pk, index),
            performance_notes=["Efficient unique lookup using GSI", "Returns at most one item"],
        )

    def sparse_query(
        self, entity: EntityDescriptor, attribute: str, kind: SparseKind, number: int
    ) -> AccessPattern:
        index = gsi_name(number)
        key_names = self.table.gsi_key_names(number)
        template = self.keys.sparse_shape(
            entity, attribute, soft_delete=kind == SparseKind.SOFT_DELETE
        )

        if kind == SparseKind.SOFT_DELETE:
            name = f"Get active {entity.name}s"
            description = f"Query all non-deleted {entity.name} entities"
            category = AccessPatternCategory.STATUS_FILTER
            sk_condition = ""
            optional = list(PAGING_PARAMS)
        elif kind == SparseKind.TTL_EXPIRY:
            name = f"Get {entity.name}s by expiry"
            description = f"Query {entity.name} items ordered by {attribute}"
            category = AccessPatternCategory.TIME_RANGE
            sk_condition = f" AND {key_names.sk} BETWEEN :start AND :end"
            optional = ["start", "end", "limit"]
        else:
            name = f"Get {entity.name}s by {attribute}"
            description = f"Query {entity.name} items that have {attribute} set"
            category = AccessPatternCategory.STATUS_FILTER
            sk_condition = f" AND begins_with({key_names.sk}, {{{attribute}}}{self.d})"
            optional = [attribute, "limit"]

        return AccessPattern(
            name=name,
            description=description,
            entity_type=entity.entity_type,
            operation=Operation.QUERY,
            index=index,
            key_condition=f"{key_names.pk} = {template.pk}{sk_condition}",
            example_pk=template.pk,
            efficient=True,
            category=category,
            optional_params=optional,
            example_code=_query_code(key_names.pk, template.pk, index),
            performance_notes=[
                f"Sparse index: only items defining {attribute} are written to {index}"
                if kind != SparseKind.SOFT_DELETE
                else f"Sparse index: items leave {index} once {attribute} is set",
            ],
        )

    def lsi_query(self, entity: EntityDescriptor, index: str, sort_key: str) -> AccessPattern:
        pk = self.table.partition_key
        example_pk = f"{entity.entity_type}{self.d}{EXAMPLE_PRIMARY_KEY}"
        return AccessPattern(
            name=f"Get {entity.name}s sorted by {sort_key}",
            description=f"Query {entity.name} items in a partition ordered by {sort_key}",
            entity_type=entity.entity_type,
            operation=Operation.QUERY,
            index=index,
            key_condition=(
                f"{pk} = {entity.entity_type}{self.d}{{{entity.primary_key}}} "
                f"AND {sort_key} BETWEEN :start AND :end"
            ),
            example_pk=example_pk,
            efficient=True,
            category=AccessPatternCategory.TIME_RANGE,
            required_params=[entity.primary_key],
            optional_params=["start", "end", "sort_direction"],
            example_code=_query_code(pk, example_pk, index),
            performance_notes=["LSI shares the table partition key", "10GB item collection limit"],
        )

    def active_scan(self, entity: EntityDescriptor) -> AccessPattern:
        et = self.table.entity_type_attribute
        marker = self.table.soft_delete_attribute
        return AccessPattern(
            name=f"Get active {entity.name}s",
            description=f"Query all non-deleted {entity.name} entities",
            entity_type=entity.entity_type,
            operation=Operation.SCAN,
            index=SCAN_INDEX,
            key_condition=(
                f"Scan with filter: {et} = '{entity.name}' AND attribute_not_exists({marker})"
            ),
            example_pk="N/A (filtered scan)",
            efficient=False,
            category=AccessPatternCategory.STATUS_FILTER,
            optional_params=list(PAGING_PARAMS),
            example_code=(
                f'table.scan(FilterExpression=Attr("{et}").eq("{entity.name}") '
                f'& Attr("{marker}").not_exists())'
            ),
            performance_notes=[
                "Consider using a sparse GSI for better performance",
                "Filter expression applied after scan",
            ],
        )
