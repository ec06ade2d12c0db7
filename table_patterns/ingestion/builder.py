"""RegistryBuilder - transforms raw model declarations into a ModelRegistry."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import ValidationError

from table_patterns.config import TableConfig
from table_patterns.domain import (
    AttributeDescriptor,
    EntityDescriptor,
    IndexDeclaration,
    IndexKind,
    Projection,
    RelationshipDescriptor,
    RelationshipKind,
    Traits,
    infer_storage_type,
)
from table_patterns.exceptions import ModelDefinitionError
from table_patterns.ingestion.loader import YamlLoader
from table_patterns.registry import ModelRegistry

# Declaration key for each relationship kind, in GSI claim order
RELATIONSHIP_KEYS: dict[RelationshipKind, str] = {
    RelationshipKind.BELONGS_TO: "belongs_to",
    RelationshipKind.BELONGS_TO_MANY: "belongs_to_many",
    RelationshipKind.HAS_ONE: "has_one",
    RelationshipKind.HAS_MANY: "has_many",
}


def to_entity_type(model_name: str) -> str:
    """Convert model name to entity type (e.g., 'User' -> 'USER')."""
    return model_name.upper()


def to_foreign_key(model_name: str) -> str:
    """Conventional foreign key for a model (e.g., 'BlogPost' -> 'blogPostId')."""
    return f"{model_name[:1].lower()}{model_name[1:]}Id"


class RegistryBuilder:
    """
    Build a ModelRegistry from raw declarations.

    Example declaration (YAML):

        models:
          - name: Post
            attributes:
              title: {required: true}
              slug: {unique: true}
            belongs_to: [User]
            traits:
              timestamps: true
              soft_deletes: true
    """

    def __init__(self, table: TableConfig | None = None) -> None:
        self.table = table or TableConfig()
        self._raw_models: list[dict[str, Any]] = []

    @classmethod
    def from_directory(
        cls, path: str | Path, table: TableConfig | None = None
    ) -> ModelRegistry:
        """Load YAML files from a directory (or one file) and build the registry."""
        builder = cls(table)
        for raw in YamlLoader(path).load_all():
            builder.add_model(raw)
        return builder.build()

    @classmethod
    def from_dicts(
        cls, models: list[dict[str, Any]], table: TableConfig | None = None
    ) -> ModelRegistry:
        """Build a registry from raw model dicts (for testing and embedding)."""
        builder = cls(table)
        for raw in models:
            builder.add_model(raw)
        return builder.build()

    def add_model(self, raw: dict[str, Any]) -> None:
        self._raw_models.append(raw)

    def build(self) -> ModelRegistry:
        """Parse every collected declaration into a fresh registry."""
        registry = ModelRegistry()
        for raw in self._raw_models:
            registry.add(self.build_entity(raw))
        return registry

    def build_entity(self, raw: dict[str, Any]) -> EntityDescriptor:
        """Parse a single raw declaration."""
        name = raw.get("name")
        if not name or not isinstance(name, str):
            source = raw.get("_source_file", "<unknown>")
            raise ModelDefinitionError(str(name), f"model in {source} needs a string 'name'")

        primary_key = raw.get("primary_key", "id")
        entity_type = raw.get("entity_type") or to_entity_type(name)

        try:
            traits = Traits.model_validate(raw.get("traits") or {})
        except ValidationError as e:
            raise ModelDefinitionError(name, f"invalid traits: {e}") from e

        return EntityDescriptor(
            name=name,
            entity_type=entity_type,
            primary_key=primary_key,
            attributes=self._build_attributes(name, raw.get("attributes") or {}, traits),
            relationships=self._build_relationships(name, primary_key, raw),
            traits=traits,
            indexes=self._build_indexes(name, raw.get("indexes") or []),
            raw=raw,
        )

    def _build_attributes(
        self, model_name: str, data: Any, traits: Traits
    ) -> list[AttributeDescriptor]:
        if not isinstance(data, dict):
            raise ModelDefinitionError(model_name, "'attributes' must be a mapping")

        attributes = [
            self._build_attribute(model_name, attr_name, attr_def)
            for attr_name, attr_def in data.items()
        ]
        declared = {a.name for a in attributes}

        def add_implicit(name: str, **flags: Any) -> None:
            if name not in declared:
                attributes.append(AttributeDescriptor(name=name, fillable=False, **flags))
                declared.add(name)

        if traits.timestamps:
            add_implicit("createdAt", required=True, nullable=False, cast="datetime")
            add_implicit("updatedAt", required=True, nullable=False, cast="datetime")
        if traits.soft_deletes:
            add_implicit(self.table.soft_delete_attribute, cast="datetime")
        if traits.ttl:
            add_implicit(
                self.table.ttl_attribute, cast="integer", storage_type=infer_storage_type("integer", [])
            )

        return attributes

    def _build_attribute(
        self, model_name: str, attr_name: str, attr_def: Any
    ) -> AttributeDescriptor:
        """Build AttributeDescriptor from a declaration (``None`` means all defaults)."""
        if attr_def is None:
            attr_def = {}
        if not isinstance(attr_def, dict):
            raise ModelDefinitionError(
                model_name, f"attribute '{attr_name}' must be a mapping or empty"
            )

        rules = _parse_validation_rules(model_name, attr_def.get("validation"))
        cast = attr_def.get("cast")

        return AttributeDescriptor(
            name=attr_name,
            required=bool(attr_def.get("required", False)),
            unique=bool(attr_def.get("unique", False)),
            nullable=bool(attr_def.get("nullable", True)),
            hidden=bool(attr_def.get("hidden", False)),
            fillable=bool(attr_def.get("fillable", True)),
            cast=cast,
            default=attr_def.get("default"),
            validation=rules,
            storage_type=infer_storage_type(cast, rules),
        )

    def _build_relationships(
        self, model_name: str, primary_key: str, raw: dict[str, Any]
    ) -> list[RelationshipDescriptor]:
        relationships: list[RelationshipDescriptor] = []

        for kind, key in RELATIONSHIP_KEYS.items():
            entries = raw.get(key) or []
            if not isinstance(entries, list):
                raise ModelDefinitionError(model_name, f"'{key}' must be a list")
            for entry in entries:
                relationships.append(
                    self._build_relationship(model_name, primary_key, kind, entry)
                )

        return relationships

    def _build_relationship(
        self,
        model_name: str,
        primary_key: str,
        kind: RelationshipKind,
        entry: Any,
    ) -> RelationshipDescriptor:
        """Build RelationshipDescriptor from a model name or a mapping with overrides."""
        if isinstance(entry, str):
            entry = {"model": entry}
        if not isinstance(entry, dict) or not entry.get("model"):
            raise ModelDefinitionError(
                model_name, f"{kind.value} entries need a related 'model'"
            )

        related = entry["model"]

        # Parent-side kinds store the FK on the related entity
        if kind in (RelationshipKind.HAS_ONE, RelationshipKind.HAS_MANY):
            default_fk = to_foreign_key(model_name)
        else:
            default_fk = to_foreign_key(related)

        pivot = None
        if kind == RelationshipKind.BELONGS_TO_MANY:
            pivot = entry.get("pivot") or "".join(sorted([model_name, related]))

        pinned = entry.get("index")
        if pinned is not None and not isinstance(pinned, int):
            raise ModelDefinitionError(
                model_name, f"index for {kind.value}({related}) must be an integer"
            )

        return RelationshipDescriptor(
            kind=kind,
            related_model=related,
            foreign_key=entry.get("foreign_key", default_fk),
            local_key=entry.get("local_key", primary_key),
            pivot_entity=pivot,
            requires_index=kind.requires_index,
            pinned_index=pinned,
        )

    def _build_indexes(self, model_name: str, entries: Any) -> list[IndexDeclaration]:
        if not isinstance(entries, list):
            raise ModelDefinitionError(model_name, "'indexes' must be a list")

        indexes: list[IndexDeclaration] = []
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("columns"):
                raise ModelDefinitionError(model_name, "index declarations need 'columns'")

            kind = None
            kind_str = entry.get("type")
            if kind_str:
                try:
                    kind = IndexKind(str(kind_str).lower())
                except ValueError:
                    raise ModelDefinitionError(
                        model_name, f"unknown index type '{kind_str}' (expected gsi or lsi)"
                    ) from None

            projection = Projection()
            if "projection" in entry:
                projection = Projection(
                    type=str(entry["projection"]).upper(),
                    attributes=entry.get("attributes", []),
                )

            indexes.append(
                IndexDeclaration(
                    name=entry.get("name"),
                    columns=list(entry["columns"]),
                    unique=bool(entry.get("unique", False)),
                    kind=kind,
                    projection=projection,
                )
            )

        return indexes


def _parse_validation_rules(model_name: str, validation: Any) -> list[str]:
    """Parse validation rules into list format ('required|email' -> ['required', 'email'])."""
    if not validation:
        return []
    if isinstance(validation, str):
        return validation.split("|")
    if isinstance(validation, list):
        return [_rule_name(model_name, v) for v in validation]
    if isinstance(validation, dict) and "rule" in validation:
        return [validation["rule"]]
    return []


def _rule_name(model_name: str, rule: Any) -> str:
    if isinstance(rule, str):
        return rule
    if isinstance(rule, dict) and "rule" in rule:
        return str(rule["rule"])
    raise ModelDefinitionError(model_name, f"validation entry {rule!r} needs a 'rule'")
