"""Tests for YAML loading and registry building."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
import yaml

from table_patterns.config import TableConfig
from table_patterns.domain import IndexKind, ProjectionType, RelationshipKind, StorageType
from table_patterns.exceptions import (
    DuplicateModelError,
    ModelDefinitionError,
    ModelFileError,
)
from table_patterns.ingestion import RegistryBuilder, YamlLoader, to_entity_type, to_foreign_key


class TestNaming:
    """Tests for naming conventions."""

    def test_entity_type(self) -> None:
        assert to_entity_type("User") == "USER"
        assert to_entity_type("BlogPost") == "BLOGPOST"

    def test_foreign_key(self) -> None:
        assert to_foreign_key("User") == "userId"
        assert to_foreign_key("BlogPost") == "blogPostId"


class TestRegistryBuilder:
    """Tests for RegistryBuilder.build_entity."""

    def test_attributes_and_defaults(self) -> None:
        entity = RegistryBuilder().build_entity(
            {
                "name": "User",
                "attributes": {
                    "email": {"unique": True, "validation": "required|email"},
                    "age": {"cast": "integer"},
                    "bio": None,
                },
            }
        )

        assert entity.entity_type == "USER"
        assert entity.primary_key == "id"
        email = entity.get_attribute("email")
        assert email is not None
        assert email.unique is True
        assert email.validation == ["required", "email"]
        assert email.nullable is True
        assert entity.get_attribute("age").storage_type == StorageType.NUMBER
        bio = entity.get_attribute("bio")
        assert bio is not None
        assert bio.fillable is True
        assert bio.storage_type == StorageType.STRING
        assert [a.name for a in entity.unique_attributes] == ["email"]

    def test_entity_type_and_primary_key_override(self) -> None:
        entity = RegistryBuilder().build_entity(
            {
                "name": "OrderLegacy",
                "entity_type": "ORDER",
                "primary_key": "orderId",
                "attributes": {},
            }
        )

        assert entity.entity_type == "ORDER"
        assert entity.primary_key == "orderId"

    def test_trait_attributes_are_implicit(self) -> None:
        table = TableConfig(soft_delete_attribute="removedAt", ttl_attribute="expiresAt")
        entity = RegistryBuilder(table).build_entity(
            {
                "name": "Session",
                "attributes": {"token": None},
                "traits": {"timestamps": True, "soft_deletes": True, "ttl": True},
            }
        )

        names = [a.name for a in entity.attributes]
        assert names == ["token", "createdAt", "updatedAt", "removedAt", "expiresAt"]
        created = entity.get_attribute("createdAt")
        assert created.nullable is False
        assert created.fillable is False
        assert created.is_timestamp
        assert entity.get_attribute("expiresAt").storage_type == StorageType.NUMBER

    def test_declared_trait_attribute_not_duplicated(self) -> None:
        entity = RegistryBuilder().build_entity(
            {
                "name": "Post",
                "attributes": {"createdAt": {"cast": "date"}},
                "traits": {"timestamps": True},
            }
        )

        assert [a.name for a in entity.attributes] == ["createdAt", "updatedAt"]
        assert entity.get_attribute("createdAt").cast == "date"

    def test_relationship_defaults(self) -> None:
        entity = RegistryBuilder().build_entity(
            {
                "name": "Post",
                "attributes": {},
                "belongs_to": ["User"],
                "has_many": ["Comment"],
                "has_one": ["Cover"],
                "belongs_to_many": ["Tag"],
            }
        )

        by_kind = {r.kind: r for r in entity.relationships}
        assert by_kind[RelationshipKind.BELONGS_TO].foreign_key == "userId"
        assert by_kind[RelationshipKind.HAS_MANY].foreign_key == "postId"
        assert by_kind[RelationshipKind.HAS_MANY].requires_index is False
        assert by_kind[RelationshipKind.HAS_ONE].foreign_key == "postId"
        assert [r.kind for r in entity.relationships] == [
            RelationshipKind.BELONGS_TO,
            RelationshipKind.BELONGS_TO_MANY,
            RelationshipKind.HAS_ONE,
            RelationshipKind.HAS_MANY,
        ]
        btm = by_kind[RelationshipKind.BELONGS_TO_MANY]
        assert btm.foreign_key == "tagId"
        assert btm.pivot_entity == "PostTag"
        assert btm.local_key == "id"

    def test_relationship_overrides(self) -> None:
        entity = RegistryBuilder().build_entity(
            {
                "name": "Post",
                "attributes": {},
                "belongs_to": [{"model": "User", "foreign_key": "authorId", "index": 3}],
                "belongs_to_many": [{"model": "Tag", "pivot": "Tagging"}],
            }
        )

        author, tags = entity.relationships
        assert author.foreign_key == "authorId"
        assert author.pinned_index == 3
        assert author.index is None
        assert tags.pivot_entity == "Tagging"

    def test_index_declarations(self) -> None:
        entity = RegistryBuilder().build_entity(
            {
                "name": "Post",
                "attributes": {"publishedAt": None, "title": None},
                "indexes": [
                    {"columns": ["publishedAt"], "type": "LSI", "projection": "keys_only"},
                    {
                        "name": "by_title",
                        "columns": ["title"],
                        "projection": "include",
                        "attributes": ["title"],
                    },
                ],
            }
        )

        lsi, plain = entity.indexes
        assert lsi.kind == IndexKind.LSI
        assert lsi.projection.type == ProjectionType.KEYS_ONLY
        assert plain.kind is None
        assert plain.projection.attributes == ["title"]
        assert entity.declared_index_columns(IndexKind.LSI) == {"publishedAt"}

    def test_validation_rule_forms(self) -> None:
        entity = RegistryBuilder().build_entity(
            {
                "name": "Item",
                "attributes": {
                    "a": {"validation": ["required", {"rule": "numeric"}]},
                    "b": {"validation": {"rule": "boolean"}},
                },
            }
        )

        assert entity.get_attribute("a").validation == ["required", "numeric"]
        assert entity.get_attribute("a").storage_type == StorageType.NUMBER
        assert entity.get_attribute("b").storage_type == StorageType.BOOLEAN

    @pytest.mark.parametrize(
        ("raw", "message"),
        [
            ({"attributes": {}}, "needs a string 'name'"),
            ({"name": "Post", "attributes": ["title"]}, "'attributes' must be a mapping"),
            ({"name": "Post", "attributes": {"title": "string"}}, "must be a mapping or empty"),
            ({"name": "Post", "attributes": {}, "belongs_to": "User"}, "'belongs_to' must be a list"),
            ({"name": "Post", "attributes": {}, "belongs_to": [{}]}, "need a related 'model'"),
            (
                {"name": "Post", "attributes": {}, "belongs_to": [{"model": "User", "index": "one"}]},
                "must be an integer",
            ),
            ({"name": "Post", "attributes": {}, "indexes": [{"type": "gsi"}]}, "need 'columns'"),
            (
                {"name": "Post", "attributes": {}, "indexes": [{"columns": ["a"], "type": "btree"}]},
                "unknown index type 'btree'",
            ),
            ({"name": "Post", "attributes": {}, "traits": {"colour": True}}, "invalid traits"),
            (
                {"name": "Post", "attributes": {"rank": {"validation": [{"min": 1}]}}},
                "needs a 'rule'",
            ),
        ],
    )
    def test_malformed_declarations(self, raw: dict, message: str) -> None:
        with pytest.raises(ModelDefinitionError, match=message):
            RegistryBuilder().build_entity(raw)

    def test_duplicate_models_rejected(self) -> None:
        with pytest.raises(DuplicateModelError):
            RegistryBuilder.from_dicts(
                [{"name": "User", "attributes": {}}, {"name": "User", "attributes": {}}]
            )


class TestYamlLoader:
    """Tests for loading model files from disk."""

    def test_from_directory(self) -> None:
        with TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            (base / "a_users.yml").write_text(
                yaml.dump({"models": [{"name": "User", "attributes": {"email": {"unique": True}}}]}),
                encoding="utf-8",
            )
            nested = base / "blog"
            nested.mkdir()
            (nested / "posts.yaml").write_text(
                yaml.dump({"models": [{"name": "Post", "attributes": {}, "belongs_to": ["User"]}]}),
                encoding="utf-8",
            )
            (base / "empty.yml").write_text("", encoding="utf-8")

            registry = RegistryBuilder.from_directory(base)

            assert sorted(registry.names) == ["Post", "User"]
            assert registry.get("Post").raw["_source_file"].endswith("posts.yaml")

    def test_single_file(self) -> None:
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "models.yml"
            path.write_text(
                yaml.dump({"models": [{"name": "User", "attributes": {}}]}), encoding="utf-8"
            )

            assert [m["name"] for m in YamlLoader(path).load_all()] == ["User"]

    def test_missing_path(self) -> None:
        with pytest.raises(FileNotFoundError, match="Model path not found"):
            YamlLoader("/nonexistent/models").load_all()

    def test_non_mapping_root(self) -> None:
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yml"
            path.write_text("- User\n- Post\n", encoding="utf-8")

            with pytest.raises(ModelFileError, match="expected dict at root"):
                YamlLoader(tmpdir).load_all()

    def test_models_must_be_list(self) -> None:
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yml"
            path.write_text("models:\n  name: User\n", encoding="utf-8")

            with pytest.raises(ModelFileError, match="'models' must be a list"):
                YamlLoader(tmpdir).load_all()

    def test_invalid_yaml(self) -> None:
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yml"
            path.write_text("models: [unclosed\n", encoding="utf-8")

            with pytest.raises(yaml.YAMLError):
                YamlLoader(tmpdir).load_all()
