"""Tests for key templates, resolution and key validation."""

import pytest

from table_patterns.compiler import KeyPatternGenerator, resolve_template
from table_patterns.compiler.keys import placeholders
from table_patterns.config import TableConfig
from table_patterns.domain import (
    AttributeDescriptor,
    EntityDescriptor,
    IndexKeyTemplate,
    KeyPattern,
    RelationshipDescriptor,
    RelationshipKind,
)


def _entity(name: str, entity_type: str | None = None, **kwargs) -> EntityDescriptor:
    return EntityDescriptor(name=name, entity_type=entity_type or name.upper(), **kwargs)


def _rel(kind: RelationshipKind, related: str, foreign_key: str) -> RelationshipDescriptor:
    return RelationshipDescriptor(
        kind=kind,
        related_model=related,
        foreign_key=foreign_key,
        local_key="id",
        requires_index=kind.requires_index,
    )


class TestTemplates:
    """Tests for template shapes."""

    def test_base_pattern(self) -> None:
        pattern = KeyPatternGenerator().base_pattern(_entity("Post"))

        assert pattern.pk == "POST#{id}"
        assert pattern.sk == "POST#{id}"
        assert pattern.partition_prefix == "POST#"

    def test_custom_delimiter_and_primary_key(self) -> None:
        keys = KeyPatternGenerator(TableConfig(key_delimiter="|"))
        pattern = keys.base_pattern(_entity("Order", primary_key="orderId"))

        assert pattern.pk == "ORDER|{orderId}"

    def test_belongs_to_shape(self) -> None:
        keys = KeyPatternGenerator()
        rel = _rel(RelationshipKind.BELONGS_TO, "User", "userId")

        template = keys.relationship_shape(_entity("Post"), rel, _entity("User"))

        assert template == IndexKeyTemplate(pk="USER#{userId}", sk="POST#{id}")

    def test_belongs_to_many_shape(self) -> None:
        keys = KeyPatternGenerator()
        rel = _rel(RelationshipKind.BELONGS_TO_MANY, "Tag", "tagId")

        template = keys.relationship_shape(_entity("Post"), rel, _entity("Tag"))

        assert template == IndexKeyTemplate(pk="TAG#{tagId}", sk="POST#{id}")

    def test_has_one_shape(self) -> None:
        keys = KeyPatternGenerator()
        rel = _rel(RelationshipKind.HAS_ONE, "UserProfile", "userId")

        template = keys.relationship_shape(_entity("User"), rel, _entity("UserProfile"))

        assert template == IndexKeyTemplate(pk="USER#{id}", sk="USERPROFILE#{userProfileId}")

    def test_has_many_needs_no_index(self) -> None:
        keys = KeyPatternGenerator()
        rel = _rel(RelationshipKind.HAS_MANY, "Post", "userId")

        assert keys.relationship_shape(_entity("User"), rel, _entity("Post")) is None

    def test_unique_shape(self) -> None:
        keys = KeyPatternGenerator()
        template = keys.unique_shape(_entity("User"), AttributeDescriptor(name="email"))

        assert template == IndexKeyTemplate(pk="EMAIL#{email}", sk="USER#{id}")

    def test_sparse_shapes(self) -> None:
        keys = KeyPatternGenerator()
        post = _entity("Post")

        assert keys.sparse_shape(post, "status") == IndexKeyTemplate(
            pk="POST#STATUS", sk="{status}#{id}"
        )
        assert keys.sparse_shape(post, "deletedAt", soft_delete=True) == IndexKeyTemplate(
            pk="POST#ACTIVE", sk="POST#{id}"
        )

    def test_hierarchical_and_collection_keys(self) -> None:
        keys = KeyPatternGenerator()

        child = keys.hierarchical_key("USER", "123", "POST", "789")
        collection = keys.collection_key("USER", "123", "POST")

        assert (child.pk, child.sk) == ("USER#123", "POST#789")
        assert (collection.pk, collection.sk) == ("USER#123", "POST#")
        assert child.sk.startswith(collection.sk)


class TestResolution:
    """Tests for placeholder substitution."""

    def test_placeholders(self) -> None:
        assert placeholders("{status}#{id}") == ["status", "id"]
        assert placeholders("POST#ACTIVE") == []

    def test_full_substitution_leaves_no_braces(self) -> None:
        keys = KeyPatternGenerator()
        pattern = KeyPattern(
            pk="POST#{id}",
            sk="POST#{id}",
            indexes={1: IndexKeyTemplate(pk="USER#{userId}", sk="POST#{id}")},
        )

        resolved = keys.resolve(pattern, {"id": "123", "userId": "456"})

        assert resolved.as_item_keys() == {
            "pk": "POST#123",
            "sk": "POST#123",
            "gsi1pk": "USER#456",
            "gsi1sk": "POST#123",
        }
        assert not any("{" in v or "}" in v for v in resolved.as_item_keys().values())

    def test_missing_value_falls_back_to_name(self) -> None:
        assert resolve_template("USER#{userId}", {}) == "USER#userId"

    def test_resolution_is_idempotent(self) -> None:
        keys = KeyPatternGenerator()
        pattern = keys.base_pattern(_entity("Post"))
        values = {"id": "123"}
        assert keys.resolve(pattern, values) == keys.resolve(pattern, values)

        once = resolve_template("USER#{userId}", {"userId": "456"})
        assert resolve_template(once, {"userId": "999"}) == once

    def test_example_uses_documentation_values(self) -> None:
        keys = KeyPatternGenerator()
        post = _entity(
            "Post", relationships=[_rel(RelationshipKind.BELONGS_TO, "User", "userId")]
        )
        post.key_pattern = KeyPattern(
            pk="POST#{id}",
            sk="POST#{id}",
            indexes={
                1: IndexKeyTemplate(pk="USER#{userId}", sk="POST#{id}"),
                2: IndexKeyTemplate(pk="POST#STATUS", sk="{status}#{id}"),
            },
        )

        template = keys.generate(post)

        assert template.name == "Post key pattern"
        assert template.example.pk == "POST#123"
        assert template.example.indexes[1].pk == "USER#456"
        assert template.example.indexes[2].sk == "<status>#123"
        assert "2 secondary index template(s)" in template.description

    def test_generate_without_assigned_pattern(self) -> None:
        template = KeyPatternGenerator().generate(_entity("Tag"))

        assert template.pattern.pk == "TAG#{id}"
        assert template.example.sk == "TAG#123"


class TestValidation:
    """Tests for KeyPatternGenerator.validate."""

    def test_distinct_prefixes_are_valid(self) -> None:
        result = KeyPatternGenerator().validate([_entity("User"), _entity("Post")])

        assert result.valid
        assert result.conflicts == []

    def test_shared_prefix_is_one_conflict(self) -> None:
        result = KeyPatternGenerator().validate(
            [_entity("Order"), _entity("OrderLegacy", "ORDER"), _entity("User")]
        )

        assert not result.valid
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.entities == ["Order", "OrderLegacy"]
        assert str(conflict) == (
            'PK pattern conflict: Order and OrderLegacy both use prefix "ORDER#"'
        )

    def test_three_way_conflict_reported_once(self) -> None:
        result = KeyPatternGenerator().validate(
            [_entity("A", "X"), _entity("B", "X"), _entity("C", "X")]
        )

        assert len(result.conflicts) == 1
        assert str(result.conflicts[0]) == 'PK pattern conflict: A, B and C all use prefix "X#"'

    @pytest.mark.parametrize(("count", "warned"), [(5, False), (6, True)])
    def test_overload_threshold(self, count: int, warned: bool) -> None:
        entities = []
        for i in range(count):
            rel = _rel(RelationshipKind.BELONGS_TO, "User", "userId")
            rel.index = 1
            entities.append(_entity(f"Child{i}", relationships=[rel]))

        result = KeyPatternGenerator().validate(entities)

        assert result.valid
        assert bool(result.warnings) is warned
        if warned:
            assert result.warnings[0].startswith("GSI1 is overloaded with 6 relationship patterns")
