"""JSON output for a CompiledSchema.

``schema.json`` is the full compiler output; ``table.json`` is a
CreateTable-shaped definition for provisioning tools.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from table_patterns.compiler import CompiledSchema
from table_patterns.domain import IndexDefinition, ProjectionType


def _projection(definition: IndexDefinition) -> dict[str, Any]:
    projection: dict[str, Any] = {"ProjectionType": definition.projection.type.value}
    if definition.projection.type == ProjectionType.INCLUDE:
        projection["NonKeyAttributes"] = list(definition.projection.attributes)
    return projection


def schema_document(schema: CompiledSchema) -> dict[str, Any]:
    """Full compiler output as JSON-compatible data."""
    data = schema.model_dump(mode="json", exclude={"entities": {"__all__": {"raw"}}})
    data["is_deployable"] = schema.is_deployable
    data["gsi_definitions"] = [d.model_dump(mode="json") for d in schema.gsi_definitions]
    return data


def table_definition(schema: CompiledSchema) -> dict[str, Any]:
    """Table definition in DynamoDB CreateTable request shape (string keys)."""
    table = schema.table
    attribute_names = [table.partition_key, table.sort_key]

    gsis = []
    for definition in schema.gsi_definitions:
        assert definition.partition_key is not None
        key_schema = [{"AttributeName": definition.partition_key, "KeyType": "HASH"}]
        attribute_names.append(definition.partition_key)
        if definition.sort_key:
            key_schema.append({"AttributeName": definition.sort_key, "KeyType": "RANGE"})
            attribute_names.append(definition.sort_key)
        gsis.append(
            {
                "IndexName": definition.name,
                "KeySchema": key_schema,
                "Projection": _projection(definition),
            }
        )

    lsis = []
    for definition in schema.lsi_definitions:
        assert definition.sort_key is not None
        attribute_names.append(definition.sort_key)
        lsis.append(
            {
                "IndexName": definition.name,
                "KeySchema": [
                    {"AttributeName": table.partition_key, "KeyType": "HASH"},
                    {"AttributeName": definition.sort_key, "KeyType": "RANGE"},
                ],
                "Projection": _projection(definition),
            }
        )

    result: dict[str, Any] = {
        "TableName": table.name,
        "BillingMode": "PAY_PER_REQUEST",
        "KeySchema": [
            {"AttributeName": table.partition_key, "KeyType": "HASH"},
            {"AttributeName": table.sort_key, "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": name, "AttributeType": "S"}
            for name in dict.fromkeys(attribute_names)
        ],
    }
    if gsis:
        result["GlobalSecondaryIndexes"] = gsis
    if lsis:
        result["LocalSecondaryIndexes"] = lsis
    return result


class JsonGenerator:
    """Render a CompiledSchema to schema.json and table.json."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def generate(self, schema: CompiledSchema) -> dict[str, str]:
        return {
            "schema.json": json.dumps(schema_document(schema), indent=self.indent),
            "table.json": json.dumps(table_definition(schema), indent=self.indent),
        }

    def generate_and_write(self, schema: CompiledSchema, output_dir: str | Path) -> list[Path]:
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        written: list[Path] = []
        for filename, content in self.generate(schema).items():
            file_path = output_path / filename
            file_path.write_text(content, encoding="utf-8")
            written.append(file_path)
        return written
