"""Adapters: Render a CompiledSchema to documentation formats (markdown, JSON)."""

from table_patterns.adapters.jsondoc import JsonGenerator, schema_document, table_definition
from table_patterns.adapters.markdown import MarkdownGenerator

__all__ = [
    "JsonGenerator",
    "MarkdownGenerator",
    "schema_document",
    "table_definition",
]
