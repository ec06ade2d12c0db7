"""Markdown documentation for a CompiledSchema."""

from __future__ import annotations

from pathlib import Path

from table_patterns.compiler import CompiledSchema
from table_patterns.config import MAX_LSI_COUNT
from table_patterns.domain import AccessPattern, AccessPatternCategory


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _bullets(items: list[str]) -> list[str]:
    return [f"- {item}" for item in items]


class MarkdownGenerator:
    """
    Render a CompiledSchema to markdown files.

    Produces:
    - README.md - overview, warnings and missing patterns
    - keys.md - key patterns per entity
    - gsi.md - GSI layout and optimization suggestions
    - lsi.md - LSI layout
    - sparse.md - sparse indexes
    - access-patterns.md - access pattern catalog
    """

    def generate(self, schema: CompiledSchema) -> dict[str, str]:
        """Returns dict of {filename: content}."""
        return {
            "README.md": self.render_overview(schema),
            "keys.md": self.render_keys(schema),
            "gsi.md": self.render_gsi(schema),
            "lsi.md": self.render_lsi(schema),
            "sparse.md": self.render_sparse(schema),
            "access-patterns.md": self.render_access_patterns(schema),
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

    def render_overview(self, schema: CompiledSchema) -> str:
        table = schema.table
        lines = [f"# {table.name} table design", ""]
        lines.append(f"- **Entities:** {len(schema.entities)}")
        lines.append(f"- **GSIs:** {len(schema.gsi_definitions)} of {table.gsi_count}")
        lines.append(f"- **LSIs:** {len(schema.lsi_definitions)} of {MAX_LSI_COUNT}")
        lines.append(f"- **Access patterns:** {len(schema.access_patterns)}")
        lines.append(f"- **Deployable:** {_yes_no(schema.is_deployable)}")
        lines.append("")

        lines.extend(["## Entities", ""])
        lines.append("| Entity | Type | Primary Key | Attributes | Relationships |")
        lines.append("|--------|------|-------------|------------|---------------|")
        for entity in schema.entities:
            relationships = ", ".join(r.source for r in entity.relationships) or "-"
            lines.append(
                f"| {entity.name} | {entity.entity_type} | {entity.primary_key} "
                f"| {len(entity.attributes)} | {relationships} |"
            )
        lines.append("")

        if schema.conflicts:
            lines.extend(["## Key Conflicts", ""])
            lines.extend(_bullets([str(c) for c in schema.conflicts]))
            lines.append("")

        if schema.missing_patterns:
            lines.extend(["## Missing Patterns", ""])
            lines.append("The following access patterns could not be efficiently supported:")
            lines.append("")
            lines.extend(_bullets([str(m) for m in schema.missing_patterns]))
            lines.append("")

        if schema.warnings:
            lines.extend(["## Warnings", ""])
            lines.extend(_bullets(schema.warnings))
            lines.append("")

        if schema.notes:
            lines.extend(["## Notes", ""])
            lines.extend(_bullets(schema.notes))
            lines.append("")

        return "\n".join(lines)

    def render_keys(self, schema: CompiledSchema) -> str:
        table = schema.table
        lines = ["# Key Patterns", ""]
        lines.append(f"Delimiter: `{table.key_delimiter}`")
        lines.append("")

        for template in schema.key_patterns:
            lines.extend([f"## {template.entity}", "", template.description, ""])
            lines.append("| Key | Template | Example |")
            lines.append("|-----|----------|---------|")
            examples = template.example.as_item_keys()
            for key, value in template.pattern.templates().items():
                name = key
                if key == "pk":
                    name = table.partition_key
                elif key == "sk":
                    name = table.sort_key
                elif key.startswith("gsi"):
                    number = int(key[3:-2])
                    names = table.gsi_key_names(number)
                    name = names.pk if key.endswith("pk") else names.sk
                lines.append(f"| {name} | `{value}` | `{examples[key]}` |")
            lines.append("")

        return "\n".join(lines)

    def render_gsi(self, schema: CompiledSchema) -> str:
        gsi = schema.gsi
        lines = ["# GSI Design", "", "## Overview", ""]
        lines.append(f"Total GSIs defined: {len(schema.gsi_definitions)}")
        lines.append(f"Max configured GSIs: {schema.table.gsi_count}")
        lines.append("")

        lines.extend(["## GSI Definitions", ""])
        lines.append("| GSI Name | PK Attribute | SK Attribute | Projection |")
        lines.append("|----------|--------------|--------------|------------|")
        for definition in schema.gsi_definitions:
            lines.append(
                f"| {definition.name} | {definition.partition_key} "
                f"| {definition.sort_key or 'N/A'} | {definition.projection.type.value} |"
            )
        lines.append("")

        lines.extend(["## Access Patterns by GSI", ""])
        for usage in gsi.usages:
            lines.extend([f"### {usage.name}", ""])
            lines.append(f"- **Overloaded:** {_yes_no(usage.overloaded)}")
            lines.append(f"- **Estimated Load:** {usage.estimated_load.value}")
            lines.append("")
            lines.append("| Entity | Source | PK Pattern | SK Pattern | Description |")
            lines.append("|--------|--------|------------|------------|-------------|")
            for pattern in usage.patterns:
                lines.append(
                    f"| {pattern.entity} | {pattern.source} | `{pattern.pk_pattern}` "
                    f"| `{pattern.sk_pattern}` | {pattern.description} |"
                )
            lines.append("")

        if gsi.optimizations:
            lines.extend(["## Optimization Suggestions", ""])
            for opt in gsi.optimizations:
                lines.extend([f"### {opt.kind.value.capitalize()}", ""])
                lines.append(f"- **Description:** {opt.description}")
                lines.append(f"- **Affected GSIs:** {', '.join(f'GSI{i}' for i in opt.affected)}")
                lines.append(f"- **Benefit:** {opt.benefit}")
                lines.append("")

        if gsi.warnings:
            lines.extend(["## Warnings", ""])
            lines.extend(_bullets(gsi.warnings))
            lines.append("")

        return "\n".join(lines)

    def render_lsi(self, schema: CompiledSchema) -> str:
        lsi = schema.lsi
        lines = ["# LSI Design", "", "## Overview", ""]
        lines.append(f"Total LSIs defined: {len(lsi.definitions)}")
        lines.append(f"Maximum LSIs per table: {MAX_LSI_COUNT}")
        lines.append("")

        if lsi.definitions:
            lines.extend(["## LSI Definitions", ""])
            lines.append("| LSI Name | Sort Key | Projection |")
            lines.append("|----------|----------|------------|")
            for definition in lsi.definitions:
                lines.append(
                    f"| {definition.name} | {definition.sort_key} "
                    f"| {definition.projection.type.value} |"
                )
            lines.append("")

            lines.extend(["## Usage Patterns", ""])
            for usage in lsi.usages:
                lines.extend([f"### {usage.name}", ""])
                lines.append(f"- **Entity:** {usage.entity}")
                lines.append(f"- **Sort Key:** {usage.sort_key}")
                lines.append(f"- **Description:** {usage.description}")
                lines.append("")

        if lsi.warnings or lsi.notes:
            lines.extend(["## Warnings", ""])
            lines.extend(_bullets(lsi.warnings + lsi.notes))
            lines.append("")

        return "\n".join(lines)

    def render_sparse(self, schema: CompiledSchema) -> str:
        sparse = schema.sparse
        lines = ["# Sparse Indexes", ""]
        lines.append(
            "Sparse indexes only contain items that define the index key attributes, "
            "so filtered reads become index queries."
        )
        lines.append("")

        if not sparse.usages:
            lines.append("No sparse indexes derived.")
            lines.append("")
        for usage in sparse.usages:
            lines.extend([f"## {usage.name}: {usage.entity}.{usage.attribute}", ""])
            lines.append(f"- **Type:** {usage.kind.value}")
            lines.append(f"- **PK Pattern:** `{usage.pk_pattern}`")
            lines.append(f"- **SK Pattern:** `{usage.sk_pattern}`")
            lines.append(f"- **Description:** {usage.description}")
            lines.append(f"- **Cost Savings:** {usage.cost_savings}")
            lines.append("")

        if sparse.warnings:
            lines.extend(["## Warnings", ""])
            lines.extend(_bullets(sparse.warnings))
            lines.append("")

        return "\n".join(lines)

    def render_access_patterns(self, schema: CompiledSchema) -> str:
        report = schema.access
        total = len(report.patterns)
        efficient = report.efficient_count
        percent = round(efficient / total * 100) if total else 0

        lines = ["# Access Patterns", "", "## Overview", ""]
        lines.append(f"- **Total Access Patterns:** {total}")
        lines.append(f"- **Efficient Patterns:** {efficient} ({percent}%)")
        lines.append(f"- **Inefficient Patterns:** {total - efficient} (require scan)")
        lines.append("")

        lines.extend(["## Access Pattern Matrix", ""])
        lines.append(
            "| Entity | Get by ID | List All | Query by Parent | Query Children | Unique Lookups |"
        )
        lines.append(
            "|--------|-----------|----------|-----------------|----------------|----------------|"
        )
        for m in report.matrix:
            lines.append(
                f"| {m.entity} | {_yes_no(m.get_by_id)} "
                f"| {'Yes (scan)' if m.list_all else 'No'} "
                f"| {', '.join(m.query_by_parent) or '-'} "
                f"| {', '.join(m.query_children) or '-'} "
                f"| {', '.join(m.unique_lookups) or '-'} |"
            )
        lines.append("")

        by_category: dict[AccessPatternCategory, list[AccessPattern]] = {}
        for pattern in report.patterns:
            by_category.setdefault(pattern.category, []).append(pattern)

        lines.extend(["## Patterns by Category", ""])
        for category, patterns in by_category.items():
            lines.extend([f"### {category.display_name}", ""])
            for pattern in patterns:
                lines.extend(self._render_pattern(pattern))

        if report.missing_patterns:
            lines.extend(["## Missing Patterns", ""])
            lines.append("The following access patterns could not be efficiently supported:")
            lines.append("")
            lines.extend(_bullets([str(m) for m in report.missing_patterns]))
            lines.append("")

        if report.suggestions:
            lines.extend(["## Optimization Suggestions", ""])
            lines.extend(_bullets(report.suggestions))
            lines.append("")

        return "\n".join(lines)

    def _render_pattern(self, pattern: AccessPattern) -> list[str]:
        lines = [f"#### {pattern.name}", ""]
        lines.append(f"- **Operation:** {pattern.operation.value}")
        lines.append(f"- **Index:** {pattern.index}")
        lines.append(f"- **Efficient:** {_yes_no(pattern.efficient)}")
        lines.append(f"- **Key Condition:** `{pattern.key_condition}`")
        lines.append(f"- **Example PK:** `{pattern.example_pk}`")
        if pattern.example_sk:
            lines.append(f"- **Example SK:** `{pattern.example_sk}`")
        lines.append("")
        if pattern.example_code:
            lines.extend(["**Example Code:**", "```python", pattern.example_code, "```", ""])
        if pattern.performance_notes:
            lines.append("**Performance Notes:**")
            lines.extend(_bullets(pattern.performance_notes))
            lines.append("")
        return lines
