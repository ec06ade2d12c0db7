"""Tests for the tp command-line interface."""

import json
from pathlib import Path

import yaml
from click.testing import CliRunner

from table_patterns.__main__ import cli
from table_patterns.cli.utils import build_file_tree

CONFLICT_MODELS = {
    "models": [
        {"name": "Order", "attributes": {"total": {"cast": "decimal"}}},
        {"name": "OrderLegacy", "entity_type": "ORDER", "attributes": {}},
    ]
}


def _write_conflicting_project() -> None:
    Path("tp.yml").write_text("input: ./models\n", encoding="utf-8")
    Path("models").mkdir()
    Path("models/orders.yml").write_text(yaml.dump(CONFLICT_MODELS), encoding="utf-8")


class TestInitCommand:
    """Tests for tp init."""

    def test_creates_config(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init"])

            assert result.exit_code == 0
            assert "Created tp.yml" in result.output
            config = yaml.safe_load(Path("tp.yml").read_text(encoding="utf-8"))
            assert config["input"] == "./models"
            assert config["table"]["gsi_count"] == 5
            assert not Path("models").exists()

    def test_refuses_to_overwrite(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("tp.yml").write_text("input: ./custom\n", encoding="utf-8")

            result = runner.invoke(cli, ["init"])

            assert result.exit_code == 1
            assert "already exists" in result.output
            assert Path("tp.yml").read_text(encoding="utf-8") == "input: ./custom\n"

    def test_example_models(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init", "--example"])

            assert result.exit_code == 0
            models = yaml.safe_load(Path("models/blog.yml").read_text(encoding="utf-8"))
            assert [m["name"] for m in models["models"]] == ["User", "Post"]


class TestBuildCommand:
    """Tests for tp build."""

    def test_build_writes_documentation(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--example"])

            result = runner.invoke(cli, ["build"])

            assert result.exit_code == 0, result.output
            assert "Generated 8 files" in result.output
            output = Path("schema/table-patterns")
            for name in ("README.md", "keys.md", "gsi.md", "lsi.md", "sparse.md"):
                assert (output / name).exists()
            table = json.loads((output / "table.json").read_text(encoding="utf-8"))
            assert table["TableName"] == "app"
            assert len(table["GlobalSecondaryIndexes"]) == 4

    def test_dry_run_writes_nothing(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--example"])

            result = runner.invoke(cli, ["build", "--dry-run"])

            assert result.exit_code == 0, result.output
            assert "Dry run mode" in result.output
            assert "Would generate 8 files" in result.output
            assert not Path("schema").exists()

    def test_output_options(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--example"])
            Path("tp.yml").write_text(
                "input: ./models\nproject: blog\noutput_options:\n  markdown: false\n",
                encoding="utf-8",
            )

            result = runner.invoke(cli, ["build"])

            assert result.exit_code == 0, result.output
            assert sorted(p.name for p in Path("schema/blog").iterdir()) == [
                "schema.json",
                "table.json",
            ]

    def test_conflicts_reported(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write_conflicting_project()

            result = runner.invoke(cli, ["build", "--dry-run"])

            assert result.exit_code == 0
            assert "PK pattern conflict" in result.output
            assert "Schema is not deployable" in result.output

    def test_strict_fails_on_conflicts(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write_conflicting_project()

            result = runner.invoke(cli, ["build", "--dry-run", "--strict"])

            assert result.exit_code == 1
            assert "key conflict(s) found" in result.output

    def test_missing_input_directory(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("tp.yml").write_text("input: ./nowhere\n", encoding="utf-8")

            result = runner.invoke(cli, ["build"])

            assert result.exit_code == 1
            assert "Model path not found" in result.output

    def test_empty_input_directory(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("tp.yml").write_text("input: ./models\n", encoding="utf-8")
            Path("models").mkdir()

            result = runner.invoke(cli, ["build"])

            assert result.exit_code == 1
            assert "No models found" in result.output

    def test_invalid_model(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("tp.yml").write_text("input: ./models\n", encoding="utf-8")
            Path("models").mkdir()
            Path("models/bad.yml").write_text(
                "models:\n  - name: Post\n    attributes: [title]\n", encoding="utf-8"
            )

            result = runner.invoke(cli, ["build"])

            assert result.exit_code == 1
            assert "Model error" in result.output

    def test_invalid_config(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("tp.yml").write_text("input: ./models\ntable:\n  gsi_count: 9\n", encoding="utf-8")

            result = runner.invoke(cli, ["build"])

            assert result.exit_code == 1
            assert "Config validation error" in result.output

    def test_no_config(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["build"])

            assert result.exit_code == 1
            assert "No tp.yml found" in result.output


class TestValidateCommand:
    """Tests for tp validate."""

    def test_valid_project(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--example"])

            result = runner.invoke(cli, ["validate"])

            assert result.exit_code == 0, result.output
            assert "Models valid:" in result.output
            assert "All checks passed" in result.output

    def test_conflicts_fail(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write_conflicting_project()

            result = runner.invoke(cli, ["validate"])

            assert result.exit_code == 1
            assert "key conflict(s) found" in result.output

    def test_missing_input(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init"])

            result = runner.invoke(cli, ["validate"])

            assert result.exit_code == 1
            assert "Input directory not found" in result.output


class TestInspectCommands:
    """Tests for tp keys and tp patterns."""

    def test_keys_json(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--example"])

            result = runner.invoke(cli, ["keys", "--json"])

            assert result.exit_code == 0, result.output
            data = json.loads(result.stdout)
            assert data["Post"]["pk"] == "POST#{id}"
            assert data["Post"]["gsi1pk"] == "USER#{userId}"
            assert data["User"]["gsi2pk"] == "EMAIL#{email}"

    def test_keys_single_model(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--example"])

            result = runner.invoke(cli, ["keys", "--model", "User", "--json"])

            assert list(json.loads(result.stdout)) == ["User"]

    def test_keys_table(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--example"])

            result = runner.invoke(cli, ["keys"])

            assert result.exit_code == 0, result.output
            assert "Key Patterns" in result.output
            assert "Secondary Indexes" in result.output

    def test_patterns_for_model(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--example"])

            result = runner.invoke(cli, ["patterns", "--model", "Post", "--json"])

            assert result.exit_code == 0, result.output
            names = [p["name"] for p in json.loads(result.stdout)]
            assert "Get Posts for User" in names
            assert "Get active Posts" in names

    def test_inefficient_patterns(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--example"])

            result = runner.invoke(cli, ["patterns", "--inefficient", "--json"])

            patterns = json.loads(result.stdout)
            assert {p["name"] for p in patterns} == {"List all Users", "List all Posts"}
            assert all(p["operation"] == "scan" for p in patterns)

    def test_unknown_model(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--example"])

            result = runner.invoke(cli, ["patterns", "--model", "Nope"])

            assert result.exit_code == 1
            assert "Model 'Nope' not found" in result.output


class TestCli:
    """Tests for the command group."""

    def test_help_lists_commands(self) -> None:
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("init", "build", "validate", "keys", "patterns"):
            assert command in result.output

    def test_command_help_headings(self) -> None:
        result = CliRunner().invoke(cli, ["build", "--help"])

        assert result.exit_code == 0
        assert "Examples:" in result.output
        assert "## Examples" not in result.output
        assert "--strict" in result.output

    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestFileTree:
    """Tests for the build file tree."""

    def test_groups_by_type(self) -> None:
        project = Path("out/blog")
        tree = build_file_tree(
            [project / "keys.md", project / "table.json", Path("elsewhere/x.md")],
            project,
        )

        assert str(tree.label) == "[bold]blog/[/bold]"
        assert [str(child.label) for child in tree.children] == [
            "[yellow]table.json[/yellow]",
            "[green]keys.md[/green]",
        ]
