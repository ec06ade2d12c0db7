"""Tests for configuration loading and validation in config.py."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
import yaml
from pydantic import ValidationError

from table_patterns.config import (
    TableConfig,
    TPConfig,
    find_config,
    load_config,
)
from table_patterns.exceptions import ConfigError


class TestTPConfigFromYaml:
    """Tests for TPConfig.from_yaml parsing."""

    def test_minimal_valid_config(self) -> None:
        config = TPConfig.from_yaml("input: ./models\n")

        assert config.input == "./models"
        assert config.output == "./schema"
        assert config.project == "table-patterns"
        assert config.table == TableConfig()
        assert config.output_options.markdown is True
        assert config.output_options.json_ is True

    def test_full_config(self) -> None:
        content = """\
project: blog
input: ./models
output: ./docs

table:
  name: blog-table
  partition_key: PK
  sort_key: SK
  key_delimiter: "|"
  gsi_count: 3
  soft_delete_attribute: removedAt
  ttl_attribute: expiresAt
  index_overloading: true
  index_keys:
    - {pk: GSI1PK, sk: GSI1SK}
    - {pk: GSI2PK, sk: GSI2SK}

output_options:
  markdown: false
  json: true
"""
        config = TPConfig.from_yaml(content)

        assert config.project == "blog"
        assert config.table.name == "blog-table"
        assert config.table.key_delimiter == "|"
        assert config.table.gsi_count == 3
        assert config.table.soft_delete_attribute == "removedAt"
        assert config.table.ttl_attribute == "expiresAt"
        assert config.table.index_overloading is True
        assert config.table.gsi_key_names(2).pk == "GSI2PK"
        assert config.output_options.markdown is False
        assert config.project_path == Path("./docs") / "blog"

    def test_project_none_uses_default(self) -> None:
        config = TPConfig.from_yaml("input: ./models\nproject:\n")
        assert config.project == "table-patterns"

    def test_missing_input_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TPConfig.from_yaml("output: ./schema\n")

    def test_non_mapping_root_rejected(self) -> None:
        with pytest.raises(ConfigError):
            TPConfig.from_yaml("- input\n- output\n")

    def test_empty_document_rejected(self) -> None:
        with pytest.raises(ConfigError):
            TPConfig.from_yaml("")

    def test_invalid_yaml(self) -> None:
        with pytest.raises(yaml.YAMLError):
            TPConfig.from_yaml('input: "unclosed\n')


class TestTableConfig:
    """Tests for TableConfig validators."""

    def test_defaults(self) -> None:
        table = TableConfig()
        assert table.partition_key == "pk"
        assert table.sort_key == "sk"
        assert table.key_delimiter == "#"
        assert table.gsi_count == 5
        assert len(table.index_keys) == 5
        assert table.gsi_key_names(1).pk == "gsi1pk"
        assert table.gsi_key_names(5).sk == "gsi5sk"

    @pytest.mark.parametrize("count", [-1, 6])
    def test_gsi_count_bounds(self, count: int) -> None:
        with pytest.raises(ValidationError):
            TableConfig(gsi_count=count)

    def test_zero_gsi_budget_allowed(self) -> None:
        assert TableConfig(gsi_count=0).gsi_count == 0

    @pytest.mark.parametrize("delimiter", ["", "{", "#}"])
    def test_invalid_delimiter(self, delimiter: str) -> None:
        with pytest.raises(ValidationError):
            TableConfig(key_delimiter=delimiter)

    def test_duplicate_key_names_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate key attribute names"):
            TableConfig(partition_key="gsi1pk")

    def test_too_many_index_keys_rejected(self) -> None:
        keys = [{"pk": f"p{i}", "sk": f"s{i}"} for i in range(6)]
        with pytest.raises(ValidationError):
            TableConfig(index_keys=keys)

    def test_frozen(self) -> None:
        table = TableConfig()
        with pytest.raises(ValidationError):
            table.gsi_count = 2  # type: ignore[misc]


class TestConfigDiscovery:
    """Tests for find_config and load_config."""

    def test_find_config_in_directory(self) -> None:
        with TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "tp.yml"
            config_path.write_text("input: ./models\n", encoding="utf-8")

            assert find_config(tmpdir) == config_path.resolve()

    def test_find_config_in_parent(self) -> None:
        with TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / ".tp.yaml"
            config_path.write_text("input: ./models\n", encoding="utf-8")
            nested = Path(tmpdir) / "a" / "b"
            nested.mkdir(parents=True)

            assert find_config(nested) == config_path.resolve()

    def test_load_config_explicit_path(self) -> None:
        with TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "custom.yml"
            config_path.write_text("input: ./models\nproject: blog\n", encoding="utf-8")

            config = load_config(config_path)
            assert config.project == "blog"

    def test_load_config_not_found(self, monkeypatch: pytest.MonkeyPatch) -> None:
        with TemporaryDirectory() as tmpdir:
            monkeypatch.chdir(tmpdir)
            monkeypatch.setattr("table_patterns.config.find_config", lambda: None)

            with pytest.raises(FileNotFoundError, match="No tp.yml found"):
                load_config()
