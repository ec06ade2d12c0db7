"""Configuration schema for table-patterns.

Defines the tp.yml configuration file format using Pydantic models.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from typing_extensions import Self

from table_patterns.exceptions import ConfigError

# DynamoDB hard limit on local secondary indexes per table
MAX_LSI_COUNT = 5

# Upper bound for the GSI slots the compiler allocates (GSI1..GSI5)
MAX_GSI_SLOTS = 5


class IndexKeyNames(BaseModel):
    """Attribute names holding one GSI's partition and sort key."""

    pk: str
    sk: str

    model_config = {"frozen": True}


def _default_index_key_names() -> list[IndexKeyNames]:
    return [
        IndexKeyNames(pk=f"gsi{i}pk", sk=f"gsi{i}sk")
        for i in range(1, MAX_GSI_SLOTS + 1)
    ]


class TableConfig(BaseModel):
    """Table-wide single-table design settings."""

    name: str = "app"  # Physical table name
    partition_key: str = "pk"
    sort_key: str = "sk"
    key_delimiter: str = "#"
    entity_type_attribute: str = "_et"  # Attribute storing the entity type name

    # Key attribute names for GSI1..GSI5
    index_keys: list[IndexKeyNames] = Field(default_factory=_default_index_key_names)
    gsi_count: int = Field(MAX_GSI_SLOTS, ge=0, le=MAX_GSI_SLOTS)

    soft_delete_attribute: str = "deletedAt"
    ttl_attribute: str = "ttl"

    # Share relationship GSIs between entities with distinct partition prefixes
    index_overloading: bool = False
    max_patterns_per_index: int = Field(5, ge=1)

    model_config = {"frozen": True}

    @field_validator("key_delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """Delimiter must be non-empty and must not collide with placeholders."""
        if not v:
            raise ValueError("key_delimiter cannot be empty")
        if "{" in v or "}" in v:
            raise ValueError(f"key_delimiter '{v}' cannot contain braces")
        return v

    @field_validator("index_keys")
    @classmethod
    def validate_index_keys(cls, v: list[IndexKeyNames]) -> list[IndexKeyNames]:
        if len(v) > MAX_GSI_SLOTS:
            raise ValueError(
                f"index_keys defines {len(v)} GSIs; at most {MAX_GSI_SLOTS} are supported"
            )
        return v

    @model_validator(mode="after")
    def validate_key_names_distinct(self) -> Self:
        """Every key attribute name must be distinct."""
        names = [self.partition_key, self.sort_key]
        for keys in self.index_keys:
            names.extend([keys.pk, keys.sk])
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate key attribute names: {duplicates}")
        return self

    def gsi_key_names(self, number: int) -> IndexKeyNames:
        """Key attribute names for GSI ``number`` (1-based)."""
        if 1 <= number <= len(self.index_keys):
            return self.index_keys[number - 1]
        return IndexKeyNames(pk=f"gsi{number}pk", sk=f"gsi{number}sk")


class OutputOptionsConfig(BaseModel):
    """Which documentation artifacts a build writes."""

    markdown: bool = True  # Write README.md and the five design documents
    json_: bool = Field(True, alias="json")  # Write schema.json and table.json

    model_config = {"frozen": True, "populate_by_name": True}


class TPConfig(BaseModel):
    """
    Root configuration for table-patterns.

    This is the schema for tp.yml files.

    Example:
        project: blog  # Names output folder (default: table-patterns)
        input: ./models
        output: ./schema

        table:
          name: blog
          key_delimiter: "#"
          gsi_count: 5
          soft_delete_attribute: deletedAt
          ttl_attribute: ttl

        output_options:
          markdown: true
          json: true
    """

    input: str
    output: str = "./schema"
    project: str = "table-patterns"

    table: TableConfig = Field(default_factory=TableConfig)
    output_options: OutputOptionsConfig = Field(default_factory=OutputOptionsConfig)

    model_config = {"frozen": True}

    DEFAULT_PROJECT: ClassVar[str] = "table-patterns"

    @field_validator("project", mode="before")
    @classmethod
    def validate_project(cls, v: Any) -> str:
        if v is None:
            return cls.DEFAULT_PROJECT
        if not isinstance(v, str) or not v.strip():
            raise ValueError("project must be a non-empty string")
        return v.strip()

    @property
    def input_path(self) -> Path:
        """Get input as Path."""
        return Path(self.input)

    @property
    def output_path(self) -> Path:
        """Get output as Path."""
        return Path(self.output)

    @property
    def project_path(self) -> Path:
        """Folder the build writes documentation into."""
        return self.output_path / self.project

    @classmethod
    def from_yaml(cls, content: str) -> TPConfig:
        """Parse config from YAML string."""
        data = yaml.safe_load(content)
        if not isinstance(data, dict):
            raise ConfigError(
                f"config root must be a mapping, got {type(data).__name__}"
            )
        return cls.model_validate(data)

    @classmethod
    def from_file(cls, path: Path | str) -> TPConfig:
        """Load config from a YAML file."""
        path = Path(path)
        content = path.read_text(encoding="utf-8")
        return cls.from_yaml(content)


# Config file discovery
CONFIG_FILENAMES = ["tp.yml", "tp.yaml", ".tp.yml", ".tp.yaml"]


def find_config(start_dir: Path | str | None = None) -> Path | None:
    """
    Find tp.yml config file.

    Searches in:
    1. start_dir (if provided)
    2. Current working directory
    3. Parent directories up to root

    Args:
        start_dir: Directory to start search from

    Returns:
        Path to config file, or None if not found
    """
    if start_dir is None:
        start_dir = Path.cwd()
    else:
        start_dir = Path(start_dir)

    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | str | None = None) -> TPConfig:
    """
    Load configuration from file.

    If path is not provided, searches for tp.yml in current
    and parent directories.

    Args:
        path: Explicit path to config file

    Returns:
        Parsed TPConfig

    Raises:
        FileNotFoundError: If no config file found
        ConfigError: If the config root is not a mapping
        ValidationError: If config fields are invalid
    """
    if path is None:
        path = find_config()
        if path is None:
            raise FileNotFoundError(
                "No tp.yml found. Create one or specify path with --config"
            )
    else:
        path = Path(path)

    return TPConfig.from_file(path)
