"""YamlLoader - loads model declaration YAML files from a directory."""

from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from table_patterns.exceptions import ModelFileError


class YamlLoader:
    """
    Load model declaration files.

    Handles:
    - Finding all YAML files recursively (or a single file)
    - Collecting ``models:`` entries in deterministic file order
    - Tagging each raw declaration with its source file
    """

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path)

    def load_all(self) -> list[dict[str, Any]]:
        """
        Load every model declaration.

        Returns:
            Raw model dicts in file order, then declaration order within a file.
        """
        models: list[dict[str, Any]] = []

        for file_path in self._find_yaml_files():
            doc = self._load_file(file_path)
            entries = doc.get("models", [])
            if not isinstance(entries, list):
                raise ModelFileError(str(file_path), "'models' must be a list")

            for entry in entries:
                if not isinstance(entry, dict):
                    raise ModelFileError(
                        str(file_path), f"model entries must be mappings, got {type(entry).__name__}"
                    )
                entry["_source_file"] = str(file_path)
                models.append(entry)

        logger.debug(f"Loaded {len(models)} model declarations from {self.base_path}")
        return models

    def _find_yaml_files(self) -> list[Path]:
        """Find all .yml and .yaml files recursively."""
        if self.base_path.is_file():
            return [self.base_path]
        if not self.base_path.exists():
            raise FileNotFoundError(f"Model path not found: {self.base_path}")

        files: list[Path] = []
        for pattern in ["**/*.yml", "**/*.yaml"]:
            files.extend(self.base_path.glob(pattern))
        # Sort for deterministic ordering
        return sorted(set(files))

    def _load_file(self, file_path: Path) -> dict[str, Any]:
        """Load and parse a single YAML file."""
        with open(file_path, encoding="utf-8") as f:
            content = yaml.safe_load(f)

        if content is None:
            return {}

        if not isinstance(content, dict):
            raise ModelFileError(
                str(file_path), f"expected dict at root, got {type(content).__name__}"
            )

        return content
