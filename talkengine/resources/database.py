"""
Script Database.

Handles loading and validation of dialog script sources (JSON and text).
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

BUNDLED_SCHEMAS = Path(__file__).resolve().parent / "schemas"

# Text script extensions, in lookup order
SCRIPT_SUFFIXES = (".dlg", ".txt")


class ScriptDatabase:
    """
    Central storage for dialog script sources.

    JSON dialogs are validated against ``dialog.schema.json`` and stored as
    plain dicts; text scripts are stored verbatim. Both are keyed by file stem.
    """

    def __init__(self, data_path: Path | str):
        self._data_path = Path(data_path)
        self._schemas: dict[str, Any] = {}

        # Data stores
        self.dialogs: dict[str, dict[str, Any]] = {}
        self.scripts: dict[str, str] = {}

        self.logger = logging.getLogger(__name__)

    @property
    def data_path(self) -> Path:
        return self._data_path

    def load_all(self) -> None:
        """Load all data from disk."""
        self._load_schemas()

        self.dialogs = self._load_category("dialog", "dialog.schema.json")
        self.scripts = self._load_scripts("dialog")

        self.logger.info(
            f"Loaded {len(self.dialogs)} JSON dialogs, "
            f"{len(self.scripts)} text scripts."
        )

    def _load_schemas(self) -> None:
        """Load bundled JSON schemas, then any overrides under data_path/schemas."""
        self._schemas.clear()
        for schema_dir in (BUNDLED_SCHEMAS, self._data_path / "schemas"):
            if not schema_dir.exists():
                continue

            for schema_file in schema_dir.glob("*.schema.json"):
                try:
                    with open(schema_file, 'r', encoding='utf-8') as f:
                        self._schemas[schema_file.name] = json.load(f)
                except (OSError, json.JSONDecodeError) as e:
                    self.logger.error(f"Failed to load schema {schema_file}: {e}")

    def _load_category(self, folder: str, schema_name: str) -> dict[str, dict[str, Any]]:
        """Load and validate all JSON files in a category folder."""
        category_dir = self._data_path / "database" / folder
        data_store: dict[str, dict[str, Any]] = {}

        if not category_dir.exists():
            self.logger.warning(f"Data directory not found: {category_dir}")
            return data_store

        schema = self._schemas.get(schema_name)
        if schema is None:
            self.logger.warning(f"No schema found for {folder} ({schema_name})")
            return data_store

        for file_path in sorted(category_dir.glob("*.json")):
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                jsonschema.validate(instance=data, schema=schema)
            except jsonschema.ValidationError as e:
                self.logger.error(f"Validation error in {file_path}: {e.message}")
                continue
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load {file_path}: {e}")
                continue

            data_store[file_path.stem] = data

        return data_store

    def _load_scripts(self, folder: str) -> dict[str, str]:
        """Load all text scripts in a category folder."""
        category_dir = self._data_path / "database" / folder
        scripts: dict[str, str] = {}

        if not category_dir.exists():
            return scripts

        for suffix in SCRIPT_SUFFIXES:
            for file_path in sorted(category_dir.glob(f"*{suffix}")):
                if file_path.stem in scripts:
                    continue
                try:
                    scripts[file_path.stem] = file_path.read_text(encoding='utf-8')
                except OSError as e:
                    self.logger.error(f"Failed to load {file_path}: {e}")

        return scripts

    def validate_dialog(self, data: Any) -> bool:
        """Check an in-memory dialog dict against the dialog schema."""
        if not self._schemas:
            self._load_schemas()

        schema = self._schemas.get("dialog.schema.json")
        if schema is None:
            return False

        try:
            jsonschema.validate(instance=data, schema=schema)
        except jsonschema.ValidationError as e:
            self.logger.warning(f"Dialog failed validation: {e.message}")
            return False
        return True

    def get_dialog(self, dialog_id: str) -> dict[str, Any] | None:
        return self.dialogs.get(dialog_id)

    def get_script(self, script_id: str) -> str | None:
        return self.scripts.get(script_id)
