"""
Variable storage for dialog scripts.

A single ordered key -> string mapping shared by every dialog session in the
host process. Numeric meaning is applied only when an expression reads a
value, so everything is stored as text.

Usage:
    variables = VariableStore({"gold": "10"})
    variables.set("met_guard", "true")
    blob = variables.export_json()
    VariableStore().import_json(blob)
"""

from __future__ import annotations

import logging
from typing import Iterator, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from dialogkit.models import VarData

logger = logging.getLogger(__name__)


class VariableSnapshot(BaseModel):
    """Serialized form of a VariableStore: ``{"vars": [{key, value}, ...]}``."""
    vars: list[VarData] = Field(default_factory=list)


class VariableStore:
    """
    Ordered string-valued variables.

    Insertion order is preserved so exports are stable between runs.
    Replacing a value keeps the key in its original position.
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._values: dict[str, str] = {}
        if initial:
            for key, value in initial.items():
                self.set(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"VariableStore({self._values!r})"

    def contains(self, key: str) -> bool:
        return key in self._values

    def add(self, key: str, value: str) -> bool:
        """
        Add a new variable.

        Returns:
            False (and leaves the store unchanged) if the key already exists
        """
        if key in self._values:
            return False
        self._values[key] = str(value)
        return True

    def get(self, key: str) -> Optional[str]:
        """Get a value, or None if the key is missing."""
        return self._values.get(key)

    def try_get(self, key: str) -> tuple[bool, str]:
        """Get a value as ``(found, value)``."""
        if key in self._values:
            return True, self._values[key]
        return False, ""

    def set(self, key: str, value: str) -> None:
        """Create or replace a variable."""
        self._values[key] = str(value)

    def remove(self, key: str) -> bool:
        """Remove a variable. Returns False if it did not exist."""
        if key not in self._values:
            return False
        del self._values[key]
        return True

    def clear(self) -> None:
        self._values.clear()

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)

    def increment_count(self, key: str) -> None:
        """
        Bump a visit counter.

        A missing key starts at "1". An existing non-integer value is left
        untouched.
        """
        value = self._values.get(key)
        if value is None:
            self._values[key] = "1"
            return

        try:
            count = int(value.strip())
        except ValueError:
            logger.debug(f"Counter '{key}' holds non-integer value '{value}'")
            return
        self._values[key] = str(count + 1)

    def get_count(self, key: str) -> int:
        """Read a visit counter. Missing or non-integer values count as 0."""
        value = self._values.get(key)
        if value is None:
            return 0
        try:
            return int(value.strip())
        except ValueError:
            return 0

    # Import / export

    def export_json(self, indent: Optional[int] = None) -> str:
        """Serialize as ``{"vars": [{"key": ..., "value": ...}, ...]}``."""
        snapshot = VariableSnapshot(
            vars=[VarData(key=k, value=v) for k, v in self._values.items()]
        )
        return snapshot.model_dump_json(indent=indent)

    def import_json(self, text: str) -> bool:
        """
        Merge variables from a JSON export.

        Existing keys are overwritten. On malformed input nothing changes.

        Returns:
            True if the blob was imported
        """
        try:
            snapshot = VariableSnapshot.model_validate_json(text)
        except ValidationError as e:
            logger.warning(f"Variable import failed: {e.error_count()} error(s)")
            return False

        for var in snapshot.vars:
            if var.key:
                self._values[var.key] = var.value
        return True

    def export_text(self, entry_delimiter: str = ",", pair_delimiter: str = "=") -> str:
        """Serialize as ``key=value,key2=value2``."""
        return entry_delimiter.join(
            f"{key}{pair_delimiter}{value}" for key, value in self._values.items()
        )

    def import_text(
        self,
        text: str,
        entry_delimiter: str = ",",
        pair_delimiter: str = "=",
    ) -> bool:
        """
        Merge variables from delimited text.

        Every entry must contain exactly one pair delimiter and a non-empty
        key. If any entry is malformed the store is left unchanged.

        Returns:
            True if the text was imported
        """
        if not entry_delimiter or not pair_delimiter:
            logger.warning("Variable import needs non-empty delimiters")
            return False

        parsed: list[tuple[str, str]] = []
        if text.strip():
            for entry in text.split(entry_delimiter):
                parts = entry.split(pair_delimiter)
                if len(parts) != 2 or not parts[0].strip():
                    logger.warning(f"Malformed variable entry: '{entry}'")
                    return False
                parsed.append((parts[0].strip(), parts[1].strip()))

        for key, value in parsed:
            self._values[key] = value
        return True

    @classmethod
    def from_json_file(cls, path) -> VariableStore:
        """Load a store from a JSON export on disk."""
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
        store = cls()
        if not store.import_json(text):
            logger.warning(f"Ignoring malformed variable file {path}")
        return store
