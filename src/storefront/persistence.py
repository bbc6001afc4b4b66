"""Persisted record storage for the stores."""

from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from . import config
from .errors import InvalidSchemaVersionError, PersistenceError

SCHEMA_VERSION = 1


class StateRepository(Protocol):
    """Load and save the serialized state of one named record.

    Stores call ``load()`` once when they are built and ``save()`` after
    every mutation. ``load()`` returns None when nothing has been stored yet.
    """

    name: str

    def load(self) -> dict[str, Any] | None:
        ...

    def save(self, state: dict[str, Any]) -> None:
        ...


class JsonFileRepository:
    """Keeps one named record as a JSON document in a directory."""

    def __init__(self, name: str, data_dir: Path | None = None):
        """
        Initialize JsonFileRepository.

        Args:
            name: Record name, e.g. "cart-storage". Used as the file stem.
            data_dir: Override base data directory (for testing).
        """
        self.name = name
        self.data_dir = Path(data_dir) if data_dir is not None else config.DATA_DIR
        self.path = self.data_dir / f"{name}.json"

    def exists(self) -> bool:
        """Check if the record has been written."""
        return self.path.exists()

    def load(self) -> dict[str, Any] | None:
        """
        Load the record from disk.

        Raises:
            InvalidSchemaVersionError: If schema version is unsupported.
            PersistenceError: If the file can't be read or parsed.
        """
        if not self.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(str(self.path), str(e)) from e

        if not isinstance(data, dict):
            raise PersistenceError(str(self.path), "record is not a JSON object")

        version = data.get("schema_version", 0)
        if version != SCHEMA_VERSION:
            raise InvalidSchemaVersionError(version, SCHEMA_VERSION)

        return data.get("state", {})

    def save(self, state: dict[str, Any]) -> None:
        """
        Save the record to disk atomically.

        Uses write-to-temp-then-rename for atomicity.

        Raises:
            PersistenceError: If the directory or file can't be written.
        """
        data = {"schema_version": SCHEMA_VERSION, "name": self.name, "state": state}
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self.data_dir, prefix=f".{self.name}_", suffix=".tmp"
            )
        except OSError as e:
            raise PersistenceError(str(self.path), str(e)) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(temp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            # Clean up temp file on failure (ignore errors if already removed)
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise PersistenceError(str(self.path), str(e)) from e


class MemoryRepository:
    """Keeps one named record in memory. Used in tests and embedded setups."""

    def __init__(self, name: str, state: dict[str, Any] | None = None):
        self.name = name
        self._state = copy.deepcopy(state)
        self.save_count = 0

    def load(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._state)

    def save(self, state: dict[str, Any]) -> None:
        self._state = copy.deepcopy(state)
        self.save_count += 1
