"""
Content Database.

Handles loading and validation of authored narrative content
(dialogue trees, journal pages, puzzle command lists).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

from whisper_engine.core.errors import ContentError
from whisper_engine.resources.schemas import BUILTIN_SCHEMAS


class ContentDatabase:
    """
    Central storage for raw authored content.

    Layout under data_path:
        schemas/*.schema.json      optional overrides of built-in schemas
        database/dialog/*.json     one tree per file, or a list of trees
        database/journal/*.json    journal pages
        database/puzzles/*.json    puzzle command configs

    Entries failing schema validation are logged and skipped.
    """

    def __init__(self, data_path: Path | str):
        self._data_path = Path(data_path)
        self._schemas: dict[str, Any] = dict(BUILTIN_SCHEMAS)

        # Data stores
        self.dialogs: dict[str, dict[str, Any]] = {}
        self.journal_pages: dict[str, dict[str, Any]] = {}
        self.puzzles: dict[str, dict[str, Any]] = {}

        self.logger = logging.getLogger(__name__)

    @property
    def data_path(self) -> Path:
        return self._data_path

    def load_all(self) -> None:
        """Load all content from disk."""
        self._load_schemas()

        self.dialogs = self._load_category("dialog", "dialog.schema.json")
        self.journal_pages = self._load_category("journal", "journal.schema.json")
        self.puzzles = self._load_category("puzzles", "puzzle.schema.json")

        self.logger.info(
            f"Loaded {len(self.dialogs)} dialogue trees, "
            f"{len(self.journal_pages)} journal pages, "
            f"{len(self.puzzles)} puzzles."
        )

    def _load_schemas(self) -> None:
        """Load schema overrides."""
        schema_dir = self._data_path / "schemas"
        if not schema_dir.exists():
            self.logger.debug(f"No schema overrides in {schema_dir}")
            return

        for schema_file in schema_dir.glob("*.schema.json"):
            try:
                with open(schema_file, 'r', encoding='utf-8') as f:
                    self._schemas[schema_file.name] = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load schema {schema_file}: {e}")

    def _load_category(self, folder: str, schema_name: str) -> dict[str, Any]:
        """Load all JSON files in a category folder."""
        category_dir = self._data_path / "database" / folder
        data_store: dict[str, Any] = {}

        if not category_dir.exists():
            self.logger.warning(f"Data directory not found: {category_dir}")
            return data_store

        schema = self._schemas.get(schema_name)

        for file_path in sorted(category_dir.glob("*.json")):
            try:
                data = read_json(file_path)
            except ContentError as e:
                self.logger.error(str(e))
                continue

            entries = data if isinstance(data, list) else [data]
            for entry in entries:
                if not isinstance(entry, dict):
                    self.logger.error(f"Skipping non-object entry in {file_path}")
                    continue
                try:
                    jsonschema.validate(instance=entry, schema=schema)
                except jsonschema.ValidationError as e:
                    self.logger.error(f"Validation error in {file_path}: {e.message}")
                    continue

                entry_id = entry['id']
                if entry_id in data_store:
                    self.logger.warning(f"Duplicate {folder} id '{entry_id}' in {file_path}; keeping first")
                    continue
                data_store[entry_id] = entry

        return data_store

    def add_dialog(self, data: dict[str, Any]) -> bool:
        """Validate and register a dialogue tree given as a dict."""
        try:
            jsonschema.validate(instance=data, schema=self._schemas["dialog.schema.json"])
        except jsonschema.ValidationError as e:
            self.logger.error(f"Validation error in dialogue '{data.get('id', '?')}': {e.message}")
            return False
        self.dialogs[data['id']] = data
        return True

    def get_dialog(self, dialog_id: str) -> dict[str, Any] | None:
        return self.dialogs.get(dialog_id)

    def get_journal_page(self, page_id: str) -> dict[str, Any] | None:
        return self.journal_pages.get(page_id)

    def get_puzzle(self, puzzle_id: str) -> dict[str, Any] | None:
        return self.puzzles.get(puzzle_id)


def read_json(path: Path | str) -> Any:
    """Read a JSON file, wrapping I/O and parse failures in ContentError."""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except OSError as e:
        raise ContentError(f"cannot read file: {e}", str(path)) from e
    except json.JSONDecodeError as e:
        raise ContentError(f"invalid JSON: {e}", str(path)) from e
