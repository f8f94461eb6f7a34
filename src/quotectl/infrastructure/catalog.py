"""JsonCatalog: file-backed implementation of the catalog collaborator.

The file is a JSON object with optional ``works``, ``materials`` and
``labor`` arrays, or a flat array of entries each carrying ``kind``.
Entries are loaded lazily on first lookup.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from quotectl.domain.catalog import LaborEntry, MaterialEntry, WorkEntry, parse_entry
from quotectl.domain.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_SECTIONS = {"works": "work", "materials": "material", "labor": "labor"}

type _Entry = WorkEntry | MaterialEntry | LaborEntry


class JsonCatalog:
    """Work/material/labor library read from a JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._entries: dict[str, _Entry] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def get(self, entry_id: str) -> _Entry:
        """Return the entry with *entry_id*.

        Raises:
            NotFoundError: If no entry has that id.
            ValidationError: If the catalog file is missing or malformed.
        """
        entry = self._load().get(entry_id)
        if entry is None:
            raise NotFoundError(entry_id, kind="catalog entry")
        return entry

    def entries(self) -> list[_Entry]:
        return list(self._load().values())

    def _load(self) -> dict[str, _Entry]:
        if self._entries is not None:
            return self._entries
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ValidationError("catalog", f"file not found: {self._path}") from exc
        except json.JSONDecodeError as exc:
            raise ValidationError("catalog", f"invalid JSON in {self._path}: {exc}") from exc

        entries: dict[str, _Entry] = {}
        for data in _flatten(raw):
            try:
                entry = parse_entry(data)
            except PydanticValidationError as exc:
                raise ValidationError("catalog", f"invalid entry {data.get('id')!r}: {exc}") from exc
            entries[entry.id] = entry
        logger.debug("Loaded %d catalog entries from %s", len(entries), self._path)
        self._entries = entries
        return entries


def _flatten(raw: Any) -> list[dict[str, Any]]:
    if isinstance(raw, list):
        return [dict(d) for d in raw]
    if not isinstance(raw, dict):
        raise ValidationError("catalog", "expected a JSON object or array")
    flat: list[dict[str, Any]] = []
    for section, kind in _SECTIONS.items():
        for data in raw.get(section, []):
            flat.append({"kind": kind, **data})
    return flat
