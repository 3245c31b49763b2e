"""Persistent command history of completed exchanges."""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Mapping, Protocol

from .settings import _SETTINGS_DIR

__all__ = ["HistoryEntry", "HistorySink", "CommandHistoryStore", "InMemoryHistory"]

LOGGER = logging.getLogger(__name__)
_HISTORY_FILENAME = "history.json"
_HISTORY_VERSION = 1
_DEFAULT_LIMIT = 100


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    """One successful query/response pair."""

    id: str
    query: str
    response: str
    model: str
    timestamp: float


class HistorySink(Protocol):
    """Append-only destination for completed exchanges."""

    def add(self, query: str, response: str, model: str) -> HistoryEntry:  # pragma: no cover - protocol stub
        ...


def _new_entry(query: str, response: str, model: str) -> HistoryEntry:
    return HistoryEntry(
        id=uuid.uuid4().hex,
        query=query,
        response=response,
        model=model,
        timestamp=time.time(),
    )


class InMemoryHistory:
    """History sink that keeps entries in memory, newest first."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def add(self, query: str, response: str, model: str) -> HistoryEntry:
        entry = _new_entry(query, response, model)
        self._entries.insert(0, entry)
        return entry

    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class CommandHistoryStore:
    """JSON-file backed history, newest first and capped at ``limit`` entries."""

    def __init__(self, path: Path | None = None, *, limit: int = _DEFAULT_LIMIT) -> None:
        self._path = path or (_SETTINGS_DIR / _HISTORY_FILENAME)
        self._limit = max(1, int(limit))

    @property
    def path(self) -> Path:
        return self._path

    def add(self, query: str, response: str, model: str) -> HistoryEntry:
        entry = _new_entry(query, response, model)
        entries = [entry, *self.entries()][: self._limit]
        self._write(entries)
        LOGGER.debug("Recorded history entry %s (model=%s)", entry.id, model)
        return entry

    def entries(self) -> list[HistoryEntry]:
        payload = self._read_payload()
        raw_entries = payload.get("entries")
        if not isinstance(raw_entries, list):
            return []
        entries: list[HistoryEntry] = []
        for item in raw_entries:
            entry = _coerce_entry(item)
            if entry is not None:
                entries.append(entry)
        return entries

    def clear(self) -> None:
        self._write([])

    def _write(self, entries: list[HistoryEntry]) -> None:
        payload = {"version": _HISTORY_VERSION, "entries": [asdict(entry) for entry in entries]}
        body = json.dumps(payload, indent=2, ensure_ascii=False)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)

    def _read_payload(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            if isinstance(data, Mapping):
                return dict(data)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("History file %s is not valid JSON: %s", self._path, exc)
        return {}


def _coerce_entry(value: Any) -> HistoryEntry | None:
    if not isinstance(value, Mapping):
        return None
    try:
        return HistoryEntry(
            id=str(value["id"]),
            query=str(value.get("query", "")),
            response=str(value.get("response", "")),
            model=str(value.get("model", "")),
            timestamp=float(value.get("timestamp", 0.0)),
        )
    except (KeyError, TypeError, ValueError):
        return None
