"""Local persistence sink for best scores, settings, and per-mode high-score lists."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Protocol

from colormatch.components.leaderboard_entry import LeaderboardEntry
from colormatch.constants import SAVE_PATH_ENV

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def load_records(self, mode_key: str) -> List[LeaderboardEntry]: ...

    def save_records(self, mode_key: str, entries: Iterable[LeaderboardEntry]) -> None: ...


class MemoryRecordStore:
    """In-process store; used by tests and when no save file is wanted."""

    def __init__(self) -> None:
        self._settings: Dict[str, Any] = {}
        self._records: Dict[str, List[LeaderboardEntry]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value

    def load_records(self, mode_key: str) -> List[LeaderboardEntry]:
        return list(self._records.get(mode_key, []))

    def save_records(self, mode_key: str, entries: Iterable[LeaderboardEntry]) -> None:
        self._records[mode_key] = list(entries)


class JsonRecordStore:
    """Single JSON document on disk holding ``settings`` and ``records`` sections.

    A missing file reads as empty. An unreadable or corrupt file is logged and
    also reads as empty; it is replaced on the next successful write. Write
    errors propagate to the caller.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else self.default_path()

    @staticmethod
    def default_path() -> Path:
        override = os.environ.get(SAVE_PATH_ENV)
        if override:
            return Path(override)
        return Path(__file__).resolve().parents[3] / "data" / "records.json"

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        return self._read()["settings"].get(key, default)

    def set(self, key: str, value: Any) -> None:
        payload = self._read()
        payload["settings"][key] = value
        self._write(payload)

    def load_records(self, mode_key: str) -> List[LeaderboardEntry]:
        raw_entries = self._read()["records"].get(mode_key, [])
        entries: List[LeaderboardEntry] = []
        for raw in raw_entries:
            try:
                entries.append(LeaderboardEntry.from_dict(raw))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed record in %s: %r", mode_key, raw)
        return entries

    def save_records(self, mode_key: str, entries: Iterable[LeaderboardEntry]) -> None:
        payload = self._read()
        payload["records"][mode_key] = [entry.to_dict() for entry in entries]
        self._write(payload)

    def _read(self) -> Dict[str, Dict[str, Any]]:
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return {"settings": {}, "records": {}}
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read save file %s: %s", self._path, exc)
            return {"settings": {}, "records": {}}
        if not isinstance(payload, dict):
            logger.warning("Ignoring save file %s with unexpected layout", self._path)
            return {"settings": {}, "records": {}}
        settings = payload.get("settings")
        records = payload.get("records")
        return {
            "settings": settings if isinstance(settings, dict) else {},
            "records": records if isinstance(records, dict) else {},
        }

    def _write(self, payload: Dict[str, Dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
