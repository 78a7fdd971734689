from __future__ import annotations

import logging
import time
from typing import Callable, List

from esper import World

from colormatch.components.leaderboard_entry import LeaderboardEntry
from colormatch.constants import LEADERBOARD_SIZE
from colormatch.events.bus import (
    EVENT_BEST_RECORD_CHANGED,
    EVENT_GRID_WON,
    EVENT_HIGH_SCORE_RECORDED,
    EVENT_PERSISTENCE_FAILED,
    EVENT_SCORE_SUBMITTED,
    EventBus,
)
from colormatch.persistence.record_store import RecordStore
from colormatch.utils.leaderboard import insert_entry, qualifies_for_leaderboard, sort_entries

logger = logging.getLogger(__name__)

_PERSISTENCE_ERRORS = (OSError, ValueError, TypeError)


def best_score_key(mode_key: str) -> str:
    return f"best_score:{mode_key}"


def best_time_key(mode_key: str) -> str:
    return f"best_time:{mode_key}"


class LeaderboardSystem:
    """Keeps per-mode top-K lists and best score/time through a RecordStore.

    Store failures are logged and reported with ``EVENT_PERSISTENCE_FAILED``.
    Game state is never rolled back because of them.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        store: RecordStore,
        *,
        clock: Callable[[], float] | None = None,
        limit: int = LEADERBOARD_SIZE,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.store = store
        self._clock = clock or time.time
        self._limit = limit
        self.event_bus.subscribe(EVENT_SCORE_SUBMITTED, self._on_score_submitted)
        self.event_bus.subscribe(EVENT_GRID_WON, self._on_grid_won)

    def records(self, mode_key: str) -> List[LeaderboardEntry]:
        try:
            return sort_entries(self.store.load_records(mode_key))
        except _PERSISTENCE_ERRORS as exc:
            self._report_failure("load_records", mode_key, exc)
            return []

    def qualifies(self, mode_key: str, score: int) -> bool:
        return qualifies_for_leaderboard(self.records(mode_key), score, self._limit)

    def record_entry(self, mode_key: str, player_name: str, score: int, time_taken: int | None = None) -> int | None:
        """Insert a score; returns its 1-based rank, or None when it missed the cut."""

        entry = LeaderboardEntry(
            player_name=player_name,
            score=int(score),
            mode=mode_key,
            timestamp=self._clock(),
            time=time_taken,
        )
        entries, rank = insert_entry(self.records(mode_key), entry, self._limit)
        if rank is None:
            return None
        try:
            self.store.save_records(mode_key, entries)
        except _PERSISTENCE_ERRORS as exc:
            self._report_failure("save_records", mode_key, exc)
        self.event_bus.emit(EVENT_HIGH_SCORE_RECORDED, mode_key=mode_key, entry=entry, rank=rank)
        return rank

    def reset(self, mode_key: str) -> None:
        try:
            self.store.save_records(mode_key, [])
        except _PERSISTENCE_ERRORS as exc:
            self._report_failure("save_records", mode_key, exc)

    def best_score(self, mode_key: str) -> int:
        return self._get_int(best_score_key(mode_key))

    def best_time(self, mode_key: str) -> int:
        return self._get_int(best_time_key(mode_key))

    # Event handlers -----------------------------------------------------

    def _on_score_submitted(self, sender, **payload) -> None:
        mode_key = payload.get("mode_key")
        player_name = payload.get("player_name")
        score = payload.get("score")
        if not mode_key or not player_name or score is None:
            return
        self.record_entry(mode_key, player_name, score, payload.get("time"))

    def _on_grid_won(self, sender, **payload) -> None:
        mode_key = payload.get("mode_key")
        score = payload.get("score")
        elapsed = payload.get("elapsed")
        if not mode_key or score is None or elapsed is None:
            return
        best_score = self.best_score(mode_key)
        best_time = self.best_time(mode_key)
        changed = False
        # Zero means "no record yet".
        if best_score == 0 or score > best_score:
            best_score = int(score)
            self._set(best_score_key(mode_key), best_score)
            changed = True
        if best_time == 0 or elapsed < best_time:
            best_time = int(elapsed)
            self._set(best_time_key(mode_key), best_time)
            changed = True
        if changed:
            self.event_bus.emit(
                EVENT_BEST_RECORD_CHANGED,
                mode_key=mode_key,
                best_score=best_score,
                best_time=best_time,
            )

    # Internals ----------------------------------------------------------

    def _get_int(self, key: str) -> int:
        try:
            value = self.store.get(key, 0)
        except _PERSISTENCE_ERRORS as exc:
            self._report_failure("get", key, exc)
            return 0
        try:
            return int(value or 0)
        except (TypeError, ValueError):
            return 0

    def _set(self, key: str, value: int) -> None:
        try:
            self.store.set(key, value)
        except _PERSISTENCE_ERRORS as exc:
            self._report_failure("set", key, exc)

    def _report_failure(self, operation: str, key: str, exc: Exception) -> None:
        logger.warning("Record store %s failed for %s: %s", operation, key, exc)
        self.event_bus.emit(EVENT_PERSISTENCE_FAILED, operation=operation, key=key, error=exc)
