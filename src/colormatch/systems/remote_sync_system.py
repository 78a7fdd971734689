from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from colormatch.components.leaderboard_entry import LeaderboardEntry
from colormatch.events.bus import EVENT_HIGH_SCORE_RECORDED, EVENT_REMOTE_SYNC_FAILED, EventBus
from colormatch.persistence.record_store import RecordStore
from colormatch.systems.timer_system import TimerSystem

logger = logging.getLogger(__name__)

Transport = Callable[[str, Dict[str, Any]], None]

USER_ID_KEY = "user_id"


def ensure_user_id(store: RecordStore) -> str:
    """Return the opaque per-install user id, creating and storing one if needed."""

    user_id = store.get(USER_ID_KEY)
    if user_id:
        return str(user_id)
    user_id = uuid.uuid4().hex
    try:
        store.set(USER_ID_KEY, user_id)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Could not persist user id: %s", exc)
    return user_id


def log_transport(user_id: str, payload: Dict[str, Any]) -> None:
    """Default transport for hosts without a score service: records the upload in the log."""

    logger.info("Score upload for %s: %s", user_id, payload)


class RemoteSyncSystem:
    """Forwards recorded high scores to a remote transport, one tick later.

    Fire-and-forget: a failed upload is logged and announced with
    ``EVENT_REMOTE_SYNC_FAILED`` but never retried.
    """

    def __init__(
        self,
        event_bus: EventBus,
        timers: TimerSystem,
        transport: Transport,
        *,
        user_id: str,
    ) -> None:
        self.event_bus = event_bus
        self.timers = timers
        self.user_id = user_id
        self._transport = transport
        self.sent = 0
        self.failed = 0
        self.event_bus.subscribe(EVENT_HIGH_SCORE_RECORDED, self._on_high_score_recorded)

    @staticmethod
    def build_payload(entry: LeaderboardEntry) -> Dict[str, Any]:
        return {
            "name": entry.player_name,
            "score": entry.score,
            "mode": entry.mode,
            "date": datetime.fromtimestamp(entry.timestamp, tz=timezone.utc).isoformat(),
            "timestamp": entry.timestamp,
        }

    def _on_high_score_recorded(self, sender, **payload) -> None:
        entry = payload.get("entry")
        if not isinstance(entry, LeaderboardEntry):
            return
        self.timers.delay(0.0, self._upload, entry)

    def _upload(self, entry: LeaderboardEntry) -> None:
        try:
            self._transport(self.user_id, self.build_payload(entry))
        except Exception as exc:
            # Any transport error; the game keeps running regardless.
            self.failed += 1
            logger.warning("Remote score sync failed for %s: %s", entry.player_name, exc)
            self.event_bus.emit(EVENT_REMOTE_SYNC_FAILED, entry=entry, error=exc)
            return
        self.sent += 1
        logger.info("Synced score %s for %s (%s)", entry.score, entry.player_name, entry.mode)
