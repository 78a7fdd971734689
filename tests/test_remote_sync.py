import logging

from colormatch.components.leaderboard_entry import LeaderboardEntry
from colormatch.events.bus import EVENT_HIGH_SCORE_RECORDED, EVENT_REMOTE_SYNC_FAILED
from colormatch.systems.remote_sync_system import RemoteSyncSystem, ensure_user_id, log_transport
from tests.helpers import EventRecorder, tick

ENTRY = LeaderboardEntry(player_name="Ann", score=120, mode="memory_Hard", timestamp=0.0)


class _Transport:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = []

    def __call__(self, user_id, payload):
        self.calls.append((user_id, payload))
        if self.fail:
            raise ConnectionError("offline")


def test_upload_happens_on_next_tick(bus, timers):
    transport = _Transport()
    sync = RemoteSyncSystem(bus, timers, transport, user_id="u1")

    bus.emit(EVENT_HIGH_SCORE_RECORDED, mode_key=ENTRY.mode, entry=ENTRY, rank=1)
    assert transport.calls == []

    tick(bus, 0.016)

    assert len(transport.calls) == 1
    user_id, payload = transport.calls[0]
    assert user_id == "u1"
    assert payload["name"] == "Ann"
    assert payload["score"] == 120
    assert payload["mode"] == "memory_Hard"
    assert payload["date"].startswith("1970-01-01T00:00:00")
    assert sync.sent == 1


def test_failed_upload_is_reported_and_not_retried(bus, timers, caplog):
    transport = _Transport(fail=True)
    sync = RemoteSyncSystem(bus, timers, transport, user_id="u1")
    recorder = EventRecorder(bus, EVENT_REMOTE_SYNC_FAILED)

    bus.emit(EVENT_HIGH_SCORE_RECORDED, mode_key=ENTRY.mode, entry=ENTRY, rank=1)
    tick(bus, 0.016, steps=5)

    assert len(transport.calls) == 1
    assert sync.failed == 1
    assert recorder.named(EVENT_REMOTE_SYNC_FAILED)[0]["entry"] == ENTRY
    assert "Remote score sync failed" in caplog.text


def test_user_id_is_created_once(store):
    first = ensure_user_id(store)

    assert first
    assert ensure_user_id(store) == first
    assert store.get("user_id") == first


def test_log_transport_records_upload_without_failing(bus, timers, caplog):
    caplog.set_level(logging.INFO, logger="colormatch.systems.remote_sync_system")
    sync = RemoteSyncSystem(bus, timers, log_transport, user_id="u1")

    bus.emit(EVENT_HIGH_SCORE_RECORDED, mode_key=ENTRY.mode, entry=ENTRY, rank=1)
    tick(bus, 0.016)

    assert sync.sent == 1
    assert sync.failed == 0
    assert "Score upload for u1" in caplog.text
    assert "'name': 'Ann'" in caplog.text
