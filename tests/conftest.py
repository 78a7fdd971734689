import sys, os

import pytest

# Ensure src and the repo root are on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
for path in (SRC, ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

from colormatch.events.bus import EventBus
from colormatch.persistence.record_store import MemoryRecordStore
from colormatch.systems.timer_system import TimerSystem
from colormatch.world import create_world
from tests.helpers import ScriptedRandom


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def world(bus, rng):
    return create_world(bus, rng=rng)


@pytest.fixture
def timers(bus):
    return TimerSystem(bus)


@pytest.fixture
def store():
    return MemoryRecordStore()
