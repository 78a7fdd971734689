from __future__ import annotations

import random
from typing import Any, Dict, List, Sequence, Tuple

from colormatch.events.bus import EVENT_TICK, EventBus


class ScriptedRandom(random.Random):
    """Deterministic random source.

    ``randint`` returns scripted ``values`` first, then walks a counter so every
    color drawn within a round is distinct.
    ``choice`` pops from ``choices`` while any are left.
    """

    def __init__(self, choices: Sequence[Any] = (), values: Sequence[int] = ()) -> None:
        super().__init__(0)
        self.choices: List[Any] = list(choices)
        self.values: List[int] = list(values)
        self._counter = 0

    def randint(self, a: int, b: int) -> int:
        if self.values:
            return self.values.pop(0)
        value = a + self._counter % (b - a + 1)
        self._counter += 1
        return value

    def choice(self, seq):
        if self.choices:
            return self.choices.pop(0)
        return super().choice(seq)


def tick(bus: EventBus, seconds: float, steps: int = 1) -> None:
    """Emit ``steps`` ticks that together cover ``seconds``."""

    dt = seconds / steps
    for _ in range(steps):
        bus.emit(EVENT_TICK, dt=dt)


class EventRecorder:
    def __init__(self, bus: EventBus, *names: str) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        for name in names:
            bus.subscribe(name, self._make_handler(name))

    def _make_handler(self, name: str):
        def handler(sender, **payload):
            self.events.append((name, payload))
        return handler

    def named(self, name: str) -> List[Dict[str, Any]]:
        return [payload for event, payload in self.events if event == name]

    def names(self) -> List[str]:
        return [event for event, _ in self.events]
