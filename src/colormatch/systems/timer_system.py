from __future__ import annotations

from typing import Any, Callable, Dict, Iterable

from colormatch.events.bus import EVENT_TICK, EventBus
from colormatch.utils.round_timer import DelayTimer, RoundTimer


class TimerSystem:
    """Host-owned scheduler that advances every registered timer on ``EVENT_TICK``.

    Callers only ever hold the integer token returned by ``schedule``/``delay``.
    Timers added while a tick is being processed start advancing on the next tick.
    """

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus
        self.now: float = 0.0
        self._timers: Dict[int, RoundTimer] = {}
        self._next_token = 1
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    def schedule(self, timer: RoundTimer) -> int:
        token = self._next_token
        self._next_token += 1
        self._timers[token] = timer
        return token

    def delay(self, seconds: float, callback: Callable[..., Any], *args: Any) -> int:
        return self.schedule(DelayTimer(delay=max(0.0, float(seconds)), callback=callback, args=args))

    def cancel(self, token: int | None) -> None:
        if token is None:
            return
        timer = self._timers.pop(token, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self, tokens: Iterable[int | None]) -> None:
        for token in list(tokens):
            self.cancel(token)

    def is_active(self, token: int | None) -> bool:
        if token is None:
            return False
        timer = self._timers.get(token)
        return timer is not None and timer.active

    @property
    def pending_count(self) -> int:
        return len(self._timers)

    def advance(self, dt: float) -> None:
        if dt < 0:
            return
        self.now += dt
        for token, timer in list(self._timers.items()):
            # A callback earlier in this pass may have cancelled this timer.
            if token not in self._timers:
                continue
            timer.advance(dt)
            if not timer.active:
                self._timers.pop(token, None)

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        try:
            dt = float(dt)
        except (TypeError, ValueError):
            return
        self.advance(dt)
