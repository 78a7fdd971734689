"""Cancellable clocks advanced by the host's tick.

None of these timers sleep or own a thread. They only move forward when
``advance(dt)`` is called, which keeps them deterministic under test. Every
timer supports ``cancel()``. Cancelling twice is harmless, and a cancelled
timer never calls back again, even when it is cancelled from inside one of
its own callbacks.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Tuple

from colormatch.constants import REVEAL_TICK_INTERVAL

_EPSILON = 1e-9


class RoundTimer(Protocol):
    @property
    def active(self) -> bool: ...

    def advance(self, dt: float) -> None: ...

    def cancel(self) -> None: ...


@dataclass(slots=True)
class ProgressTimer:
    """Emits fractional progress at ``tick_interval`` until ``duration`` has elapsed."""

    duration: float
    on_progress: Callable[[float], None] | None = None
    on_complete: Callable[[], None] | None = None
    tick_interval: float = REVEAL_TICK_INTERVAL

    progress: float = field(init=False, default=0.0)
    _elapsed: float = field(init=False, default=0.0, repr=False)
    _since_emit: float = field(init=False, default=0.0, repr=False)
    _cancelled: bool = field(init=False, default=False, repr=False)
    _finished: bool = field(init=False, default=False, repr=False)

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._finished)

    def cancel(self) -> None:
        self._cancelled = True

    def advance(self, dt: float) -> None:
        if not self.active or dt < 0:
            return
        self._elapsed += dt
        self._since_emit += dt
        if self.duration <= 0 or self._elapsed + _EPSILON >= self.duration:
            self._finished = True
            self.progress = 1.0
            if self.on_progress is not None:
                self.on_progress(1.0)
            if self._cancelled:
                return
            if self.on_complete is not None:
                self.on_complete()
            return
        if self._since_emit + _EPSILON < self.tick_interval:
            return
        self._since_emit = 0.0
        self.progress = min(1.0, self._elapsed / self.duration)
        if self.on_progress is not None:
            self.on_progress(self.progress)


@dataclass(slots=True)
class CountdownTimer:
    """Counts whole seconds down from ``seconds`` and reports expiry at zero."""

    seconds: int
    on_second: Callable[[int], None] | None = None
    on_expired: Callable[[], None] | None = None

    remaining: int = field(init=False, default=0)
    _carry: float = field(init=False, default=0.0, repr=False)
    _cancelled: bool = field(init=False, default=False, repr=False)
    _finished: bool = field(init=False, default=False, repr=False)

    def __post_init__(self) -> None:
        self.remaining = max(0, int(self.seconds))

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._finished)

    def cancel(self) -> None:
        self._cancelled = True

    def advance(self, dt: float) -> None:
        if not self.active or dt < 0:
            return
        if self.remaining <= 0:
            self._expire()
            return
        self._carry += dt
        while self._carry + _EPSILON >= 1.0:
            self._carry -= 1.0
            self.remaining -= 1
            if self.on_second is not None:
                self.on_second(self.remaining)
            if self._cancelled:
                return
            if self.remaining <= 0:
                self._expire()
                return

    def _expire(self) -> None:
        self._finished = True
        if self.on_expired is not None:
            self.on_expired()


@dataclass(slots=True)
class ElapsedTimer:
    """Stopwatch reporting each whole second that passes."""

    on_second: Callable[[int], None] | None = None

    elapsed: int = field(init=False, default=0)
    _carry: float = field(init=False, default=0.0, repr=False)
    _cancelled: bool = field(init=False, default=False, repr=False)

    @property
    def active(self) -> bool:
        return not self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def advance(self, dt: float) -> None:
        if self._cancelled or dt < 0:
            return
        self._carry += dt
        while self._carry + _EPSILON >= 1.0:
            self._carry -= 1.0
            self.elapsed += 1
            if self.on_second is not None:
                self.on_second(self.elapsed)
            if self._cancelled:
                return


@dataclass(slots=True)
class DelayTimer:
    """One-shot callback fired once ``delay`` seconds have passed."""

    delay: float
    callback: Callable[..., Any]
    args: Tuple[Any, ...] = ()

    _elapsed: float = field(init=False, default=0.0, repr=False)
    _cancelled: bool = field(init=False, default=False, repr=False)
    _fired: bool = field(init=False, default=False, repr=False)

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        self._cancelled = True

    def advance(self, dt: float) -> None:
        if not self.active or dt < 0:
            return
        self._elapsed += dt
        if self._elapsed + _EPSILON >= self.delay:
            self._fired = True
            self.callback(*self.args)
