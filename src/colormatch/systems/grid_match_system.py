"""Engine for the flood-style grid puzzle."""
from __future__ import annotations

import random
from typing import List, Optional, Tuple

from esper import World

from colormatch.components.cell_color import PLAYABLE_COLORS
from colormatch.components.game_mode import GameKind, GridMode, GridVariant
from colormatch.components.game_state import AppMode
from colormatch.components.grid_board import GridBoard
from colormatch.components.grid_session import GridPhase, GridSession
from colormatch.components.snapshots import GridSnapshot
from colormatch.constants import DEFAULT_PLAYER_NAME
from colormatch.events.bus import (
    EVENT_ELAPSED_CHANGED,
    EVENT_GAME_RESET_REQUEST,
    EVENT_GAME_START_REQUEST,
    EVENT_GRID_CHANGED,
    EVENT_GRID_HINT,
    EVENT_GRID_OUT_OF_MOVES,
    EVENT_GRID_RESET,
    EVENT_GRID_WON,
    EVENT_HINT_REQUEST,
    EVENT_SCORE_SUBMIT_REQUEST,
    EVENT_SCORE_SUBMITTED,
    EVENT_TILE_CLICK,
    EventBus,
)
from colormatch.systems.timer_system import TimerSystem
from colormatch.utils import grid_rules
from colormatch.utils.game_state import get_game_state, set_app_mode
from colormatch.utils.round_timer import ElapsedTimer
from colormatch.utils.scoring import grid_score, move_penalty_for

Position = Tuple[int, int]


class GridMatchSystem:
    """Owns one GridBoard + GridSession pair and applies moves to it.

    Phases run IDLE -> ACTIVE -> WON. Moves outside ACTIVE, moves past the move
    budget, and taps off the board are ignored.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        timers: TimerSystem,
        *,
        rng: random.Random | None = None,
        randomize_hint: bool = False,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.timers = timers
        self._rng = rng or getattr(world, "random", None) or random.Random()
        self._randomize_hint = randomize_hint
        self.session_entity: int | None = None
        self._elapsed_token: int | None = None

        self.event_bus.subscribe(EVENT_GAME_START_REQUEST, self._on_start_request)
        self.event_bus.subscribe(EVENT_GAME_RESET_REQUEST, self._on_reset_request)
        self.event_bus.subscribe(EVENT_TILE_CLICK, self._on_tile_click)
        self.event_bus.subscribe(EVENT_HINT_REQUEST, self._on_hint_request)
        self.event_bus.subscribe(EVENT_SCORE_SUBMIT_REQUEST, self._on_score_submit)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def reset(self, mode: GridMode | None = None) -> None:
        """Start a fresh round: all-neutral grid, new target, counters back to defaults."""

        if mode is None:
            current = self.session
            if current is None:
                return
            mode = current.mode
        self.timers.cancel(self._elapsed_token)
        self._elapsed_token = None

        isolated = mode.variant is GridVariant.EXACT_ISOLATED
        board = GridBoard(size=mode.size)
        session = GridSession(
            mode=mode,
            phase=GridPhase.ACTIVE,
            target=self._rng.choice(PLAYABLE_COLORS),
            target_count=mode.target_count if isolated else None,
            max_moves=mode.max_moves,
            moves_remaining=mode.max_moves,
            score=grid_score(0, move_penalty_for(mode.variant)),
        )
        if self.session_entity is None:
            self.session_entity = self.world.create_entity(board, session)
        else:
            self.world.add_component(self.session_entity, board)
            self.world.add_component(self.session_entity, session)
        self._elapsed_token = self.timers.schedule(ElapsedTimer(on_second=self._on_elapsed_second))
        self.event_bus.emit(
            EVENT_GRID_RESET,
            mode_key=mode.key,
            target=session.target,
            target_count=session.target_count,
            max_moves=session.max_moves,
        )

    def apply_move(self, row: int, col: int) -> List[Position]:
        session = self.session
        board = self.board
        if session is None or board is None:
            return []
        if session.phase is not GridPhase.ACTIVE:
            return []
        if session.moves_remaining is not None and session.moves_remaining <= 0:
            return []
        touched = grid_rules.apply_flood_move(board, row, col)
        if not touched:
            return []
        session.moves += 1
        if session.moves_remaining is not None:
            session.moves_remaining -= 1
        session.score = grid_score(session.moves, move_penalty_for(session.mode.variant))
        session.hint = None
        self.event_bus.emit(EVENT_GRID_CHANGED, positions=touched, moves=session.moves, score=session.score)
        if self.check_win():
            self._on_won(session)
        elif session.moves_remaining == 0 and not session.out_of_moves:
            session.out_of_moves = True
            self.timers.cancel(self._elapsed_token)
            self._elapsed_token = None
            self.event_bus.emit(EVENT_GRID_OUT_OF_MOVES, mode_key=session.mode.key, moves=session.moves)
        return touched

    def check_win(self) -> bool:
        session = self.session
        board = self.board
        if session is None or board is None:
            return False
        if session.mode.variant is GridVariant.EXACT_ISOLATED:
            return grid_rules.is_exact_isolated(board, session.target, session.target_count or 0)
        return grid_rules.is_uniform(board)

    def is_won(self) -> bool:
        session = self.session
        return session is not None and session.phase is GridPhase.WON

    def hint(self) -> Optional[Position]:
        session = self.session
        board = self.board
        if session is None or board is None or session.phase is not GridPhase.ACTIVE:
            return None
        if session.mode.variant is GridVariant.EXACT_ISOLATED:
            position = grid_rules.isolated_hint(board, session.target)
        else:
            candidates = grid_rules.uniform_hint_candidates(board, session.target)
            if not candidates:
                position = None
            elif self._randomize_hint:
                position = self._rng.choice(candidates)
            else:
                position = candidates[0]
        session.hint = position
        self.event_bus.emit(EVENT_GRID_HINT, position=position)
        return position

    def submit_score(self, player_name: str) -> bool:
        session = self.session
        if session is None or session.phase is not GridPhase.WON:
            return False
        self.event_bus.emit(
            EVENT_SCORE_SUBMITTED,
            mode_key=session.mode.key,
            player_name=player_name.strip() or DEFAULT_PLAYER_NAME,
            score=session.score,
            time=session.elapsed,
        )
        return True

    def discard(self) -> None:
        self.timers.cancel(self._elapsed_token)
        self._elapsed_token = None
        if self.session_entity is not None:
            self.world.delete_entity(self.session_entity, immediate=True)
            self.session_entity = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def session(self) -> GridSession | None:
        if self.session_entity is None:
            return None
        try:
            return self.world.component_for_entity(self.session_entity, GridSession)
        except KeyError:
            return None

    @property
    def board(self) -> GridBoard | None:
        if self.session_entity is None:
            return None
        try:
            return self.world.component_for_entity(self.session_entity, GridBoard)
        except KeyError:
            return None

    def snapshot(self) -> GridSnapshot | None:
        session = self.session
        board = self.board
        if session is None or board is None:
            return None
        return GridSnapshot(
            cells=tuple(tuple(row) for row in board.cells),
            phase=session.phase,
            target=session.target,
            target_count=session.target_count,
            moves=session.moves,
            moves_remaining=session.moves_remaining,
            score=session.score,
            elapsed=session.elapsed,
            hint=session.hint,
            out_of_moves=session.out_of_moves,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_won(self, session: GridSession) -> None:
        self.timers.cancel(self._elapsed_token)
        self._elapsed_token = None
        session.phase = GridPhase.WON
        session.hint = None
        self.event_bus.emit(
            EVENT_GRID_WON,
            mode_key=session.mode.key,
            score=session.score,
            elapsed=session.elapsed,
            moves=session.moves,
        )

    def _on_elapsed_second(self, elapsed: int) -> None:
        session = self.session
        if session is None or session.phase is not GridPhase.ACTIVE:
            return
        session.elapsed = elapsed
        self.event_bus.emit(EVENT_ELAPSED_CHANGED, elapsed=elapsed)

    def _owns_input(self) -> bool:
        if self.session is None:
            return False
        state = get_game_state(self.world)
        return state is None or state.mode == AppMode.GRID

    # Event handlers -----------------------------------------------------

    def _on_start_request(self, sender, **payload) -> None:
        if payload.get("game") is not GameKind.GRID:
            return
        mode = payload.get("mode")
        if not isinstance(mode, GridMode):
            return
        set_app_mode(self.world, self.event_bus, AppMode.GRID)
        self.reset(mode)

    def _on_reset_request(self, sender, **payload) -> None:
        if self._owns_input():
            self.reset()

    def _on_tile_click(self, sender, **payload) -> None:
        row = payload.get("row")
        col = payload.get("col")
        if row is None or col is None or not self._owns_input():
            return
        try:
            row, col = int(row), int(col)
        except (TypeError, ValueError):
            return
        self.apply_move(row, col)

    def _on_hint_request(self, sender, **payload) -> None:
        if self._owns_input():
            self.hint()

    def _on_score_submit(self, sender, **payload) -> None:
        if self._owns_input():
            self.submit_score(str(payload.get("player_name") or ""))
