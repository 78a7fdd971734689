"""Engine for the memorize-then-find-the-color tile game."""
from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Tuple

from esper import World

from colormatch.components.game_mode import Difficulty, GameKind, level_config
from colormatch.components.game_state import AppMode
from colormatch.components.leaderboard_entry import LeaderboardEntry
from colormatch.components.memory_session import MemoryPhase, MemorySession
from colormatch.components.memory_tile import MemoryTile, TileDeck
from colormatch.components.pending_resolution import PendingTapResolution, TapOutcome
from colormatch.components.snapshots import MemorySnapshot, TileView
from colormatch.constants import (
    DEFAULT_PLAYER_NAME,
    LEADERBOARD_SIZE,
    LEVEL_TRANSITION_DELAY,
    MISMATCH_FLIP_BACK_DELAY,
    ROUND_ADVANCE_DELAY,
    TAP_RESOLVE_DELAY,
)
from colormatch.events.bus import (
    EVENT_GAME_END_REQUEST,
    EVENT_GAME_RESET_REQUEST,
    EVENT_GAME_START_REQUEST,
    EVENT_LEVEL_UP,
    EVENT_NEW_HIGH_SCORE,
    EVENT_PERSISTENCE_FAILED,
    EVENT_REVEAL_COMPLETE,
    EVENT_REVEAL_PROGRESS,
    EVENT_ROUND_COMPLETE,
    EVENT_ROUND_STARTED,
    EVENT_SCORE_SUBMIT_REQUEST,
    EVENT_SCORE_SUBMITTED,
    EVENT_TILE_FLIPPED,
    EVENT_TILE_MATCHED,
    EVENT_TILE_MISMATCHED,
    EVENT_TILE_TAP,
    EVENT_TIME_CHANGED,
    EVENT_TIME_UP,
    EventBus,
)
from colormatch.persistence.record_store import RecordStore
from colormatch.systems.timer_system import TimerSystem
from colormatch.utils.game_state import get_game_state, set_app_mode
from colormatch.utils.leaderboard import qualifies_for_leaderboard
from colormatch.utils.round_timer import CountdownTimer, ProgressTimer
from colormatch.utils.scoring import level_bonus, match_award, mismatch_penalty

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


class MemoryMatchSystem:
    """Runs reveal/guess rounds against a session countdown.

    Phase flow: IDLE -> REVEALING -> GUESSING -> ROUND_COMPLETE -> REVEALING ...
    In progressive mode, ROUND_COMPLETE leads to LEVEL_TRANSITION and then back
    to REVEALING with a harder config. Timeout or an explicit end request leads
    to GAME_OVER.

    A tap flips its tile right away and is scored later through a
    PendingTapResolution. The resolution is dropped when the session generation
    has moved on. A tile that is face-up or already waiting on a resolution
    ignores further taps. Taps on other tiles resolve independently.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        timers: TimerSystem,
        store: RecordStore,
        *,
        rng: random.Random | None = None,
        leaderboard_size: int = LEADERBOARD_SIZE,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.timers = timers
        self.store = store
        self._rng = rng or getattr(world, "random", None) or random.Random()
        self._leaderboard_size = leaderboard_size
        self.session_entity: int | None = None
        self._reveal_token: int | None = None
        self._countdown_token: int | None = None
        self._round_token: int | None = None
        self._pending: Dict[PendingTapResolution, int] = {}

        self.event_bus.subscribe(EVENT_GAME_START_REQUEST, self._on_start_request)
        self.event_bus.subscribe(EVENT_GAME_RESET_REQUEST, self._on_reset_request)
        self.event_bus.subscribe(EVENT_GAME_END_REQUEST, self._on_end_request)
        self.event_bus.subscribe(EVENT_TILE_TAP, self._on_tile_tap)
        self.event_bus.subscribe(EVENT_SCORE_SUBMIT_REQUEST, self._on_score_submit)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_game(self, difficulty: Difficulty) -> None:
        previous = self.session
        generation = previous.generation + 1 if previous is not None else 1
        self._cancel_all()
        config = difficulty.config
        session = MemorySession(
            difficulty=difficulty,
            config=config,
            time_remaining=config.time_limit,
            generation=generation,
        )
        if self.session_entity is None:
            self.session_entity = self.world.create_entity(session, TileDeck(grid_size=config.grid_size))
        else:
            self.world.add_component(self.session_entity, session)
        self.start_new_round()

    def reset(self) -> None:
        session = self.session
        if session is not None:
            self.start_game(session.difficulty)

    def start_new_round(self) -> None:
        session = self.session
        if session is None or session.phase is MemoryPhase.GAME_OVER:
            return
        self._cancel_pending()
        self.timers.cancel(self._round_token)
        self._round_token = None
        session.generation += 1
        session.round_number += 1
        session.matches_found = 0
        session.required_matches = session.config.required_matches
        target = self.generate_grid()
        self.event_bus.emit(
            EVENT_ROUND_STARTED,
            round_number=session.round_number,
            level=session.level,
            target_color=target,
            required_matches=session.required_matches,
        )
        self.reveal_colors_temporarily()

    def generate_grid(self) -> Optional[RGB]:
        """Lay out a fresh shuffled tile set and return the round's target color.

        The target color appears exactly ``required_matches`` times by placement.
        Filler colors are drawn independently, so a filler can land on the
        target color by chance.
        """
        session = self.session
        if session is None:
            return None
        size = session.config.grid_size
        total = size * size
        required = max(0, min(session.required_matches, total))
        target = self._random_color()
        colors = [target] * required + [self._random_color() for _ in range(total - required)]
        self._rng.shuffle(colors)

        deck = self.deck
        if deck is not None:
            for tile_entity in deck.tile_entities:
                if self.world.entity_exists(tile_entity):
                    self.world.delete_entity(tile_entity, immediate=True)
        tile_entities = [
            self.world.create_entity(MemoryTile(color=color, is_target=color == target))
            for color in colors
        ]
        self.world.add_component(self.session_entity, TileDeck(grid_size=size, tile_entities=tile_entities))
        session.target_color = target
        return target

    def reveal_colors_temporarily(self) -> None:
        session = self.session
        if session is None:
            return
        session.phase = MemoryPhase.REVEALING
        session.reveal_progress = 0.0
        for tile in self._tiles():
            tile.is_revealed = True
            tile.is_hidden = False
        self.timers.cancel(self._reveal_token)
        self._reveal_token = self.timers.schedule(
            ProgressTimer(
                duration=session.config.reveal_time,
                on_progress=self.on_reveal_progress,
                on_complete=self.on_reveal_complete,
            )
        )

    def on_reveal_progress(self, progress: float) -> None:
        session = self.session
        if session is None or session.phase is not MemoryPhase.REVEALING:
            return
        session.reveal_progress = progress
        self.event_bus.emit(EVENT_REVEAL_PROGRESS, progress=progress)

    def on_reveal_complete(self) -> None:
        session = self.session
        self._reveal_token = None
        if session is None or session.phase is not MemoryPhase.REVEALING:
            return
        session.reveal_progress = 1.0
        for tile in self._tiles():
            tile.is_revealed = False
            tile.is_hidden = True
        session.phase = MemoryPhase.GUESSING
        self.event_bus.emit(EVENT_REVEAL_COMPLETE, round_number=session.round_number)
        # Runs once per session, or once per level in progressive play.
        if not self.timers.is_active(self._countdown_token):
            self._countdown_token = self.timers.schedule(
                CountdownTimer(
                    seconds=session.time_remaining,
                    on_second=self.on_countdown_tick,
                    on_expired=self.end_game,
                )
            )

    def on_countdown_tick(self, remaining: int) -> None:
        session = self.session
        if session is None or session.phase is MemoryPhase.GAME_OVER:
            return
        session.time_remaining = remaining
        self.event_bus.emit(EVENT_TIME_CHANGED, time_remaining=remaining)

    # ------------------------------------------------------------------
    # Taps
    # ------------------------------------------------------------------

    def tile_tapped(self, tile_entity: int) -> bool:
        session = self.session
        deck = self.deck
        if session is None or deck is None or session.phase is not MemoryPhase.GUESSING:
            return False
        if tile_entity not in deck.tile_entities:
            return False
        tile = self._tile(tile_entity)
        if tile is None or tile.is_revealed:
            return False
        if any(pending.tile_entity == tile_entity for pending in self._pending):
            return False
        tile.is_revealed = True
        tile.is_hidden = False
        self.event_bus.emit(EVENT_TILE_FLIPPED, tile_entity=tile_entity, revealed=True)
        self._schedule_resolution(tile_entity, session.generation, TapOutcome.SCORE, TAP_RESOLVE_DELAY)
        return True

    def _schedule_resolution(self, tile_entity: int, generation: int, outcome: TapOutcome, delay: float) -> None:
        pending = PendingTapResolution(
            tile_entity=tile_entity,
            generation=generation,
            resolve_at=self.timers.now + delay,
            outcome=outcome,
        )
        self._pending[pending] = self.timers.delay(pending.resolve_at - self.timers.now, self._resolve, pending)

    def _resolve(self, pending: PendingTapResolution) -> None:
        self._pending.pop(pending, None)
        session = self.session
        if session is None or pending.generation != session.generation:
            return
        if session.phase is not MemoryPhase.GUESSING:
            return
        tile = self._tile(pending.tile_entity)
        if tile is None:
            return
        if pending.outcome is TapOutcome.FLIP_BACK:
            tile.is_revealed = False
            tile.is_hidden = True
            self.event_bus.emit(EVENT_TILE_FLIPPED, tile_entity=pending.tile_entity, revealed=False)
            return
        if tile.color == session.target_color:
            session.matches_found += 1
            session.score = match_award(session.score, session.config.grid_size)
            self.event_bus.emit(
                EVENT_TILE_MATCHED,
                tile_entity=pending.tile_entity,
                matches_found=session.matches_found,
                required_matches=session.required_matches,
                score=session.score,
            )
            if session.matches_found >= session.required_matches:
                self._complete_round(session)
            return
        session.score = mismatch_penalty(session.score)
        self.event_bus.emit(EVENT_TILE_MISMATCHED, tile_entity=pending.tile_entity, score=session.score)
        self._schedule_resolution(
            pending.tile_entity,
            session.generation,
            TapOutcome.FLIP_BACK,
            MISMATCH_FLIP_BACK_DELAY,
        )

    def _complete_round(self, session: MemorySession) -> None:
        session.phase = MemoryPhase.ROUND_COMPLETE
        self._cancel_pending()
        self.event_bus.emit(EVENT_ROUND_COMPLETE, round_number=session.round_number)
        self._round_token = self.timers.delay(ROUND_ADVANCE_DELAY, self._advance_round, session.generation)

    def _advance_round(self, generation: int) -> None:
        self._round_token = None
        session = self.session
        if session is None or session.generation != generation:
            return
        if session.phase is not MemoryPhase.ROUND_COMPLETE:
            return
        if session.difficulty.progressive:
            self.level_up()
        else:
            self.start_new_round()

    # ------------------------------------------------------------------
    # Progressive mode
    # ------------------------------------------------------------------

    def level_up(self) -> None:
        session = self.session
        if session is None or not session.difficulty.progressive:
            return
        if session.phase is MemoryPhase.GAME_OVER:
            return
        self._cancel_all()
        session.level += 1
        session.config = level_config(session.level)
        session.score = level_bonus(session.score)
        session.phase = MemoryPhase.LEVEL_TRANSITION
        session.generation += 1
        self.event_bus.emit(EVENT_LEVEL_UP, level=session.level, config=session.config, score=session.score)
        self._round_token = self.timers.delay(LEVEL_TRANSITION_DELAY, self._finish_level_transition, session.generation)

    def _finish_level_transition(self, generation: int) -> None:
        self._round_token = None
        session = self.session
        if session is None or session.generation != generation:
            return
        if session.phase is not MemoryPhase.LEVEL_TRANSITION:
            return
        session.time_remaining = session.config.time_limit
        self.event_bus.emit(EVENT_TIME_CHANGED, time_remaining=session.time_remaining)
        self.start_new_round()

    # ------------------------------------------------------------------
    # Game over & records
    # ------------------------------------------------------------------

    def end_game(self) -> None:
        session = self.session
        if session is None or session.phase in (MemoryPhase.IDLE, MemoryPhase.GAME_OVER):
            return
        self._cancel_all()
        session.generation += 1
        session.phase = MemoryPhase.GAME_OVER
        mode_key = session.difficulty.key
        records = self._load_records(mode_key)
        session.awaiting_name = qualifies_for_leaderboard(records, session.score, self._leaderboard_size)
        if session.awaiting_name:
            self.event_bus.emit(EVENT_NEW_HIGH_SCORE, mode_key=mode_key, score=session.score)
        else:
            self.event_bus.emit(EVENT_TIME_UP, mode_key=mode_key, score=session.score)

    def submit_high_score(self, player_name: str) -> bool:
        session = self.session
        if session is None or not session.awaiting_name:
            return False
        session.awaiting_name = False
        self.event_bus.emit(
            EVENT_SCORE_SUBMITTED,
            mode_key=session.difficulty.key,
            player_name=player_name.strip() or DEFAULT_PLAYER_NAME,
            score=session.score,
            time=None,
        )
        return True

    def discard(self) -> None:
        self._cancel_all()
        deck = self.deck
        if deck is not None:
            for tile_entity in deck.tile_entities:
                if self.world.entity_exists(tile_entity):
                    self.world.delete_entity(tile_entity, immediate=True)
        if self.session_entity is not None:
            self.world.delete_entity(self.session_entity, immediate=True)
            self.session_entity = None

    def _load_records(self, mode_key: str) -> List[LeaderboardEntry]:
        try:
            return self.store.load_records(mode_key)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not load records for %s: %s", mode_key, exc)
            self.event_bus.emit(EVENT_PERSISTENCE_FAILED, operation="load_records", key=mode_key, error=exc)
            return []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def session(self) -> MemorySession | None:
        if self.session_entity is None:
            return None
        try:
            return self.world.component_for_entity(self.session_entity, MemorySession)
        except KeyError:
            return None

    @property
    def deck(self) -> TileDeck | None:
        if self.session_entity is None:
            return None
        try:
            return self.world.component_for_entity(self.session_entity, TileDeck)
        except KeyError:
            return None

    @property
    def pending_resolutions(self) -> List[PendingTapResolution]:
        return list(self._pending)

    def snapshot(self) -> MemorySnapshot | None:
        session = self.session
        deck = self.deck
        if session is None or deck is None:
            return None
        views = []
        for tile_entity in deck.tile_entities:
            tile = self._tile(tile_entity)
            if tile is None:
                continue
            views.append(TileView(tile_id=tile_entity, color=tile.color, is_revealed=tile.is_revealed, is_hidden=tile.is_hidden))
        return MemorySnapshot(
            tiles=tuple(views),
            grid_size=deck.grid_size,
            target_color=session.target_color,
            phase=session.phase,
            score=session.score,
            time_remaining=session.time_remaining,
            reveal_progress=session.reveal_progress,
            round_number=session.round_number,
            level=session.level,
            matches_found=session.matches_found,
            required_matches=session.required_matches,
            new_high_score=session.awaiting_name,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _random_color(self) -> RGB:
        return (self._rng.randint(0, 255), self._rng.randint(0, 255), self._rng.randint(0, 255))

    def _tile(self, tile_entity: int) -> MemoryTile | None:
        try:
            return self.world.component_for_entity(tile_entity, MemoryTile)
        except KeyError:
            return None

    def _tiles(self) -> List[MemoryTile]:
        deck = self.deck
        if deck is None:
            return []
        tiles = [self._tile(entity) for entity in deck.tile_entities]
        return [tile for tile in tiles if tile is not None]

    def _cancel_pending(self) -> None:
        self.timers.cancel_all(self._pending.values())
        self._pending.clear()

    def _cancel_all(self) -> None:
        self._cancel_pending()
        self.timers.cancel_all((self._reveal_token, self._countdown_token, self._round_token))
        self._reveal_token = None
        self._countdown_token = None
        self._round_token = None

    def _owns_input(self) -> bool:
        if self.session is None:
            return False
        state = get_game_state(self.world)
        return state is None or state.mode == AppMode.MEMORY

    # Event handlers -----------------------------------------------------

    def _on_start_request(self, sender, **payload) -> None:
        if payload.get("game") is not GameKind.MEMORY:
            return
        difficulty = payload.get("mode")
        if not isinstance(difficulty, Difficulty):
            return
        set_app_mode(self.world, self.event_bus, AppMode.MEMORY)
        self.start_game(difficulty)

    def _on_reset_request(self, sender, **payload) -> None:
        if self._owns_input():
            self.reset()

    def _on_end_request(self, sender, **payload) -> None:
        if self._owns_input():
            self.end_game()

    def _on_tile_tap(self, sender, **payload) -> None:
        tile_entity = payload.get("tile_entity")
        if tile_entity is None or not self._owns_input():
            return
        try:
            tile_entity = int(tile_entity)
        except (TypeError, ValueError):
            return
        self.tile_tapped(tile_entity)

    def _on_score_submit(self, sender, **payload) -> None:
        if self._owns_input():
            self.submit_high_score(str(payload.get("player_name") or ""))
