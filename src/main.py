"""Entry point for the Color Match games.

Sets up ECS world, event bus, systems, and Arcade window.
"""
import os

from arcade import Window, color, key, run, set_background_color

from colormatch.components.game_mode import Difficulty, GameKind, GridMode, GridVariant
from colormatch.components.game_state import AppMode
from colormatch.constants import WINDOW_HEIGHT, WINDOW_WIDTH
from colormatch.events.bus import (
    EVENT_GAME_END_REQUEST,
    EVENT_GAME_RESET_REQUEST,
    EVENT_GAME_START_REQUEST,
    EVENT_GRID_WON,
    EVENT_HINT_REQUEST,
    EVENT_MOUSE_PRESS,
    EVENT_NEW_HIGH_SCORE,
    EVENT_SCORE_SUBMIT_REQUEST,
    EVENT_TICK,
    EVENT_TILE_CLICK,
    EVENT_TILE_TAP,
    EventBus,
)
from colormatch.persistence.record_store import JsonRecordStore
from colormatch.rendering.render_system import RenderSystem
from colormatch.systems.grid_match_system import GridMatchSystem
from colormatch.systems.leaderboard_system import LeaderboardSystem
from colormatch.systems.memory_match_system import MemoryMatchSystem
from colormatch.systems.remote_sync_system import RemoteSyncSystem, ensure_user_id, log_transport
from colormatch.systems.timer_system import TimerSystem
from colormatch.ui.layout import cell_at_point, compute_board_geometry
from colormatch.utils.game_state import get_game_state, set_app_mode
from colormatch.utils.logging_config import setup_logging
from colormatch.world import create_world

GRID_KEYS = {
    key.KEY_1: GridMode(3, GridVariant.UNIFORM),
    key.KEY_2: GridMode(4, GridVariant.UNIFORM),
    key.KEY_3: GridMode(5, GridVariant.UNIFORM),
    key.KEY_4: GridMode(3, GridVariant.EXACT_ISOLATED),
    key.KEY_5: GridMode(4, GridVariant.EXACT_ISOLATED),
    key.KEY_6: GridMode(5, GridVariant.EXACT_ISOLATED),
}
MEMORY_KEYS = {
    key.E: Difficulty.EASY,
    key.M: Difficulty.MEDIUM,
    key.H: Difficulty.HARD,
    key.L: Difficulty.LEVEL_UP,
}
MAX_NAME_LENGTH = 16


class ColorMatchWindow(Window):
    def __init__(self):
        super().__init__(WINDOW_WIDTH, WINDOW_HEIGHT, "Color Match")
        self.set_update_rate(1/60)
        self.event_bus = EventBus()
        self.world = create_world(self.event_bus, initial_mode=AppMode.MENU)
        self.store = JsonRecordStore()

        # Scheduling
        self.timer_system = TimerSystem(self.event_bus)

        # Game engines
        self.grid_system = GridMatchSystem(self.world, self.event_bus, self.timer_system)
        self.memory_system = MemoryMatchSystem(self.world, self.event_bus, self.timer_system, self.store)

        # Records
        self.leaderboard_system = LeaderboardSystem(self.world, self.event_bus, self.store)
        self.remote_sync_system = RemoteSyncSystem(
            self.event_bus, self.timer_system, log_transport, user_id=ensure_user_id(self.store)
        )

        # Interface
        self.render_system = RenderSystem(self.world, self, self.grid_system, self.memory_system)
        self.name_buffer = ""
        self.entering_name = False
        self.event_bus.subscribe(EVENT_NEW_HIGH_SCORE, self._on_name_wanted)
        self.event_bus.subscribe(EVENT_GRID_WON, self._on_name_wanted)
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self._on_mouse_press)

        set_background_color(color.BLACK)

    def on_draw(self):
        self.clear()
        self.render_system.process(self.name_buffer, self.entering_name)

    def on_update(self, delta_time: float):
        self.event_bus.emit(EVENT_TICK, dt=delta_time)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        self.event_bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=button)

    def on_text(self, text: str):
        if not self.entering_name:
            return
        printable = "".join(ch for ch in text if ch.isprintable())
        self.name_buffer = (self.name_buffer + printable)[:MAX_NAME_LENGTH]

    def on_key_press(self, symbol: int, modifiers: int):
        if self.entering_name:
            self._handle_name_key(symbol)
            return
        state = get_game_state(self.world)
        mode = state.mode if state else AppMode.MENU
        if mode == AppMode.MENU:
            if symbol in GRID_KEYS:
                self.event_bus.emit(EVENT_GAME_START_REQUEST, game=GameKind.GRID, mode=GRID_KEYS[symbol])
            elif symbol in MEMORY_KEYS:
                self.event_bus.emit(EVENT_GAME_START_REQUEST, game=GameKind.MEMORY, mode=MEMORY_KEYS[symbol])
            return
        if symbol == key.ESCAPE:
            self._back_to_menu()
        elif symbol == key.R:
            self.event_bus.emit(EVENT_GAME_RESET_REQUEST)
        elif symbol == key.T:
            self.event_bus.emit(EVENT_HINT_REQUEST)
        elif symbol == key.X:
            self.event_bus.emit(EVENT_GAME_END_REQUEST)

    # Event handlers -----------------------------------------------------

    def _on_name_wanted(self, sender, **payload):
        self.entering_name = True
        self.name_buffer = ""

    def _on_mouse_press(self, sender, **payload):
        state = get_game_state(self.world)
        if state is None:
            return
        x, y = payload.get("x"), payload.get("y")
        if state.mode == AppMode.GRID:
            board = self.grid_system.board
            if board is None:
                return
            cell = cell_at_point(x, y, board.size, compute_board_geometry(self.width, self.height, board.size))
            if cell is not None:
                self.event_bus.emit(EVENT_TILE_CLICK, row=cell[0], col=cell[1])
        elif state.mode == AppMode.MEMORY:
            deck = self.memory_system.deck
            if deck is None:
                return
            cell = cell_at_point(x, y, deck.grid_size, compute_board_geometry(self.width, self.height, deck.grid_size))
            if cell is None:
                return
            index = cell[0] * deck.grid_size + cell[1]
            if index < len(deck.tile_entities):
                self.event_bus.emit(EVENT_TILE_TAP, tile_entity=deck.tile_entities[index])

    # Internals ----------------------------------------------------------

    def _handle_name_key(self, symbol: int):
        if symbol == key.BACKSPACE:
            self.name_buffer = self.name_buffer[:-1]
        elif symbol in (key.ENTER, key.RETURN):
            self.event_bus.emit(EVENT_SCORE_SUBMIT_REQUEST, player_name=self.name_buffer)
            self.entering_name = False
            self.name_buffer = ""
        elif symbol == key.ESCAPE:
            self.entering_name = False
            self.name_buffer = ""

    def _back_to_menu(self):
        self.grid_system.discard()
        self.memory_system.discard()
        set_app_mode(self.world, self.event_bus, AppMode.MENU)


def main():
    setup_logging(os.environ.get("COLORMATCH_LOG_LEVEL", "INFO"))
    ColorMatchWindow()
    run()


if __name__ == "__main__":
    main()
