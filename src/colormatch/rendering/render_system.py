"""Draws menu, grid, and memory screens from engine snapshots."""
from __future__ import annotations

import arcade
from esper import World

from colormatch.components.cell_color import CellColor
from colormatch.components.game_state import AppMode
from colormatch.components.snapshots import GridSnapshot, MemorySnapshot
from colormatch.systems.grid_match_system import GridMatchSystem
from colormatch.systems.memory_match_system import MemoryMatchSystem
from colormatch.ui.layout import cell_origin, compute_board_geometry
from colormatch.utils.game_state import get_game_state

MENU_LINES = (
    "Color Match",
    "",
    "Grid puzzle:  1 Easy   2 Medium   3 Hard",
    "Isolated puzzle:  4 Easy   5 Medium   6 Hard",
    "Memory:  E Easy   M Medium   H Hard   L Level Up",
    "",
    "In game:  R reset   T hint   X end   ESC menu",
)
HIDDEN_TILE_COLOR = (205, 210, 225)
TEXT_COLOR = arcade.color.WHITE


class RenderSystem:
    def __init__(self, world: World, window, grid_system: GridMatchSystem, memory_system: MemoryMatchSystem) -> None:
        self.world = world
        self.window = window
        self.grid_system = grid_system
        self.memory_system = memory_system

    def process(self, name_buffer: str = "", entering_name: bool = False) -> None:
        state = get_game_state(self.world)
        mode = state.mode if state else AppMode.MENU
        if mode == AppMode.GRID:
            snapshot = self.grid_system.snapshot()
            if snapshot is not None:
                self._draw_grid(snapshot, name_buffer if entering_name else None)
                return
        if mode == AppMode.MEMORY:
            snapshot = self.memory_system.snapshot()
            if snapshot is not None:
                self._draw_memory(snapshot, name_buffer)
                return
        self._draw_menu()

    def _draw_menu(self) -> None:
        top = self.window.height * 0.75
        for index, line in enumerate(MENU_LINES):
            arcade.draw_text(
                line,
                self.window.width / 2,
                top - index * 36,
                TEXT_COLOR,
                28 if index == 0 else 16,
                anchor_x="center",
                anchor_y="center",
                bold=index == 0,
            )

    def _draw_grid(self, snapshot: GridSnapshot, name_buffer: str | None) -> None:
        size = len(snapshot.cells)
        geometry = compute_board_geometry(self.window.width, self.window.height, size)
        tile_size = geometry[0]
        for row in range(size):
            for col in range(size):
                left, bottom = cell_origin(row, col, size, geometry)
                cell: CellColor = snapshot.cells[row][col]
                arcade.draw_lbwh_rectangle_filled(left, bottom, tile_size, tile_size, cell.rgb)
                if snapshot.hint == (row, col):
                    arcade.draw_lbwh_rectangle_outline(left, bottom, tile_size, tile_size, arcade.color.WHITE, border_width=4)
        moves = f"Moves: {snapshot.moves}"
        if snapshot.moves_remaining is not None:
            moves += f" ({snapshot.moves_remaining} left)"
        status = f"{moves}   Score: {snapshot.score}   Time: {snapshot.elapsed}s"
        if snapshot.target_count is not None:
            status += f"   Target: {snapshot.target_count} x {snapshot.target.value}"
        self._draw_hud(status)
        if snapshot.won:
            self._draw_banner("Solved!" if name_buffer is None else f"Solved! Name: {name_buffer}_")
        elif snapshot.out_of_moves:
            self._draw_banner("Out of moves")

    def _draw_memory(self, snapshot: MemorySnapshot, name_buffer: str) -> None:
        size = snapshot.grid_size
        geometry = compute_board_geometry(self.window.width, self.window.height, size)
        tile_size = geometry[0]
        for index, tile in enumerate(snapshot.tiles):
            row, col = divmod(index, size)
            left, bottom = cell_origin(row, col, size, geometry)
            color = tile.color if tile.is_revealed else HIDDEN_TILE_COLOR
            arcade.draw_lbwh_rectangle_filled(left, bottom, tile_size, tile_size, color)
        level = f"   Level {snapshot.level}" if snapshot.level > 1 else ""
        status = (
            f"Score: {snapshot.score}   Time: {snapshot.time_remaining}s   "
            f"Round {snapshot.round_number}{level}   {snapshot.matches_found}/{snapshot.required_matches}"
        )
        self._draw_hud(status)
        if snapshot.target_color is not None:
            arcade.draw_lbwh_rectangle_filled(20, self.window.height - 100, 60, 60, snapshot.target_color)
        if snapshot.revealing:
            width = (self.window.width - 120) * snapshot.reveal_progress
            arcade.draw_lbwh_rectangle_filled(100, self.window.height - 100, width, 10, arcade.color.GREEN)
        if snapshot.game_over:
            if snapshot.new_high_score:
                self._draw_banner(f"New high score! Name: {name_buffer}_")
            else:
                self._draw_banner("Time's up!")

    def _draw_hud(self, text: str) -> None:
        arcade.draw_text(text, self.window.width / 2, self.window.height - 30, TEXT_COLOR, 16, anchor_x="center", anchor_y="center")

    def _draw_banner(self, text: str) -> None:
        arcade.draw_text(
            text,
            self.window.width / 2,
            self.window.height / 2,
            arcade.color.YELLOW,
            32,
            anchor_x="center",
            anchor_y="center",
            bold=True,
        )
