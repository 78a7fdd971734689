"""Read-only views handed to the host for rendering."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from colormatch.components.cell_color import CellColor
from colormatch.components.grid_session import GridPhase
from colormatch.components.memory_session import MemoryPhase

RGB = Tuple[int, int, int]


@dataclass(frozen=True, slots=True)
class GridSnapshot:
    cells: Tuple[Tuple[CellColor, ...], ...]
    phase: GridPhase
    target: CellColor
    target_count: Optional[int]
    moves: int
    moves_remaining: Optional[int]
    score: int
    elapsed: int
    hint: Optional[Tuple[int, int]]
    out_of_moves: bool

    @property
    def won(self) -> bool:
        return self.phase is GridPhase.WON


@dataclass(frozen=True, slots=True)
class TileView:
    tile_id: int
    color: RGB
    is_revealed: bool
    is_hidden: bool


@dataclass(frozen=True, slots=True)
class MemorySnapshot:
    tiles: Tuple[TileView, ...]
    grid_size: int
    target_color: Optional[RGB]
    phase: MemoryPhase
    score: int
    time_remaining: int
    reveal_progress: float
    round_number: int
    level: int
    matches_found: int
    required_matches: int
    new_high_score: bool

    @property
    def game_over(self) -> bool:
        return self.phase is MemoryPhase.GAME_OVER

    @property
    def revealing(self) -> bool:
        return self.phase is MemoryPhase.REVEALING
