from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple

from colormatch.components.cell_color import CellColor
from colormatch.components.game_mode import GridMode
from colormatch.constants import GRID_BASE_SCORE


class GridPhase(Enum):
    IDLE = auto()
    ACTIVE = auto()
    WON = auto()


@dataclass(slots=True)
class GridSession:
    """Mutable round state of the grid puzzle."""
    mode: GridMode
    phase: GridPhase = GridPhase.IDLE
    target: CellColor = CellColor.NEUTRAL
    target_count: Optional[int] = None
    max_moves: Optional[int] = None
    moves: int = 0
    moves_remaining: Optional[int] = None
    score: int = GRID_BASE_SCORE
    elapsed: int = 0
    hint: Optional[Tuple[int, int]] = None
    out_of_moves: bool = False
