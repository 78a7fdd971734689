from __future__ import annotations

from enum import Enum
from typing import Tuple


class CellColor(Enum):
    """Closed set of grid colors. NEUTRAL marks an unset cell and is never playable."""

    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"
    NEUTRAL = "neutral"

    @property
    def is_playable(self) -> bool:
        return self is not CellColor.NEUTRAL

    def next(self) -> CellColor:
        if self is CellColor.NEUTRAL:
            return CellColor.RED
        index = PLAYABLE_COLORS.index(self)
        return PLAYABLE_COLORS[(index + 1) % len(PLAYABLE_COLORS)]

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return CELL_RGB[self]


PLAYABLE_COLORS: Tuple[CellColor, ...] = (
    CellColor.RED,
    CellColor.GREEN,
    CellColor.BLUE,
    CellColor.YELLOW,
)

CELL_RGB = {
    CellColor.RED: (180, 60, 60),
    CellColor.GREEN: (80, 170, 80),
    CellColor.BLUE: (70, 90, 180),
    CellColor.YELLOW: (200, 190, 80),
    CellColor.NEUTRAL: (150, 150, 160),
}
