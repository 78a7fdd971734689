"""Mode and level configuration for both game variants."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict

from colormatch.constants import (
    GRID_SIZES,
    LEVEL_CAP_GRID_SIZE,
    LEVEL_CAP_REQUIRED_MATCHES,
    LEVEL_MIN_REVEAL_TIME,
    LEVEL_MIN_TIME_LIMIT,
    MAX_MOVES_BY_SIZE,
    TARGET_RATIO_BY_SIZE,
)


class GameKind(Enum):
    GRID = auto()
    MEMORY = auto()


class GridVariant(Enum):
    """Win policy of the grid puzzle."""
    UNIFORM = auto()
    EXACT_ISOLATED = auto()


_SIZE_TITLES = {3: "Easy", 4: "Medium", 5: "Hard"}


@dataclass(frozen=True, slots=True)
class GridMode:
    size: int
    variant: GridVariant = GridVariant.UNIFORM

    def __post_init__(self) -> None:
        if self.size not in GRID_SIZES:
            raise ValueError(f"unsupported grid size: {self.size}")

    @property
    def title(self) -> str:
        return _SIZE_TITLES[self.size]

    @property
    def key(self) -> str:
        prefix = "grid" if self.variant is GridVariant.UNIFORM else "isolated"
        return f"{prefix}_{self.title}"

    @property
    def target_count(self) -> int:
        return math.floor(self.size * self.size * TARGET_RATIO_BY_SIZE[self.size])

    @property
    def max_moves(self) -> int | None:
        if self.variant is GridVariant.UNIFORM:
            return None
        return MAX_MOVES_BY_SIZE[self.size]


@dataclass(frozen=True, slots=True)
class ModeConfig:
    grid_size: int
    time_limit: int
    reveal_time: float
    required_matches: int


class Difficulty(Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    LEVEL_UP = "Level Up"

    @property
    def key(self) -> str:
        return f"memory_{self.value}"

    @property
    def progressive(self) -> bool:
        return self is Difficulty.LEVEL_UP

    @property
    def config(self) -> ModeConfig:
        if self is Difficulty.LEVEL_UP:
            return level_config(1)
        return MODE_PRESETS[self]


MODE_PRESETS: Dict[Difficulty, ModeConfig] = {
    Difficulty.EASY: ModeConfig(grid_size=3, time_limit=30, reveal_time=2.0, required_matches=1),
    Difficulty.MEDIUM: ModeConfig(grid_size=4, time_limit=45, reveal_time=1.5, required_matches=2),
    Difficulty.HARD: ModeConfig(grid_size=5, time_limit=60, reveal_time=1.0, required_matches=3),
}

LEVEL_TABLE: Dict[int, ModeConfig] = {
    1: ModeConfig(grid_size=3, time_limit=30, reveal_time=2.0, required_matches=1),
    2: ModeConfig(grid_size=3, time_limit=25, reveal_time=1.8, required_matches=1),
    3: ModeConfig(grid_size=4, time_limit=25, reveal_time=1.6, required_matches=2),
    4: ModeConfig(grid_size=4, time_limit=20, reveal_time=1.4, required_matches=2),
    5: ModeConfig(grid_size=5, time_limit=20, reveal_time=1.2, required_matches=3),
    6: ModeConfig(grid_size=5, time_limit=15, reveal_time=1.0, required_matches=3),
}


def level_config(level: int) -> ModeConfig:
    """Return the configuration for a progressive level (1-based)."""

    if level < 1:
        level = 1
    explicit = LEVEL_TABLE.get(level)
    if explicit is not None:
        return explicit
    time_limit = max(LEVEL_MIN_TIME_LIMIT, 15 - level)
    reveal_time = max(LEVEL_MIN_REVEAL_TIME, round(1.0 - (level - 6) * 0.1, 2))
    return ModeConfig(
        grid_size=LEVEL_CAP_GRID_SIZE,
        time_limit=time_limit,
        reveal_time=reveal_time,
        required_matches=LEVEL_CAP_REQUIRED_MATCHES,
    )
