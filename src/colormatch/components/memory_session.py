from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple

from colormatch.components.game_mode import Difficulty, ModeConfig

RGB = Tuple[int, int, int]


class MemoryPhase(Enum):
    IDLE = auto()
    REVEALING = auto()
    GUESSING = auto()
    ROUND_COMPLETE = auto()
    LEVEL_TRANSITION = auto()
    GAME_OVER = auto()


@dataclass(slots=True)
class MemorySession:
    """Mutable session state of the memory game.

    ``generation`` changes whenever a round, level, or game boundary is crossed;
    delayed work compares it to decide whether it is still relevant.
    """
    difficulty: Difficulty
    config: ModeConfig
    phase: MemoryPhase = MemoryPhase.IDLE
    score: int = 0
    round_number: int = 0
    level: int = 1
    matches_found: int = 0
    required_matches: int = 0
    time_remaining: int = 0
    reveal_progress: float = 0.0
    target_color: Optional[RGB] = None
    generation: int = 0
    awaiting_name: bool = False
