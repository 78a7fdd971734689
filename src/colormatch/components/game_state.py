"""Game state resource describing which screen the host shows."""
from dataclasses import dataclass
from enum import Enum, auto


class AppMode(Enum):
    """High-level modes that decide which engine receives input."""
    MENU = auto()
    GRID = auto()
    MEMORY = auto()


@dataclass
class GameState:
    """Singleton component storing the currently active app mode."""
    mode: AppMode = AppMode.MENU
