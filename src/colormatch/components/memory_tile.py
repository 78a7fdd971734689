from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass(slots=True)
class MemoryTile:
    """Per-tile state; the owning entity id doubles as the tile's identity.

    ``is_target`` is bookkeeping only and is never shown to the player.
    """
    color: Tuple[int, int, int]
    is_target: bool = False
    is_revealed: bool = False
    is_hidden: bool = False


@dataclass(slots=True)
class TileDeck:
    """Display order of the current round's tile entities."""
    grid_size: int
    tile_entities: List[int] = field(default_factory=list)
