from dataclasses import dataclass
from enum import Enum, auto


class TapOutcome(Enum):
    SCORE = auto()
    FLIP_BACK = auto()


@dataclass(frozen=True, slots=True)
class PendingTapResolution:
    """Deferred second phase of a tile tap.

    Discarded when ``generation`` no longer matches the session at resolve time.
    """
    tile_entity: int
    generation: int
    resolve_at: float
    outcome: TapOutcome = TapOutcome.SCORE
