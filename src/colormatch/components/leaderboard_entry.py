from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    player_name: str
    score: int
    mode: str
    timestamp: float
    time: Optional[int] = None

    def sort_key(self) -> tuple:
        # Higher score first, then faster time, then most recent.
        time_rank = self.time if self.time is not None else float("inf")
        return (-self.score, time_rank, -self.timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> LeaderboardEntry:
        raw_time = payload.get("time")
        return cls(
            player_name=str(payload["player_name"]),
            score=int(payload["score"]),
            mode=str(payload.get("mode", "")),
            timestamp=float(payload.get("timestamp", 0.0)),
            time=int(raw_time) if raw_time is not None else None,
        )
