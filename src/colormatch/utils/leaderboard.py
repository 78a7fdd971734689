from __future__ import annotations

from typing import Iterable, List, Tuple

from colormatch.components.leaderboard_entry import LeaderboardEntry
from colormatch.constants import LEADERBOARD_SIZE


def sort_entries(entries: Iterable[LeaderboardEntry]) -> List[LeaderboardEntry]:
    return sorted(entries, key=LeaderboardEntry.sort_key)


def insert_entry(
    entries: Iterable[LeaderboardEntry],
    entry: LeaderboardEntry,
    limit: int = LEADERBOARD_SIZE,
) -> Tuple[List[LeaderboardEntry], int | None]:
    """Insert ``entry`` and cap the list; returns (entries, 1-based rank or None if cut)."""

    ordered = sort_entries([*entries, entry])
    kept = ordered[: max(0, limit)]
    for index, candidate in enumerate(kept):
        if candidate is entry:
            return kept, index + 1
    return kept, None


def qualifies_for_leaderboard(
    entries: Iterable[LeaderboardEntry],
    score: int,
    limit: int = LEADERBOARD_SIZE,
) -> bool:
    """True when fewer than ``limit`` records exist or ``score`` beats the last kept one."""

    ordered = sort_entries(entries)
    if len(ordered) < limit:
        return True
    return score > ordered[limit - 1].score
