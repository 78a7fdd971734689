"""Score rules for both variants, kept free of engine state."""
from __future__ import annotations

from colormatch.components.game_mode import GridVariant
from colormatch.constants import (
    GRID_BASE_SCORE,
    GRID_SCORE_FLOOR,
    ISOLATED_MOVE_PENALTY,
    LEVEL_UP_BONUS,
    MATCH_POINTS_PER_CELL,
    MEMORY_SCORE_FLOOR,
    MISMATCH_PENALTY,
    UNIFORM_MOVE_PENALTY,
)


def move_penalty_for(variant: GridVariant) -> int:
    if variant is GridVariant.EXACT_ISOLATED:
        return ISOLATED_MOVE_PENALTY
    return UNIFORM_MOVE_PENALTY


def grid_score(moves: int, penalty: int = UNIFORM_MOVE_PENALTY) -> int:
    """Score after ``moves`` moves: base minus penalty per move, never below the floor."""

    return max(GRID_BASE_SCORE - max(0, moves) * penalty, GRID_SCORE_FLOOR)


def match_award(score: int, grid_size: int) -> int:
    return score + MATCH_POINTS_PER_CELL * grid_size


def mismatch_penalty(score: int) -> int:
    return max(MEMORY_SCORE_FLOOR, score - MISMATCH_PENALTY)


def level_bonus(score: int) -> int:
    return score + LEVEL_UP_BONUS
