"""Move and win rules for the grid puzzle, operating on a GridBoard."""
from __future__ import annotations

from typing import List, Optional, Tuple

from colormatch.components.cell_color import CellColor
from colormatch.components.grid_board import GridBoard

Position = Tuple[int, int]


def apply_flood_move(board: GridBoard, row: int, col: int) -> List[Position]:
    """Advance the tapped cell and its in-bounds orthogonal neighbors by one color step.

    Returns the touched positions (3 at a corner, 4 on an edge, 5 inside), or an
    empty list when the tapped cell itself is off the board.
    """
    if not board.in_bounds(row, col):
        return []
    touched = [(row, col), *board.neighbors(row, col)]
    for r, c in touched:
        board.cells[r][c] = board.cells[r][c].next()
    return touched


def is_uniform(board: GridBoard) -> bool:
    first = board.color_at(0, 0)
    if not first.is_playable:
        return False
    return all(cell == first for row in board.cells for cell in row)


def target_neighbor_count(board: GridBoard, row: int, col: int, target: CellColor) -> int:
    return sum(1 for r, c in board.neighbors(row, col) if board.cells[r][c] == target)


def is_isolated(board: GridBoard, target: CellColor) -> bool:
    for r, c in board.positions():
        if board.cells[r][c] != target:
            continue
        if target_neighbor_count(board, r, c, target):
            return False
    return True


def is_exact_isolated(board: GridBoard, target: CellColor, target_count: int) -> bool:
    """Exactly ``target_count`` target cells, none of them orthogonally adjacent."""

    if not target.is_playable:
        return False
    if board.count(target) != target_count:
        return False
    return is_isolated(board, target)


def uniform_hint_candidates(board: GridBoard, fallback: CellColor) -> List[Position]:
    reference = board.color_at(0, 0)
    if not reference.is_playable:
        reference = fallback
    return [(r, c) for r, c in board.positions() if board.cells[r][c] != reference]


def isolated_hint(board: GridBoard, target: CellColor) -> Optional[Position]:
    """Non-target cell with the most target-colored neighbors; ties keep scan order."""

    best: Optional[Position] = None
    best_count = -1
    for r, c in board.positions():
        if board.cells[r][c] == target:
            continue
        count = target_neighbor_count(board, r, c, target)
        if count > best_count:
            best = (r, c)
            best_count = count
    return best
