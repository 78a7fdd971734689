from typing import Optional, Tuple

from colormatch.constants import (
    BOARD_MAX_HEIGHT_PCT,
    BOARD_MAX_WIDTH_PCT,
    BOTTOM_MARGIN,
    HUD_HEIGHT,
    MIN_TILE_SIZE,
    TILE_GAP,
)


def compute_board_geometry(window_width: int, window_height: int, grid_size: int) -> Tuple[int, float, float]:
    """Return (tile_size, start_x, start_y) for a square board of ``grid_size`` cells.

    Shared by rendering and input mapping so clicks land on the drawn cells.
    """
    max_board_w = window_width * BOARD_MAX_WIDTH_PCT
    max_board_h = (window_height - BOTTOM_MARGIN - HUD_HEIGHT) * BOARD_MAX_HEIGHT_PCT
    gaps = TILE_GAP * (grid_size - 1)
    tile_size = int(min((max_board_w - gaps) / grid_size, (max_board_h - gaps) / grid_size))
    if tile_size < MIN_TILE_SIZE:
        tile_size = MIN_TILE_SIZE
    total = grid_size * tile_size + gaps
    start_x = (window_width - total) / 2
    start_y = BOTTOM_MARGIN
    return tile_size, start_x, start_y


def cell_origin(row: int, col: int, grid_size: int, geometry: Tuple[int, float, float]) -> Tuple[float, float]:
    """Bottom-left corner of a cell; row 0 is drawn at the top."""
    tile_size, start_x, start_y = geometry
    step = tile_size + TILE_GAP
    return start_x + col * step, start_y + (grid_size - 1 - row) * step


def cell_at_point(x: float, y: float, grid_size: int, geometry: Tuple[int, float, float]) -> Optional[Tuple[int, int]]:
    tile_size, start_x, start_y = geometry
    step = tile_size + TILE_GAP
    col = int((x - start_x) // step)
    row_from_bottom = int((y - start_y) // step)
    if not (0 <= col < grid_size and 0 <= row_from_bottom < grid_size):
        return None
    # Clicks in the gap between tiles do not count.
    if (x - start_x) - col * step > tile_size or (y - start_y) - row_from_bottom * step > tile_size:
        return None
    return grid_size - 1 - row_from_bottom, col
