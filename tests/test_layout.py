import pytest

from colormatch.constants import TILE_GAP
from colormatch.ui.layout import cell_at_point, cell_origin, compute_board_geometry


@pytest.mark.parametrize("size", [3, 4, 5])
def test_cell_centers_map_back_to_cells(size):
    geometry = compute_board_geometry(800, 600, size)
    tile_size = geometry[0]
    for row in range(size):
        for col in range(size):
            left, bottom = cell_origin(row, col, size, geometry)
            assert cell_at_point(left + tile_size / 2, bottom + tile_size / 2, size, geometry) == (row, col)


def test_row_zero_is_drawn_on_top():
    geometry = compute_board_geometry(800, 600, 3)

    _, top_bottom = cell_origin(0, 0, 3, geometry)
    _, low_bottom = cell_origin(2, 0, 3, geometry)

    assert top_bottom > low_bottom


def test_points_outside_board_or_in_gaps_miss():
    geometry = compute_board_geometry(800, 600, 3)
    tile_size, start_x, start_y = geometry

    assert cell_at_point(start_x - 5, start_y + 5, 3, geometry) is None
    assert cell_at_point(start_x + 5, start_y - 5, 3, geometry) is None
    assert cell_at_point(799, 599, 3, geometry) is None
    assert cell_at_point(start_x + tile_size + TILE_GAP / 2, start_y + 5, 3, geometry) is None


def test_board_is_centered_horizontally():
    tile_size, start_x, _ = compute_board_geometry(800, 600, 4)
    total = 4 * tile_size + 3 * TILE_GAP

    assert start_x == pytest.approx((800 - total) / 2)
