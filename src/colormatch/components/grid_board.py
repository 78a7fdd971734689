from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from colormatch.components.cell_color import CellColor

_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass(slots=True)
class GridBoard:
    """Square matrix of cell colors for the grid puzzle."""
    size: int
    cells: List[List[CellColor]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.fill(CellColor.NEUTRAL)

    def fill(self, color: CellColor) -> None:
        self.cells = [[color for _ in range(self.size)] for _ in range(self.size)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def neighbors(self, row: int, col: int) -> Iterator[Tuple[int, int]]:
        for dr, dc in _OFFSETS:
            r, c = row + dr, col + dc
            if self.in_bounds(r, c):
                yield r, c

    def positions(self) -> Iterator[Tuple[int, int]]:
        for r in range(self.size):
            for c in range(self.size):
                yield r, c

    def color_at(self, row: int, col: int) -> CellColor:
        return self.cells[row][col]

    def count(self, color: CellColor) -> int:
        return sum(1 for row in self.cells for cell in row if cell == color)
