"""Tile buffer shared by every generation stage.

Cells are stored row-major (``cells[y][x]``) so that scanning in
:meth:`TileGrid.coords` order is the row-major order depth markers and
connectivity seeding rely on.
"""
from __future__ import annotations

from typing import Iterator, List, Tuple

from .tiles import FLOOR, WALL

Coord2D = Tuple[int, int]


class TileGrid:
    """Fixed-size 2D tile array addressed by ``(x, y)``."""

    __slots__ = ("width", "height", "cells")

    def __init__(self, width: int, height: int, fill: str = WALL):
        if width <= 0 or height <= 0:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.cells: List[List[str]] = [[fill] * width for _ in range(height)]

    @classmethod
    def filled(cls, width: int, height: int, tile: str) -> "TileGrid":
        return cls(width, height, fill=tile)

    @classmethod
    def from_rows(cls, rows: List[str]) -> "TileGrid":
        """Build a grid from equal-length text rows (handy in tests)."""
        if not rows:
            raise ValueError("at least one row required")
        grid = cls(len(rows[0]), len(rows))
        for y, row in enumerate(rows):
            if len(row) != grid.width:
                raise ValueError(f"row {y} has length {len(row)}, expected {grid.width}")
            grid.cells[y] = list(row)
        return grid

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> str:
        return self.cells[y][x]

    def set(self, x: int, y: int, tile: str) -> None:
        self.cells[y][x] = tile

    def fill_rect(self, x: int, y: int, w: int, h: int, tile: str) -> None:
        """Paint the half-open box ``[x, x+w) × [y, y+h)`` clamped to the grid."""
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(self.width, x + w), min(self.height, y + h)
        for yy in range(y0, y1):
            row = self.cells[yy]
            for xx in range(x0, x1):
                row[xx] = tile

    def pad_walls(self) -> None:
        """Force the outermost ring to WALL."""
        top, bottom = self.cells[0], self.cells[self.height - 1]
        for x in range(self.width):
            top[x] = WALL
            bottom[x] = WALL
        for row in self.cells:
            row[0] = WALL
            row[self.width - 1] = WALL

    def coords(self) -> Iterator[Coord2D]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    def collect(self, tile: str) -> List[Coord2D]:
        """All coordinates holding ``tile`` in row-major scan order."""
        return [(x, y) for y, row in enumerate(self.cells) for x, t in enumerate(row) if t == tile]

    def collect_non_wall(self) -> List[Coord2D]:
        return [(x, y) for y, row in enumerate(self.cells) for x, t in enumerate(row) if t != WALL]

    def count(self, tile: str) -> int:
        return sum(row.count(tile) for row in self.cells)

    def border_is_wall(self) -> bool:
        if any(t != WALL for t in self.cells[0]) or any(t != WALL for t in self.cells[-1]):
            return False
        return all(row[0] == WALL and row[-1] == WALL for row in self.cells)

    def copy(self) -> "TileGrid":
        clone = TileGrid(self.width, self.height)
        clone.cells = [list(row) for row in self.cells]
        return clone

    def rows(self) -> List[str]:
        return ["".join(row) for row in self.cells]

    def __eq__(self, other) -> bool:
        if not isinstance(other, TileGrid):
            return NotImplemented
        return self.width == other.width and self.height == other.height and self.cells == other.cells

    def __repr__(self) -> str:
        return f"TileGrid({self.width}x{self.height}, floor={self.count(FLOOR)})"


__all__ = ["TileGrid", "Coord2D"]
