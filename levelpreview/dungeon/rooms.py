"""Room and corridor carving primitives shared by the layout generators."""
from __future__ import annotations

import random
from dataclasses import dataclass

from .grid import Coord2D, TileGrid
from .tiles import FLOOR


@dataclass
class Room:
    x: int
    y: int
    w: int
    h: int

    def carve(self, grid: TileGrid) -> None:
        grid.fill_rect(self.x, self.y, self.w, self.h, FLOOR)


def random_room(grid: TileGrid, rng: random.Random) -> Room:
    w = 4 + rng.randrange(max(2, grid.width // 8))
    h = 4 + rng.randrange(max(2, grid.height // 8))
    x = rng.randrange(max(1, grid.width - w - 1))
    y = rng.randrange(max(1, grid.height - h - 1))
    return Room(x, y, w, h)


def carve_rooms(grid: TileGrid, rng: random.Random, count: int) -> None:
    """Carve ``count`` random rectangles; overlap is allowed."""
    for _ in range(count):
        random_room(grid, rng).carve(grid)


def carve_corridor(grid: TileGrid, start: Coord2D, end: Coord2D) -> None:
    """Manhattan corridor: walk along x first, then along y."""
    x, y = start
    tx, ty = end
    step = 1 if tx > x else -1
    while x != tx:
        x += step
        grid.set(x, y, FLOOR)
    step = 1 if ty > y else -1
    while y != ty:
        y += step
        grid.set(x, y, FLOOR)


def connect_floors(grid: TileGrid, rng: random.Random) -> None:
    """Shuffle every floor tile and join each consecutive pair."""
    floors = grid.collect(FLOOR)
    rng.shuffle(floors)
    for prev, cur in zip(floors, floors[1:]):
        carve_corridor(grid, prev, cur)


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


def carve_jitter_corridor(grid: TileGrid, start: Coord2D, end: Coord2D, rng: random.Random) -> None:
    """Drunk-walk corridor toward ``end``.

    Each step advances on a random axis; 30% of steps also jog one cell
    laterally, kept inside the padding ring.
    """
    x, y = start
    tx, ty = end
    grid.set(x, y, FLOOR)
    while abs(x - tx) + abs(y - ty) > 0:
        if rng.random() < 0.5:
            x += _sign(tx - x)
        else:
            y += _sign(ty - y)
        if rng.random() < 0.3:
            x = max(1, min(grid.width - 2, x + rng.randrange(3) - 1))
            y = max(1, min(grid.height - 2, y + rng.randrange(3) - 1))
        grid.set(x, y, FLOOR)


def scatter(grid: TileGrid, rng: random.Random, target: str, replacement: str, chance: float) -> int:
    changed = 0
    for row in grid.cells:
        for x, tile in enumerate(row):
            if tile == target and rng.random() < chance:
                row[x] = replacement
                changed += 1
    return changed


__all__ = [
    "Room",
    "random_room",
    "carve_rooms",
    "carve_corridor",
    "connect_floors",
    "carve_jitter_corridor",
    "scatter",
]
