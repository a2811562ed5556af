"""Flood-fill connectivity repair.

The flood starts at the first FLOOR tile in scan order and walks the four
orthogonal neighbours over FLOOR and stairs. Overlay markers touching the
flooded region count as reached but are not walked through. Afterwards
every open tile the flood never reached (floor, marker or a stair stranded
in a pocket) is walled in, so whatever survives is one connected region.
"""
from __future__ import annotations

from collections import deque
from typing import Set

from .grid import Coord2D, TileGrid
from .tiles import FLOOR, OPEN, OVERLAY_MARKER, WALKABLE, WALL

_DIRS = ((0, -1), (-1, 0), (1, 0), (0, 1))


def flood_reachable(grid: TileGrid, start: Coord2D) -> Set[Coord2D]:
    cells = grid.cells
    visited = {start}
    q = deque([start])
    while q:
        cx, cy = q.popleft()
        for dx, dy in _DIRS:
            nx, ny = cx + dx, cy + dy
            if 0 <= nx < grid.width and 0 <= ny < grid.height and (nx, ny) not in visited:
                tile = cells[ny][nx]
                if tile in WALKABLE:
                    visited.add((nx, ny))
                    q.append((nx, ny))
                elif tile == OVERLAY_MARKER:
                    visited.add((nx, ny))
    return visited


def has_walkable(grid: TileGrid) -> bool:
    return any(t in OPEN for row in grid.cells for t in row)


def repair_connectivity(grid: TileGrid) -> bool:
    """Wall off unreachable pockets; return whether anything walkable remains."""
    floors = grid.collect(FLOOR)
    if floors:
        visited = flood_reachable(grid, floors[0])
        for y, row in enumerate(grid.cells):
            for x, tile in enumerate(row):
                if tile in OPEN and (x, y) not in visited:
                    row[x] = WALL
    return has_walkable(grid)


__all__ = ["flood_reachable", "has_walkable", "repair_connectivity"]
