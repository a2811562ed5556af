"""Entry/exit stairs derived from the depth number."""
from __future__ import annotations

from typing import Optional, Tuple

from .grid import Coord2D, TileGrid
from .tiles import FLOOR, STAIRS_DOWN, STAIRS_UP


def marker_positions(grid: TileGrid, depth: int) -> Optional[Tuple[Coord2D, Coord2D]]:
    """Return ``(up, down)`` coordinates, or None when nothing can hold a stair.

    Candidates are FLOOR tiles in row-major order, falling back to every
    non-wall tile.
    """
    candidates = grid.collect(FLOOR) or grid.collect_non_wall()
    if not candidates:
        return None
    n = len(candidates)
    return candidates[depth % n], candidates[(depth * 3) % n]


def apply_depth_markers(grid: TileGrid, depth: int) -> Optional[Tuple[Coord2D, Coord2D]]:
    positions = marker_positions(grid, depth)
    if positions is None:
        return None
    (ux, uy), (dx, dy) = positions
    grid.set(ux, uy, STAIRS_UP)
    # down wins when both indices coincide
    grid.set(dx, dy, STAIRS_DOWN)
    return positions


__all__ = ["marker_positions", "apply_depth_markers"]
