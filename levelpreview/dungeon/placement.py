"""Random vault placement with marker-based collision."""
from __future__ import annotations

import random
from typing import List, Optional

from .grid import Coord2D, TileGrid
from .tiles import OVERLAY_MARKER, TRANSPARENT
from .vaults import MapDefinition

PLACEMENT_TRIES = 25


def can_place(grid: TileGrid, tiles: List[List[str]], offset_x: int, offset_y: int) -> bool:
    for y, row in enumerate(tiles):
        layout_row = grid.cells[offset_y + y]
        for x, tile in enumerate(row):
            if tile == TRANSPARENT:
                continue
            if layout_row[offset_x + x] == OVERLAY_MARKER:
                return False
    return True


def stamp(grid: TileGrid, tiles: List[List[str]], offset_x: int, offset_y: int) -> None:
    """Overwrite the grid with every non-transparent vault cell."""
    for y, row in enumerate(tiles):
        layout_row = grid.cells[offset_y + y]
        for x, tile in enumerate(row):
            if tile != TRANSPARENT:
                layout_row[offset_x + x] = tile


def place_vault(grid: TileGrid, vault: MapDefinition, rng: random.Random, tries: int = PLACEMENT_TRIES) -> Optional[Coord2D]:
    """Try random offsets keeping ``vault`` inside ``grid``.

    Returns the accepted offset, or None when the vault does not fit or
    every try lands a cell on an existing overlay marker. A vault with no
    cells is accepted at ``(0, 0)`` without drawing from ``rng``.
    """
    tiles = vault.tiles()
    if not tiles or not tiles[0]:
        return 0, 0
    max_x = grid.width - len(tiles[0])
    max_y = grid.height - len(tiles)
    if max_x < 0 or max_y < 0:
        return None
    for _ in range(tries):
        ox = rng.randrange(max_x + 1)
        oy = rng.randrange(max_y + 1)
        if not can_place(grid, tiles, ox, oy):
            continue
        stamp(grid, tiles, ox, oy)
        return ox, oy
    return None


__all__ = ["PLACEMENT_TRIES", "can_place", "stamp", "place_vault"]
