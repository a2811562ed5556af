"""Bespoke generators for the special branch families.

These bypass the weighted layout table entirely. Dispatch checks the
families in a fixed priority order (abyss, pandemonium, hells, zot) so a
branch string naming several of them resolves to the first match.
"""
from __future__ import annotations

import random
from typing import Callable, Optional, Tuple

from .grid import TileGrid
from .layouts import (
    LayoutPlan,
    ensure_walkable,
    generate_basic_layout,
    generate_big_room_layout,
    generate_diamond_layout,
)
from .rooms import carve_rooms, scatter
from .tiles import FLOOR, WALL


def _erode_ring(grid: TileGrid, inset: int, chance: float, rng: random.Random) -> None:
    """Wall in the rectangle outline ``inset`` cells from the edge, cell by cell with ``chance``."""
    top, bottom = inset, grid.height - inset - 1
    left, right = inset, grid.width - inset - 1
    for y in range(top, grid.height - inset):
        for x in range(left, grid.width - inset):
            if y in (top, bottom) or x in (left, right):
                if rng.random() < chance:
                    grid.set(x, y, WALL)


def generate_abyss(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = generate_basic_layout(width, height, rng)
    scatter(grid, rng, FLOOR, WALL, 0.30)
    return grid


def generate_pandemonium(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = generate_basic_layout(width, height, rng)
    carve_rooms(grid, rng, max(4, min(width, height) // 3))
    grid.pad_walls()
    return grid


def generate_hell_citadel(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = generate_diamond_layout(width, height, rng)
    step = max(2, min(width, height) // 12)
    for ring in range(1, 4):
        _erode_ring(grid, ring * step, 0.8, rng)
    grid.pad_walls()
    return grid


def generate_zot_tower(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = generate_big_room_layout(width, height, rng)
    for ring in range(4):
        _erode_ring(grid, 2 + ring * 3, 0.5, rng)
    carve_rooms(grid, rng, 5 + rng.randrange(8))
    grid.pad_walls()
    return grid


_HELLS = ("DIS", "GEH", "COC", "TAR", "HELL")

# (substrings, provenance tag, generator) in dispatch priority order
BRANCH_BUILDERS: Tuple[Tuple[Tuple[str, ...], str, Callable[[int, int, random.Random], TileGrid]], ...] = (
    (("ABYSS",), "abyss", generate_abyss),
    (("PAN",), "pan", generate_pandemonium),
    (_HELLS, "hell_citadel", generate_hell_citadel),
    (("ZOT",), "zot", generate_zot_tower),
)


def special_branch_tag(branch: str) -> Optional[str]:
    """Return the tag of the first matching branch family, or None."""
    upper = branch.upper()
    for substrings, tag, _ in BRANCH_BUILDERS:
        if any(s in upper for s in substrings):
            return tag
    return None


def build_special_branch(branch: str, width: int, height: int, rng: random.Random) -> Optional[LayoutPlan]:
    """Build the bespoke layout for ``branch`` if it names a special family."""
    upper = branch.upper()
    for substrings, tag, generator in BRANCH_BUILDERS:
        if any(s in upper for s in substrings):
            grid = generator(width, height, rng)
            ensure_walkable(grid)
            return LayoutPlan(grid, f"branch={upper}:{tag}")
    return None


__all__ = [
    "BRANCH_BUILDERS",
    "special_branch_tag",
    "build_special_branch",
    "generate_abyss",
    "generate_pandemonium",
    "generate_hell_citadel",
    "generate_zot_tower",
]
