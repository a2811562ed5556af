"""Layout generators: the eleven weighted base styles.

Every generator takes ``(width, height, rng)`` and returns a fully padded
:class:`TileGrid`. :func:`generate_layout` picks one style with a weighted
roll adjusted by branch-name bonuses and tags the result for provenance.

Weighting rules::

    base weights       BASIC_ROOMS 30, CELLULAR_CAVE 15, MAZE 10, NOISE_HEIGHTMAP 10,
                       CITY_GRID 8, CHAOTIC_CITY 4, LABYRINTH 6, BIG_OPEN 6,
                       DIAMOND 4, RUINS 5, RIVER_LAKE 2
    LAIR/SNAKE/SWAMP/SHOALS   cave +10, river +4, ruins +2
    VAULT                     city +12, chaotic city +8, rooms -10
    ELF/DEPTHS/D              maze +4, labyrinth +4, diamond +3
    TOMB/CRYPT                ruins +8, labyrinth +3
    ZIG/ZIGGURAT              big open +6, city +6

Branch matching is plain substring containment on the uppercased branch, so
short codes match broadly (any branch containing a ``D`` gets the depths
bonus).
"""
from __future__ import annotations

import random
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Tuple

from .grid import TileGrid
from .noise import layered_noise_field
from .rooms import carve_jitter_corridor, carve_rooms, connect_floors
from .tiles import FLOOR, WALL


class LayoutStyle(Enum):
    BASIC_ROOMS = "basic"
    MAZE = "maze"
    CELLULAR_CAVE = "cellular"
    NOISE_HEIGHTMAP = "noise"
    CITY_GRID = "city"
    CHAOTIC_CITY = "chaotic_city"
    LABYRINTH = "labyrinth"
    BIG_OPEN = "big_room"
    DIAMOND = "diamond"
    RUINS = "ruins"
    RIVER_LAKE = "river_lake"

    @property
    def tag(self) -> str:
        return f"layout:{self.value}"


# Insertion order matters: the cumulative roll walks this order.
BASE_WEIGHTS: Tuple[Tuple[LayoutStyle, int], ...] = (
    (LayoutStyle.BASIC_ROOMS, 30),
    (LayoutStyle.CELLULAR_CAVE, 15),
    (LayoutStyle.MAZE, 10),
    (LayoutStyle.NOISE_HEIGHTMAP, 10),
    (LayoutStyle.CITY_GRID, 8),
    (LayoutStyle.CHAOTIC_CITY, 4),
    (LayoutStyle.LABYRINTH, 6),
    (LayoutStyle.BIG_OPEN, 6),
    (LayoutStyle.DIAMOND, 4),
    (LayoutStyle.RUINS, 5),
    (LayoutStyle.RIVER_LAKE, 2),
)


class BranchBonus(NamedTuple):
    substrings: Tuple[str, ...]
    style: LayoutStyle
    delta: int

    def matches(self, branch: str) -> bool:
        upper = branch.upper()
        return any(s in upper for s in self.substrings)


_WATERY = ("LAIR", "SNAKE", "SWAMP", "SHOALS")
_DEEP = ("ELF", "DEPTHS", "D")
_DEAD = ("TOMB", "CRYPT")
_ZIG = ("ZIG", "ZIGGURAT")

BRANCH_BONUSES: Tuple[BranchBonus, ...] = (
    BranchBonus(_WATERY, LayoutStyle.CELLULAR_CAVE, 10),
    BranchBonus(_WATERY, LayoutStyle.RIVER_LAKE, 4),
    BranchBonus(_WATERY, LayoutStyle.RUINS, 2),
    BranchBonus(("VAULT",), LayoutStyle.CITY_GRID, 12),
    BranchBonus(("VAULT",), LayoutStyle.CHAOTIC_CITY, 8),
    BranchBonus(("VAULT",), LayoutStyle.BASIC_ROOMS, -10),
    BranchBonus(_DEEP, LayoutStyle.MAZE, 4),
    BranchBonus(_DEEP, LayoutStyle.LABYRINTH, 4),
    BranchBonus(_DEEP, LayoutStyle.DIAMOND, 3),
    BranchBonus(_DEAD, LayoutStyle.RUINS, 8),
    BranchBonus(_DEAD, LayoutStyle.LABYRINTH, 3),
    BranchBonus(_ZIG, LayoutStyle.BIG_OPEN, 6),
    BranchBonus(_ZIG, LayoutStyle.CITY_GRID, 6),
)


class LayoutPlan(NamedTuple):
    grid: TileGrid
    source: str


def style_weights(branch: str) -> Dict[LayoutStyle, int]:
    """Base weights with every matching branch bonus applied in order."""
    weights = dict(BASE_WEIGHTS)
    for bonus in BRANCH_BONUSES:
        if bonus.matches(branch):
            weights[bonus.style] += bonus.delta
    return weights


def choose_layout_style(rng: random.Random, branch: str = "D") -> LayoutStyle:
    weights = style_weights(branch)
    total = sum(weights.values())
    roll = rng.randrange(max(1, total))
    running = 0
    for style, weight in weights.items():
        running += max(0, weight)
        if roll < running:
            return style
    return LayoutStyle.BASIC_ROOMS


# ---------------------------------------------------------------------------
# Cellular helpers
# ---------------------------------------------------------------------------
def count_wall_neighbours(cells: List[List[str]], cx: int, cy: int) -> int:
    """Walls among the 8 neighbours; out-of-bounds counts as wall."""
    height = len(cells)
    width = len(cells[0])
    count = 0
    for y in range(cy - 1, cy + 2):
        for x in range(cx - 1, cx + 2):
            if x == cx and y == cy:
                continue
            if y < 0 or y >= height or x < 0 or x >= width or cells[y][x] == WALL:
                count += 1
    return count


def smooth_step(grid: TileGrid) -> TileGrid:
    """One majority-rule pass: >4 walls -> WALL, <4 -> FLOOR, 4 -> unchanged."""
    nxt = TileGrid(grid.width, grid.height)
    src = grid.cells
    for y in range(grid.height):
        out = nxt.cells[y]
        for x in range(grid.width):
            walls = count_wall_neighbours(src, x, y)
            if walls > 4:
                out[x] = WALL
            elif walls < 4:
                out[x] = FLOOR
            else:
                out[x] = src[y][x]
    return nxt


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------
def generate_basic_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = TileGrid(width, height)
    carve_rooms(grid, rng, max(3, min(width, height) // 5))
    connect_floors(grid, rng)
    grid.pad_walls()
    return grid


def generate_cellular_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = TileGrid(width, height)
    for row in grid.cells:
        for x in range(width):
            row[x] = WALL if rng.random() < 0.45 else FLOOR
    for _ in range(5):
        grid = smooth_step(grid)
    grid.pad_walls()
    return grid


def carve_maze(grid: TileGrid, start_x: int, start_y: int, rng: random.Random) -> None:
    """Randomised depth-first carve on odd lattice points.

    Uses an explicit stack; each cell shuffles its four directions when it
    is first visited, which keeps the draw order of the recursive form.
    """
    width, height = grid.width, grid.height
    visited = [[False] * width for _ in range(height)]
    moves = ((0, -2), (0, 2), (-2, 0), (2, 0))

    def visit(x: int, y: int) -> list:
        order = [0, 1, 2, 3]
        rng.shuffle(order)
        visited[y][x] = True
        grid.set(x, y, FLOOR)
        return [x, y, order, 0]

    stack = [visit(start_x, start_y)]
    while stack:
        frame = stack[-1]
        x, y, order, idx = frame
        if idx >= 4:
            stack.pop()
            continue
        frame[3] = idx + 1
        dx, dy = moves[order[idx]]
        nx, ny = x + dx, y + dy
        if ny <= 0 or ny >= height - 1 or nx <= 0 or nx >= width - 1 or visited[ny][nx]:
            continue
        grid.set(x + dx // 2, y + dy // 2, FLOOR)
        stack.append(visit(nx, ny))


def generate_maze_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = TileGrid(width, height)
    carve_maze(grid, (width // 2) | 1, (height // 2) | 1, rng)
    grid.pad_walls()
    return grid


def generate_labyrinth_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = TileGrid(width, height)
    start_x = 1 + rng.randrange(max(1, width - 2))
    start_y = 1 + rng.randrange(max(1, height - 2))
    start_x = max(1, min(width - 2, start_x | 1))
    start_y = max(1, min(height - 2, start_y | 1))
    carve_maze(grid, start_x, start_y, rng)
    grid.pad_walls()
    return grid


def generate_noise_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    field = layered_noise_field(width, height, rng)
    grid = TileGrid(width, height)
    for y, row in enumerate(field):
        out = grid.cells[y]
        for x, value in enumerate(row):
            out[x] = FLOOR if value > 0.45 else WALL
    grid = smooth_step(grid)
    grid.pad_walls()
    return grid


def generate_city_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = TileGrid(width, height)
    block_w = max(6, width // 8)
    block_h = max(6, height // 8)
    for by in range(1, height - 1, block_h):
        for bx in range(1, width - 1, block_w):
            w = min(block_w - 2, width - bx - 2)
            h = min(block_h - 2, height - by - 2)
            if w > 0 and h > 0:
                grid.fill_rect(bx, by, w, h, FLOOR)
    # Cross streets through the block midpoints
    for y in range(block_h // 2, height, block_h):
        grid.fill_rect(0, min(height - 2, y), width, 1, FLOOR)
    for x in range(block_w // 2, width, block_w):
        grid.fill_rect(min(width - 2, x), 0, 1, height, FLOOR)
    # Plazas
    for _ in range(4):
        cx = rng.randrange(max(1, width - 10)) + 5
        cy = rng.randrange(max(1, height - 10)) + 5
        r = 3 + rng.randrange(4)
        for y in range(max(1, cy - r), min(height - 1, cy + r + 1)):
            for x in range(max(1, cx - r), min(width - 1, cx + r + 1)):
                if (x - cx) ** 2 + (y - cy) ** 2 <= r * r:
                    grid.set(x, y, FLOOR)
    grid.pad_walls()
    return grid


def generate_chaotic_city_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = TileGrid(width, height)
    boxes = 20 + rng.randrange(30)
    for _ in range(boxes):
        rw = 4 + rng.randrange(max(3, width // 10))
        rh = 4 + rng.randrange(max(3, height // 10))
        rx = rng.randrange(max(1, width - rw - 1))
        ry = rng.randrange(max(1, height - rh - 1))
        grid.fill_rect(rx, ry, rw, rh, FLOOR)
    for _ in range(10):
        start = (rng.randrange(width), rng.randrange(height))
        end = (rng.randrange(width), rng.randrange(height))
        carve_jitter_corridor(grid, start, end, rng)
    grid.pad_walls()
    return grid


def generate_big_room_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = TileGrid.filled(width, height, FLOOR)
    grid.pad_walls()
    for _ in range((width * height) // 40):
        grid.set(rng.randrange(width), rng.randrange(height), WALL)
    return grid


def _manhattan_disk(grid: TileGrid, cx: int, cy: int, r: int, inclusive: bool) -> None:
    # The centre disk scans the whole grid; the extra disks scan a half-open box.
    y_hi = cy + r + 1 if inclusive else cy + r
    x_hi = cx + r + 1 if inclusive else cx + r
    for y in range(max(0, cy - r), min(grid.height, y_hi)):
        for x in range(max(0, cx - r), min(grid.width, x_hi)):
            if abs(x - cx) + abs(y - cy) <= r:
                grid.set(x, y, FLOOR)


def generate_diamond_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = TileGrid(width, height)
    radius = min(width, height) // 3
    _manhattan_disk(grid, width // 2, height // 2, radius, True)
    for _ in range(2):
        rx = rng.randrange(width)
        ry = rng.randrange(height)
        r = 4 + rng.randrange(max(2, radius // 2))
        _manhattan_disk(grid, rx, ry, r, False)
    grid.pad_walls()
    return grid


def generate_ruins_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = TileGrid.filled(width, height, FLOOR)
    for _ in range((width * height) // 30):
        rw = 3 + rng.randrange(6)
        rh = 3 + rng.randrange(6)
        rx = rng.randrange(max(1, width - rw - 1))
        ry = rng.randrange(max(1, height - rh - 1))
        for y in range(ry, min(height, ry + rh)):
            for x in range(rx, min(width, rx + rw)):
                if rng.random() < 0.7:
                    grid.set(x, y, WALL)
    grid.pad_walls()
    return grid


def generate_river_layout(width: int, height: int, rng: random.Random) -> TileGrid:
    grid = generate_cellular_layout(width, height, rng)
    for _ in range(3 + rng.randrange(3)):
        y = rng.randrange(height)
        thickness = 2 + rng.randrange(3)
        for x in range(width):
            cy = max(1, min(height - 2, y + rng.randrange(3) - 1))
            for ty in range(cy - thickness, cy + thickness + 1):
                if 0 < ty < height - 1:
                    grid.set(x, ty, FLOOR)
            y = cy
    grid.pad_walls()
    return grid


GENERATORS: Dict[LayoutStyle, Callable[[int, int, random.Random], TileGrid]] = {
    LayoutStyle.BASIC_ROOMS: generate_basic_layout,
    LayoutStyle.MAZE: generate_maze_layout,
    LayoutStyle.CELLULAR_CAVE: generate_cellular_layout,
    LayoutStyle.NOISE_HEIGHTMAP: generate_noise_layout,
    LayoutStyle.CITY_GRID: generate_city_layout,
    LayoutStyle.CHAOTIC_CITY: generate_chaotic_city_layout,
    LayoutStyle.LABYRINTH: generate_labyrinth_layout,
    LayoutStyle.BIG_OPEN: generate_big_room_layout,
    LayoutStyle.DIAMOND: generate_diamond_layout,
    LayoutStyle.RUINS: generate_ruins_layout,
    LayoutStyle.RIVER_LAKE: generate_river_layout,
}


def ensure_walkable(grid: TileGrid) -> None:
    """Open the centre cell when a generator smoothed everything to wall."""
    if grid.count(FLOOR) == 0:
        grid.set(grid.width // 2, grid.height // 2, FLOOR)


def generate_style(style: LayoutStyle, width: int, height: int, rng: random.Random) -> LayoutPlan:
    grid = GENERATORS[style](width, height, rng)
    ensure_walkable(grid)
    return LayoutPlan(grid, style.tag)


def generate_layout(width: int, height: int, rng: random.Random, branch: str = "D") -> LayoutPlan:
    style = choose_layout_style(rng, branch)
    return generate_style(style, width, height, rng)


__all__ = [
    "LayoutStyle",
    "LayoutPlan",
    "BASE_WEIGHTS",
    "BRANCH_BONUSES",
    "BranchBonus",
    "GENERATORS",
    "style_weights",
    "choose_layout_style",
    "smooth_step",
    "carve_maze",
    "ensure_walkable",
    "generate_style",
    "generate_layout",
    "generate_basic_layout",
    "generate_cellular_layout",
    "generate_maze_layout",
    "generate_labyrinth_layout",
    "generate_noise_layout",
    "generate_city_layout",
    "generate_chaotic_city_layout",
    "generate_big_room_layout",
    "generate_diamond_layout",
    "generate_ruins_layout",
    "generate_river_layout",
]
