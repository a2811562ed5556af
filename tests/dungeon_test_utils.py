from collections import deque

# Tile characters duplicated lightly for test independence.
WALL = "#"
FLOOR = "."
UP = "<"
DOWN = ">"
MARKER = "*"
WALKABLE = {FLOOR, UP, DOWN}
OPEN = WALKABLE | {MARKER}


def first_walkable(grid):
    """First FLOOR in scan order, else the first stair; None when neither exists."""
    for wanted in ({FLOOR}, WALKABLE):
        for y, row in enumerate(grid.cells):
            for x, t in enumerate(row):
                if t in wanted:
                    return (x, y)
    return None


def bfs_reachable(grid, start):
    """Return set of (x,y) reached from start over WALKABLE, plus markers touching them."""
    if start is None:
        return set()
    q = deque([start])
    vis = {start}
    while q:
        x, y = q.popleft()
        for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            nx, ny = x + dx, y + dy
            if 0 <= nx < grid.width and 0 <= ny < grid.height and (nx, ny) not in vis:
                t = grid.cells[ny][nx]
                if t in WALKABLE:
                    vis.add((nx, ny))
                    q.append((nx, ny))
                elif t == MARKER:
                    vis.add((nx, ny))
    return vis


def open_tiles(grid):
    return {(x, y) for y, row in enumerate(grid.cells) for x, t in enumerate(row) if t in OPEN}


def stranded(grid):
    """Open tiles not connected to the first walkable tile."""
    return open_tiles(grid) - bfs_reachable(grid, first_walkable(grid))


def border_cells(grid):
    for x in range(grid.width):
        yield grid.cells[0][x]
        yield grid.cells[grid.height - 1][x]
    for y in range(grid.height):
        yield grid.cells[y][0]
        yield grid.cells[y][grid.width - 1]


def floor_edges(grid):
    """Number of orthogonally adjacent FLOOR pairs."""
    edges = 0
    for y, row in enumerate(grid.cells):
        for x, t in enumerate(row):
            if t != FLOOR:
                continue
            if x + 1 < grid.width and row[x + 1] == FLOOR:
                edges += 1
            if y + 1 < grid.height and grid.cells[y + 1][x] == FLOOR:
                edges += 1
    return edges


class FixedRoll:
    """Stand-in random source returning preset randrange values and recording bounds."""

    def __init__(self, *values):
        self.values = list(values)
        self.bounds = []

    def randrange(self, n):
        self.bounds.append(n)
        return self.values.pop(0)
