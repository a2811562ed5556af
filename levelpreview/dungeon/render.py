"""Grid to display text."""
from __future__ import annotations

from .grid import TileGrid

BORDER_TOP = ("┌", "─", "┐")
BORDER_SIDE = "│"
BORDER_BOTTOM = ("└", "─", "┘")


def render(grid: TileGrid, include_border: bool = True) -> str:
    """One character per tile, rows joined with newlines; optional box frame."""
    rows = grid.rows()
    if not include_border:
        return "\n".join(rows)
    left, fill, right = BORDER_TOP
    lines = [left + fill * grid.width + right]
    lines.extend(BORDER_SIDE + row + BORDER_SIDE for row in rows)
    left, fill, right = BORDER_BOTTOM
    lines.append(left + fill * grid.width + right)
    return "\n".join(lines)


__all__ = ["render"]
