# Tile constants centralized for modular imports. Values double as the
# render glyphs, so a grid row joins straight into display text.
WALL = "#"
FLOOR = "."
STAIRS_UP = "<"
STAIRS_DOWN = ">"
OVERLAY_MARKER = "*"
TRANSPARENT = " "  # vault-local mask; never written into a level grid

WALKABLE = frozenset({FLOOR, STAIRS_UP, STAIRS_DOWN})
# Anything a player could stand on once the level is finished
OPEN = frozenset({FLOOR, STAIRS_UP, STAIRS_DOWN, OVERLAY_MARKER})

_UP_GLYPHS = frozenset("<{([")
_DOWN_GLYPHS = frozenset(">})]")
_WALL_GLYPHS = frozenset("#xXcvbmnoatGTVY")


def tile_for_glyph(glyph: str) -> str:
    """Map a map-definition glyph onto one of the level tiles.

    Space stays TRANSPARENT; stair, marker and wall families map to their
    tile; everything else (doors, monsters, items, features) is FLOOR.
    """
    if glyph == TRANSPARENT:
        return TRANSPARENT
    if glyph in _UP_GLYPHS:
        return STAIRS_UP
    if glyph in _DOWN_GLYPHS:
        return STAIRS_DOWN
    if glyph == OVERLAY_MARKER:
        return OVERLAY_MARKER
    if glyph in _WALL_GLYPHS:
        return WALL
    return FLOOR


__all__ = [
    "WALL",
    "FLOOR",
    "STAIRS_UP",
    "STAIRS_DOWN",
    "OVERLAY_MARKER",
    "TRANSPARENT",
    "WALKABLE",
    "OPEN",
    "tile_for_glyph",
]
