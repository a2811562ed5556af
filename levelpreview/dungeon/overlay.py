"""Overlay scripts and the executors that apply them to a level.

Two executors share one interface:

* :class:`ScriptingOverlay` runs each script in a Lua runtime (``lupa``)
  with a small capability surface bound as globals::

      tile.width()  tile.height()
      tile.set(x, y, glyph)
      tile.fill(x1, y1, x2, y2, glyph)
      tile.carve_circle(cx, cy, r, glyph)
      tile.jitter(glyph, density)
      rng.range(lo, hi)  rng.uniform()  rng.chance(p)
      WIDTH  HEIGHT

  After a script runs, its optional ``apply`` and ``render`` functions are
  called. A script that raises is skipped.

* :class:`HeuristicOverlay` approximates scripted decoration when no Lua
  runtime is installed: every 100 script lines buy one overlay marker
  (at least one per script), scattered over shuffled floor tiles.

:func:`resolve_overlay_executor` probes for the runtime once.
"""
from __future__ import annotations

import importlib
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

from ..logging_utils import get_logger
from .grid import TileGrid
from .tiles import FLOOR, OVERLAY_MARKER, TRANSPARENT, tile_for_glyph

log = get_logger("levelpreview.overlay")

DLUA_SUBDIR = Path("dat") / "dlua"
SCRIPT_SUFFIXES = (".lua", ".dlua")
LINES_PER_MARKER = 100
HOOKS = ("apply", "render")


@dataclass(frozen=True)
class OverlayScript:
    path: Path
    source: str

    @property
    def line_count(self) -> int:
        return len(self.source.splitlines())

    @property
    def marker_budget(self) -> int:
        return max(1, self.line_count // LINES_PER_MARKER)


def load_overlay_scripts(source_root) -> Tuple[OverlayScript, ...]:
    """Read every ``*.lua`` / ``*.dlua`` file below ``<source_root>/dat/dlua`` in sorted order."""
    root = Path(source_root) / DLUA_SUBDIR
    if not root.is_dir():
        return ()
    scripts: List[OverlayScript] = []
    for path in sorted(p for p in root.rglob("*") if p.suffix in SCRIPT_SUFFIXES and p.is_file()):
        try:
            scripts.append(OverlayScript(path, path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as e:
            log.warn(event="overlay_script_skipped", path=path, error=type(e).__name__)
    log.debug(event="overlay_scripts_loaded", path=root, count=len(scripts))
    return tuple(scripts)


def normalize_glyph(glyph) -> str:
    """Script glyph -> level tile. Empty or transparent means FLOOR."""
    if glyph is None:
        return FLOOR
    text = str(glyph)
    if not text:
        return FLOOR
    tile = tile_for_glyph(text[0])
    return FLOOR if tile == TRANSPARENT else tile


class TileApi:
    """Grid capabilities handed to scripts; every call is clamped to the grid."""

    def __init__(self, grid: TileGrid, rng: random.Random):
        self._grid = grid
        self._rng = rng

    def width(self) -> int:
        return self._grid.width

    def height(self) -> int:
        return self._grid.height

    def set(self, x, y, glyph=None) -> None:
        x, y = int(x), int(y)
        if self._grid.in_bounds(x, y):
            self._grid.set(x, y, normalize_glyph(glyph))

    def fill(self, x1, y1, x2, y2, glyph=None) -> None:
        tile = normalize_glyph(glyph)
        x1, y1, x2, y2 = int(x1), int(y1), int(x2), int(y2)
        lo_x, hi_x = max(0, min(x1, x2)), min(self._grid.width - 1, max(x1, x2))
        lo_y, hi_y = max(0, min(y1, y2)), min(self._grid.height - 1, max(y1, y2))
        for y in range(lo_y, hi_y + 1):
            row = self._grid.cells[y]
            for x in range(lo_x, hi_x + 1):
                row[x] = tile

    def carve_circle(self, cx, cy, radius, glyph=None) -> None:
        tile = normalize_glyph(glyph)
        cx, cy, radius = int(cx), int(cy), int(radius)
        r2 = radius * radius
        for y in range(max(0, cy - radius), min(self._grid.height - 1, cy + radius) + 1):
            row = self._grid.cells[y]
            for x in range(max(0, cx - radius), min(self._grid.width - 1, cx + radius) + 1):
                if (x - cx) ** 2 + (y - cy) ** 2 <= r2:
                    row[x] = tile

    def jitter(self, glyph=None, density=0.0) -> None:
        tile = normalize_glyph(glyph)
        density = float(density)
        for row in self._grid.cells:
            for x in range(len(row)):
                if self._rng.random() < density:
                    row[x] = tile


class RngApi:
    def __init__(self, rng: random.Random):
        self._rng = rng

    def range(self, lo, hi) -> int:
        """Inclusive integer draw; ``lo`` when the range is empty."""
        lo, hi = int(lo), int(hi)
        if hi < lo:
            return lo
        return lo + self._rng.randrange(hi - lo + 1)

    def uniform(self) -> float:
        return self._rng.random()

    def chance(self, p) -> bool:
        return self._rng.random() < float(p)


def _hide_private(obj, attr_name, is_setting):
    # scripts only see the public capability methods
    name = attr_name.decode("utf-8", "replace") if isinstance(attr_name, bytes) else str(attr_name)
    if is_setting or name.startswith("_"):
        raise AttributeError(name)
    return attr_name


class OverlayExecutor:
    """Applies overlay scripts to a level grid in place."""

    name = "none"

    def apply(self, grid: TileGrid, scripts: Sequence[OverlayScript], rng: random.Random) -> None:
        raise NotImplementedError


class HeuristicOverlay(OverlayExecutor):
    name = "heuristic"

    def apply(self, grid: TileGrid, scripts: Sequence[OverlayScript], rng: random.Random) -> None:
        if not scripts:
            return
        budget = sum(s.marker_budget for s in scripts)
        floors = grid.collect(FLOOR)
        rng.shuffle(floors)
        for x, y in floors[:budget]:
            grid.set(x, y, OVERLAY_MARKER)


class ScriptingOverlay(OverlayExecutor):
    name = "lua"

    def __init__(self, lupa_module):
        self._lupa = lupa_module

    def _new_runtime(self):
        return self._lupa.LuaRuntime(register_eval=False, register_builtins=False, attribute_filter=_hide_private)

    def apply(self, grid: TileGrid, scripts: Sequence[OverlayScript], rng: random.Random) -> None:
        if not scripts:
            return
        lua = self._new_runtime()
        g = lua.globals()
        g.tile = TileApi(grid, rng)
        g.rng = RngApi(rng)
        g.WIDTH = grid.width
        g.HEIGHT = grid.height
        for script in scripts:
            # hooks are per script
            for hook in HOOKS:
                g[hook] = None
            try:
                lua.execute(script.source)
                for hook in HOOKS:
                    fn = g[hook]
                    if fn is not None and self._lupa.lua_type(fn) == "function":
                        fn()
            except Exception as e:
                log.debug(event="overlay_script_failed", path=script.path.name, error=type(e).__name__)


def resolve_overlay_executor() -> OverlayExecutor:
    """Return the Lua executor when ``lupa`` is importable, else the heuristic."""
    try:
        lupa = importlib.import_module("lupa")
    except ImportError:
        log.debug(event="overlay_executor", name=HeuristicOverlay.name)
        return HeuristicOverlay()
    log.debug(event="overlay_executor", name=ScriptingOverlay.name)
    return ScriptingOverlay(lupa)


__all__ = [
    "OverlayScript",
    "OverlayExecutor",
    "HeuristicOverlay",
    "ScriptingOverlay",
    "TileApi",
    "RngApi",
    "normalize_glyph",
    "load_overlay_scripts",
    "resolve_overlay_executor",
    "DLUA_SUBDIR",
]
