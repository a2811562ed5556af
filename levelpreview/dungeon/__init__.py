"""Public level-preview package interface."""

from .config import ConfigError, SimulationConfig
from .grid import TileGrid
from .layouts import LayoutStyle, generate_layout
from .pipeline import LevelSimulator, SimulationResult, get_simulator, simulate
from .render import render
from .tiles import FLOOR, OVERLAY_MARKER, STAIRS_DOWN, STAIRS_UP, TRANSPARENT, WALL
from .vaults import MapDefinition, load_vault_library, parse_des_text, select_vaults

__all__ = [
    "ConfigError",
    "SimulationConfig",
    "TileGrid",
    "LayoutStyle",
    "generate_layout",
    "LevelSimulator",
    "SimulationResult",
    "get_simulator",
    "simulate",
    "render",
    "MapDefinition",
    "load_vault_library",
    "parse_des_text",
    "select_vaults",
    "WALL",
    "FLOOR",
    "STAIRS_UP",
    "STAIRS_DOWN",
    "OVERLAY_MARKER",
    "TRANSPARENT",
]
