"""Vault library: map-definition parsing, loading and selection.

A map-definition (``.des``) file holds any number of blocks::

    NAME:   small_grotto
    PLACE:  D:3, Lair
    MAP
    xxxxx
    x...x
    xxxxx
    ENDMAP

Lines between ``MAP`` and ``ENDMAP`` are captured verbatim. Place hints
come from ``PLACE:`` directives and from scripting-style ``place("...")``
calls; each token contributes its uppercased form plus the prefix before
any colon. Hints accumulate across the whole file. A block that never
reaches ``ENDMAP`` is dropped.
"""
from __future__ import annotations

import random
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Tuple

from ..logging_utils import get_logger
from .tiles import TRANSPARENT, tile_for_glyph

log = get_logger("levelpreview.vaults")

DES_SUBDIR = Path("dat") / "des"

_PLACE_DIRECTIVE = re.compile(r"^PLACE:\s*(.+)$", re.IGNORECASE)
_PLACE_CALL = re.compile(r'place\("([^"]+)"', re.IGNORECASE)


@dataclass(frozen=True)
class MapDefinition:
    name: str
    origin: Path
    relative_origin: str
    rows: Tuple[str, ...]
    place_hints: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def width(self) -> int:
        return max((len(r) for r in self.rows), default=0)

    @property
    def height(self) -> int:
        return len(self.rows)

    def tiles(self) -> List[List[str]]:
        """Rasterise rows into tiles, right-padding short rows with TRANSPARENT."""
        w = self.width
        return [[tile_for_glyph(ch) for ch in row] + [TRANSPARENT] * (w - len(row)) for row in self.rows]

    def matches_branch(self, branch_code: Optional[str]) -> bool:
        if branch_code is None:
            return True
        code = branch_code.upper()
        if code in self.place_hints:
            return True
        rel = self.relative_origin.lower()
        return "branches/" in rel and code.lower() in rel

    def to_dict(self):
        return {
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "place_hints": sorted(self.place_hints),
            "origin": self.relative_origin,
        }


def collect_place_hints(hints: List[str], token: str) -> None:
    cleaned = token.strip()
    if not cleaned:
        return
    upper = cleaned.upper()
    if upper not in hints:
        hints.append(upper)
    colon = upper.find(":")
    if colon > 0 and upper[:colon] not in hints:
        hints.append(upper[:colon])


def parse_des_text(text: str, origin: Path, relative_origin: str = "") -> List[MapDefinition]:
    maps: List[MapDefinition] = []
    buffer: Optional[List[str]] = None
    current_name: Optional[str] = None
    anonymous = 0
    hints: List[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if line.startswith("NAME:"):
            current_name = line[len("NAME:"):].strip()
        m = _PLACE_DIRECTIVE.search(line)
        if m:
            for token in m.group(1).split(","):
                collect_place_hints(hints, token)
        for call in _PLACE_CALL.finditer(line):
            collect_place_hints(hints, call.group(1))
        if line.startswith("ENDMAP"):
            if buffer is not None:
                if current_name:
                    name = current_name
                else:
                    anonymous += 1
                    name = f"anonymous-{anonymous}"
                maps.append(
                    MapDefinition(
                        name=name,
                        origin=origin,
                        relative_origin=relative_origin,
                        rows=tuple(buffer),
                        place_hints=frozenset(hints),
                    )
                )
            buffer = None
            current_name = None
            continue
        if line.startswith("MAP"):
            buffer = []
            continue
        if buffer is not None:
            buffer.append(raw)
    return maps


def parse_des_file(path: Path, des_root: Optional[Path] = None) -> List[MapDefinition]:
    """Parse one file; raises OSError/UnicodeDecodeError if unreadable."""
    relative = path.name
    if des_root is not None:
        try:
            relative = path.relative_to(des_root).as_posix()
        except ValueError:
            relative = path.as_posix()
    text = path.read_text(encoding="utf-8")
    return parse_des_text(text, path, relative)


def load_vault_library(source_root) -> Tuple[MapDefinition, ...]:
    """Load every ``*.des`` file below ``<source_root>/dat/des``.

    Files are visited in sorted order; unreadable files are skipped.
    """
    des_root = Path(source_root) / DES_SUBDIR
    if not des_root.is_dir():
        log.debug(event="vault_library_missing", path=des_root)
        return ()
    maps: List[MapDefinition] = []
    for path in sorted(des_root.rglob("*.des")):
        try:
            maps.extend(parse_des_file(path, des_root))
        except (OSError, UnicodeDecodeError) as e:
            log.warn(event="vault_file_skipped", path=path, error=type(e).__name__)
    log.debug(event="vault_library_loaded", path=des_root, count=len(maps))
    return tuple(maps)


def filter_vaults(
    library: Iterable[MapDefinition],
    branch_code: Optional[str],
    allow_random_vaults: bool,
    max_width: int,
    max_height: int,
) -> List[MapDefinition]:
    pool = []
    for vault in library:
        if vault.width > max_width or vault.height > max_height:
            continue
        if not allow_random_vaults and "vault" in vault.name.lower():
            continue
        if branch_code is not None and not vault.matches_branch(branch_code):
            continue
        pool.append(vault)
    return pool


def select_vaults(
    library: Iterable[MapDefinition],
    rng: random.Random,
    *,
    map_name: Optional[str] = None,
    branch_code: Optional[str] = None,
    allow_random_vaults: bool = True,
    max_width: int,
    max_height: int,
) -> List[MapDefinition]:
    """Pick the vaults for one build attempt.

    A forced ``map_name`` returns at most that one vault, ignores the
    random-vault switch and draws nothing from ``rng``. Otherwise the pool
    is shuffled and the first 1-3 entries are taken (exactly 1 once random
    vaults are disabled).
    """
    forced = map_name is not None
    pool = filter_vaults(library, branch_code, allow_random_vaults or forced, max_width, max_height)
    if not pool:
        return []
    if forced:
        target = map_name.strip().lower()
        return [v for v in pool if v.name.lower() == target][:1]
    budget = 1 + rng.randrange(3) if allow_random_vaults else 1
    rng.shuffle(pool)
    return pool[:budget]


__all__ = [
    "MapDefinition",
    "DES_SUBDIR",
    "collect_place_hints",
    "parse_des_text",
    "parse_des_file",
    "load_vault_library",
    "filter_vaults",
    "select_vaults",
]
