"""Level build orchestration: the retry / veto loop.

Each simulation owns one ``random.Random(seed)`` threaded through every
stage, so the whole run (retries included) is reproducible from the seed.
An attempt runs::

    layout (or special-branch builder)
      -> vault selection + placement      (placement veto)
      -> depth markers -> overlay
      -> connectivity repair              (connectivity veto)

Up to 50 attempts are made. After attempt 25 random vaults are disabled
for the rest of the run. If every attempt vetoes, the last attempt's grid
is returned with ``" (exhausted attempts)"`` appended to its provenance.
"""
from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from ..logging_utils import get_logger
from .branches import build_special_branch
from .config import SimulationConfig
from .connectivity import repair_connectivity
from .grid import TileGrid
from .layouts import generate_basic_layout, generate_layout
from .markers import apply_depth_markers
from .metrics import init_metrics
from .overlay import OverlayExecutor, OverlayScript, load_overlay_scripts, resolve_overlay_executor
from .placement import place_vault
from .render import render
from .vaults import MapDefinition, load_vault_library, select_vaults

log = get_logger("levelpreview.pipeline")

MAX_ATTEMPTS = 50
RANDOM_VAULT_CUTOFF = 25
EXHAUSTED_SUFFIX = " (exhausted attempts)"
FALLBACK_PROVENANCE = "basic-layout"


@dataclass(frozen=True)
class SimulationResult:
    grid: TileGrid
    provenance: str
    depth: int
    seed: int
    attempts: int = 1
    exhausted: bool = False
    metrics: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def rows(self) -> List[str]:
        return self.grid.rows()

    def render(self, include_border: bool = True) -> str:
        return render(self.grid, include_border=include_border)

    def to_dict(self, include_border: bool = True) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "depth": self.depth,
            "width": self.width,
            "height": self.height,
            "provenance": self.provenance,
            "attempts": self.attempts,
            "exhausted": self.exhausted,
            "rows": self.rows(),
            "text": self.render(include_border),
        }


class LevelBuild(NamedTuple):
    grid: TileGrid
    provenance: str
    success: bool
    veto: Optional[str] = None  # "placement" | "connectivity"
    vaults_placed: int = 0


class LevelSimulator:
    """Runs simulations against one loaded vault library and script set.

    The library, scripts and overlay executor are read-only after
    construction, so one simulator can serve concurrent ``simulate`` calls.
    """

    def __init__(
        self,
        library: Sequence[MapDefinition] = (),
        scripts: Sequence[OverlayScript] = (),
        overlay: Optional[OverlayExecutor] = None,
        source_root: Optional[Path] = None,
    ):
        self.library = tuple(library)
        self.scripts = tuple(scripts)
        self.overlay = overlay if overlay is not None else resolve_overlay_executor()
        self.source_root = source_root

    @classmethod
    def from_source_root(cls, source_root, overlay: Optional[OverlayExecutor] = None) -> "LevelSimulator":
        root = Path(source_root)
        return cls(load_vault_library(root), load_overlay_scripts(root), overlay, source_root=root)

    def simulate(self, config: SimulationConfig) -> SimulationResult:
        start = time.perf_counter()
        metrics = init_metrics()
        phase_times: Dict[str, float] = metrics['phase_ms']

        def _phase(label, fn, *a, **k):
            ps = time.perf_counter(); r = fn(*a, **k); pe = time.perf_counter()
            phase_times[label] = phase_times.get(label, 0.0) + (pe - ps) * 1000
            return r

        rng = random.Random(config.seed)
        allow_random_vaults = True
        last: Optional[LevelBuild] = None

        for attempt in range(1, MAX_ATTEMPTS + 1):
            metrics['attempts'] = attempt
            build = self._build_level(config, rng, allow_random_vaults, _phase)
            if build.success:
                metrics['vaults_placed'] = build.vaults_placed
                metrics['runtime_ms'] = (time.perf_counter() - start) * 1000
                log.debug(event="build_ok", attempt=attempt, provenance=build.provenance)
                return SimulationResult(
                    grid=build.grid,
                    provenance=build.provenance,
                    depth=config.depth,
                    seed=config.seed,
                    attempts=attempt,
                    metrics=metrics,
                )
            metrics[f'{build.veto}_vetoes'] += 1
            log.debug(event="build_veto", attempt=attempt, stage=build.veto, provenance=build.provenance)
            last = build
            if attempt == RANDOM_VAULT_CUTOFF:
                allow_random_vaults = False
                metrics['random_vaults_disabled_at'] = attempt
                log.debug(event="random_vaults_disabled", attempt=attempt)

        if last is None:
            grid = generate_basic_layout(config.width, config.height, rng)
            provenance = FALLBACK_PROVENANCE
        else:
            grid, provenance = last.grid, last.provenance
        metrics['runtime_ms'] = (time.perf_counter() - start) * 1000
        log.warn(event="build_exhausted", attempts=MAX_ATTEMPTS, seed=config.seed, provenance=provenance)
        return SimulationResult(
            grid=grid,
            provenance=provenance + EXHAUSTED_SUFFIX,
            depth=config.depth,
            seed=config.seed,
            attempts=MAX_ATTEMPTS,
            exhausted=True,
            metrics=metrics,
        )

    def _build_level(self, config: SimulationConfig, rng: random.Random, allow_random_vaults: bool, _phase) -> LevelBuild:
        plan = _phase('layout', self._build_plan, config, rng, allow_random_vaults)
        if not plan.success:
            return plan
        _phase('depth_markers', apply_depth_markers, plan.grid, config.depth)
        _phase('overlay', self.overlay.apply, plan.grid, self.scripts, rng)
        if not _phase('connectivity', repair_connectivity, plan.grid):
            return plan._replace(success=False, veto="connectivity")
        return plan

    def _build_plan(self, config: SimulationConfig, rng: random.Random, allow_random_vaults: bool) -> LevelBuild:
        special = build_special_branch(config.layout_branch, config.width, config.height, rng)
        if special is not None:
            return LevelBuild(special.grid, special.source, True)

        layout = generate_layout(config.width, config.height, rng, config.layout_branch)
        vaults = select_vaults(
            self.library,
            rng,
            map_name=config.map_name,
            branch_code=config.branch_code,
            allow_random_vaults=allow_random_vaults,
            max_width=config.width,
            max_height=config.height,
        )
        placed: Dict[str, None] = {}
        for vault in vaults:
            if place_vault(layout.grid, vault, rng) is None:
                return LevelBuild(layout.grid, f"DES:{vault.name} vetoed (placement)", False, "placement")
            placed[vault.name] = None
        provenance = layout.source
        if placed:
            provenance += " + DES:" + ",".join(placed)
        return LevelBuild(layout.grid, provenance, True, vaults_placed=len(vaults))


_simulators: Dict[Path, LevelSimulator] = {}
_simulators_lock = threading.Lock()


def get_simulator(source_root) -> LevelSimulator:
    """Shared simulator per resolved source root, loaded on first use."""
    key = Path(source_root).resolve()
    with _simulators_lock:
        sim = _simulators.get(key)
        if sim is None:
            sim = LevelSimulator.from_source_root(key)
            _simulators[key] = sim
        return sim


def clear_simulator_cache() -> None:
    with _simulators_lock:
        _simulators.clear()


def simulate(config: SimulationConfig) -> SimulationResult:
    return get_simulator(config.source_root).simulate(config)


__all__ = [
    "LevelSimulator",
    "SimulationResult",
    "LevelBuild",
    "MAX_ATTEMPTS",
    "RANDOM_VAULT_CUTOFF",
    "EXHAUSTED_SUFFIX",
    "get_simulator",
    "clear_simulator_cache",
    "simulate",
]
