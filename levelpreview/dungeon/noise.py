"""Layered gradient noise for heightmap layouts.

Each octave owns a lattice of unit gradient vectors drawn from the shared
random source, so two samples at nearby coordinates agree (coherent noise)
and the whole field is reproducible from the simulation seed.
"""
from __future__ import annotations

import math
import random
from typing import List, Tuple

OCTAVES = 4

Gradient = Tuple[float, float]


def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6 - 15) + 10)


def _lerp(a: float, b: float, t: float) -> float:
    return a + t * (b - a)


class GradientLattice:
    def __init__(self, cells: int, rng: random.Random):
        self.cells = cells
        size = cells + 1
        self.gradients: List[List[Gradient]] = []
        for _ in range(size):
            row = []
            for _ in range(size):
                angle = rng.random() * math.pi * 2
                row.append((math.cos(angle), math.sin(angle)))
            self.gradients.append(row)

    def _dot(self, ix: int, iy: int, x: float, y: float) -> float:
        gx, gy = self.gradients[iy][ix]
        return gx * (x - ix) + gy * (y - iy)

    def sample(self, x: float, y: float) -> float:
        """Gradient noise at lattice-space ``(x, y)``, roughly in [-1, 1]."""
        x0 = min(int(math.floor(x)), self.cells - 1)
        y0 = min(int(math.floor(y)), self.cells - 1)
        u = _fade(x - x0)
        v = _fade(y - y0)
        top = _lerp(self._dot(x0, y0, x, y), self._dot(x0 + 1, y0, x, y), u)
        bottom = _lerp(self._dot(x0, y0 + 1, x, y), self._dot(x0 + 1, y0 + 1, x, y), u)
        return _lerp(top, bottom, v)


def layered_noise_field(width: int, height: int, rng: random.Random, octaves: int = OCTAVES) -> List[List[float]]:
    """Return a ``height × width`` field of values mapped into roughly [0, 1].

    Amplitude halves and frequency doubles with each octave.
    """
    lattices = []
    frequency = 1
    for _ in range(octaves):
        # +1 cell of slack so the base octave still has interior variation
        lattices.append(GradientLattice(frequency + 1, rng))
        frequency *= 2
    field: List[List[float]] = []
    for y in range(height):
        ny = y / height
        row = []
        for x in range(width):
            nx = x / width
            value = 0.0
            amplitude = 1.0
            for lattice in lattices:
                scale = lattice.cells - 1
                value += amplitude * lattice.sample(nx * scale + 0.5, ny * scale + 0.5)
                amplitude *= 0.5
            row.append((value + 1) / 2.0)
        field.append(row)
    return field


__all__ = ["layered_noise_field", "GradientLattice", "OCTAVES"]
