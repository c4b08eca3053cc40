"""Closed-form Catmull-Rom evaluation over four control points."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def catmull_rom_position(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray, p3: np.ndarray, t: float) -> np.ndarray:
    """Point on the uniform Catmull-Rom curve between ``p1`` and ``p2``."""

    t2 = t * t
    t3 = t2 * t
    return 0.5 * (
        2.0 * p1
        + (-p0 + p2) * t
        + (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * t2
        + (-p0 + 3.0 * p1 - 3.0 * p2 + p3) * t3
    )


def catmull_rom_tangent(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray, p3: np.ndarray, t: float) -> np.ndarray:
    """Derivative of :func:`catmull_rom_position` with respect to ``t``.

    The result is not normalized.
    """

    t2 = t * t
    return 0.5 * (
        (-p0 + p2)
        + 2.0 * (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * t
        + 3.0 * (-p0 + 3.0 * p1 - 3.0 * p2 + p3) * t2
    )


@dataclass(frozen=True)
class CurveSpan:
    """Four consecutive control points; ``t`` in ``[0, 1]`` runs ``p1 -> p2``."""

    index: int
    p0: np.ndarray
    p1: np.ndarray
    p2: np.ndarray
    p3: np.ndarray

    def position(self, t: float) -> np.ndarray:
        return catmull_rom_position(self.p0, self.p1, self.p2, self.p3, t)

    def tangent(self, t: float) -> np.ndarray:
        return catmull_rom_tangent(self.p0, self.p1, self.p2, self.p3, t)

    def points(self) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        return self.p0, self.p1, self.p2, self.p3


def sample_parameters(subdivisions: int) -> np.ndarray:
    """Evenly spaced ``t`` values ``i / subdivisions`` for ``i = 0..subdivisions``."""

    return np.arange(subdivisions + 1, dtype=float) / float(subdivisions)


__all__ = ["catmull_rom_position", "catmull_rom_tangent", "CurveSpan", "sample_parameters"]
