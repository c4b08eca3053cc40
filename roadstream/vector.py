"""Lightweight 3D vector helpers built on numpy.

Points and directions are plain ``float64`` arrays of shape ``(3,)``
using a Y-up convention: ``x``/``z`` span the ground plane and ``y`` is
height. Only what the rest of the package needs is implemented.
"""
from __future__ import annotations

import math
from typing import Iterable, Optional

import numpy as np

from .errors import DegenerateGeometry

UP = np.array([0.0, 1.0, 0.0])
FORWARD = np.array([0.0, 0.0, 1.0])

EPSILON = 1e-9


def as_vector(values: Iterable[float]) -> np.ndarray:
    """Return ``values`` as a fresh ``float64`` 3-vector."""

    vector = np.array(values, dtype=float)
    if vector.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {vector.shape}")
    return vector


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))


def normalize(vector: np.ndarray) -> np.ndarray:
    """Return the unit vector along ``vector``.

    Raises :class:`DegenerateGeometry` when the vector is (nearly) zero
    or not finite.
    """

    norm = float(np.linalg.norm(vector))
    if norm < EPSILON or not math.isfinite(norm):
        raise DegenerateGeometry("Cannot normalize zero-length vector")
    return vector / norm


def normalize_or(vector: np.ndarray, fallback: Optional[np.ndarray]) -> Optional[np.ndarray]:
    """Normalize ``vector`` or return ``fallback`` when it is degenerate."""

    try:
        return normalize(vector)
    except DegenerateGeometry:
        return fallback


def horizontal(vector: np.ndarray) -> np.ndarray:
    """Project ``vector`` onto the ground plane by zeroing its height."""

    flat = np.array(vector, dtype=float)
    flat[1] = 0.0
    return flat


def left_of(direction: np.ndarray) -> np.ndarray:
    """Unit vector ``up x direction``, horizontal and perpendicular to it."""

    return normalize(np.cross(UP, direction))


def rotate_yaw(vector: np.ndarray, degrees: float) -> np.ndarray:
    """Rotate ``vector`` around the vertical axis by ``degrees``.

    Positive angles turn ``+z`` towards ``+x`` (clockwise seen from above).
    """

    radians = math.radians(degrees)
    cos_a = math.cos(radians)
    sin_a = math.sin(radians)
    x, y, z = vector
    return np.array([x * cos_a + z * sin_a, y, -x * sin_a + z * cos_a])


def lerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    return a + (b - a) * t


__all__ = [
    "UP",
    "FORWARD",
    "EPSILON",
    "as_vector",
    "distance",
    "normalize",
    "normalize_or",
    "horizontal",
    "left_of",
    "rotate_yaw",
    "lerp",
]
