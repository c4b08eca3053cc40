"""Road ribbon tessellation for a single Catmull-Rom span."""
from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from .curve import CurveSpan, sample_parameters
from .errors import DegenerateGeometry
from .geometry import MeshBuffer
from .vector import left_of, normalize

LOGGER = logging.getLogger(__name__)


def stable_tangent(span: CurveSpan, t: float, fallback: Optional[np.ndarray]) -> np.ndarray:
    """Unit tangent at ``t`` whose ``up x tangent`` is well defined.

    A zero tangent, or one pointing straight up, is replaced by
    ``fallback``. Raises :class:`DegenerateGeometry` when no fallback
    is available.
    """

    try:
        tangent = normalize(span.tangent(t))
        left_of(tangent)
        return tangent
    except DegenerateGeometry:
        if fallback is None:
            raise DegenerateGeometry(f"Span {span.index} has no usable tangent at t={t:.3f}") from None
        LOGGER.warning("Degenerate tangent on span %d at t=%.3f, reusing previous direction", span.index, t)
        return fallback


def build_ribbon_mesh(
    span: CurveSpan,
    width: float,
    subdivisions: int,
    fallback_tangent: Optional[np.ndarray] = None,
) -> MeshBuffer:
    """Tessellate ``span`` into a quad strip ``width`` wide.

    Each sample emits a left and a right vertex with UVs ``(0, t)`` and
    ``(1, t)``; consecutive samples are joined by two triangles.
    """

    if subdivisions < 1:
        raise ValueError("subdivisions must be >= 1")
    half_width = width * 0.5
    vertices: List[np.ndarray] = []
    uvs: List[tuple[float, float]] = []
    indices: List[int] = []
    previous = fallback_tangent

    # //1.- Emit a left and right vertex per sample across the ribbon width.
    for i, t in enumerate(sample_parameters(subdivisions)):
        t = float(t)
        center = span.position(t)
        tangent = stable_tangent(span, t, previous)
        previous = tangent
        left = left_of(tangent) * half_width

        vertices.append(center + left)
        vertices.append(center - left)
        uvs.append((0.0, t))
        uvs.append((1.0, t))

        # //2.- Join this cross-section to the previous one with two triangles.
        if i > 0:
            base = len(vertices) - 2
            prev_base = base - 2
            indices.extend([prev_base, prev_base + 1, base])
            indices.extend([base + 1, base, prev_base + 1])

    return MeshBuffer.build(np.array(vertices), np.array(indices), np.array(uvs))


__all__ = ["build_ribbon_mesh", "stable_tangent"]
