"""Smoothed river flow direction derived from the nearest control points."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import numpy as np

from .control_points import ControlPointSequence
from .river import RiverChunk
from .vector import lerp


@dataclass
class WindState:
    """Current and target flow direction on the ground plane ``(x, z)``."""

    current: np.ndarray = field(default_factory=lambda: np.zeros(2))
    target: np.ndarray = field(default_factory=lambda: np.zeros(2))
    lerp_speed: float = 1.5


class WindFieldEstimator:
    """Steers the flow vector towards the local road heading each tick.

    The blend factor is ``lerp_speed * dt`` clamped to ``[0, 1]``, so
    the amount of smoothing depends on the tick rate.
    """

    def __init__(self, lerp_speed: float, state: Optional[WindState] = None) -> None:
        self.state = state or WindState(lerp_speed=lerp_speed)
        self.state.lerp_speed = lerp_speed

    @property
    def flow(self) -> np.ndarray:
        return self.state.current

    def target_direction(self, points: ControlPointSequence, observer: Sequence[float]) -> Optional[np.ndarray]:
        """Unit heading from the nearest control point to the one after it."""

        # //1.- Head from the nearest retained point towards its successor.
        nearest = points.nearest_index(observer)
        following = min(nearest + 1, len(points) - 1)
        heading = points[following] - points[nearest]
        # //2.- Project onto the ground plane; a vertical or empty heading yields nothing.
        flat = np.array([heading[0], heading[2]], dtype=float)
        norm = float(np.linalg.norm(flat))
        if norm < 1e-9:
            return None
        return flat / norm

    def update(self, points: ControlPointSequence, observer: Sequence[float], dt: float) -> np.ndarray:
        target = self.target_direction(points, observer)
        if target is not None:
            self.state.target = target
        # //3.- Blend towards the target with a dt-scaled factor clamped to [0, 1].
        factor = min(max(self.state.lerp_speed * dt, 0.0), 1.0)
        self.state.current = lerp(self.state.current, self.state.target, factor)
        return self.state.current

    def broadcast(self, chunks: Iterable[RiverChunk]) -> None:
        for chunk in chunks:
            chunk.apply_flow(self.state.current)


__all__ = ["WindState", "WindFieldEstimator"]
