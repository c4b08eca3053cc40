"""Random continuation of the Catmull-Rom control point list."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .config import StreamingParams
from .curve import CurveSpan
from .errors import PreconditionViolation
from .vector import FORWARD, as_vector, normalize, rotate_yaw

LOGGER = logging.getLogger(__name__)

SEED_POINT_COUNT = 4


def make_rng(seed: Optional[int]) -> np.random.Generator:
    """
    Create a numpy Generator without polluting global RNG state.
    """
    if seed is None:
        return np.random.default_rng()
    # Fold wide Python ints into the uint64 range numpy expects.
    return np.random.default_rng(int(seed) & ((1 << 64) - 1))


@dataclass(frozen=True)
class RandomDraw:
    """Random parameters used to place one control point."""

    distance: float = 0.0
    turn_angle: float = 0.0
    height_offset: float = 0.0


class ControlPointSequence:
    """Append-only list of control points addressed by absolute index.

    When ``params.history_limit`` is set the oldest points are dropped
    once the list grows past the limit; indices keep counting from the
    seed so span ``i`` always refers to the same four points.
    """

    def __init__(self, params: StreamingParams, rng: np.random.Generator) -> None:
        self._params = params
        self._rng = rng
        self._points: List[np.ndarray] = []
        self._offset = 0

    def __len__(self) -> int:
        return self._offset + len(self._points)

    def __getitem__(self, index: int) -> np.ndarray:
        local = index - self._offset
        if index < 0 or local < 0 or local >= len(self._points):
            raise IndexError(f"Control point {index} is not retained")
        return self._points[local]

    @property
    def first_index(self) -> int:
        """Absolute index of the oldest retained point."""

        return self._offset

    @property
    def is_seeded(self) -> bool:
        return len(self) >= SEED_POINT_COUNT

    def points(self) -> Tuple[np.ndarray, ...]:
        """Return the retained points, oldest first."""

        return tuple(self._points)

    def seed(
        self,
        origin: Iterable[float] = (0.0, 0.0, 0.0),
        direction: Iterable[float] = FORWARD,
        spacing: Optional[float] = None,
    ) -> None:
        """Reset to four collinear points ending at ``origin``."""

        start = as_vector(origin)
        axis = normalize(as_vector(direction))
        step = self._params.seed_spacing if spacing is None else float(spacing)
        if step <= 0.0:
            raise ValueError("seed spacing must be positive")
        self._points = [start - axis * (step * (SEED_POINT_COUNT - 1 - k)) for k in range(SEED_POINT_COUNT)]
        self._offset = 0

    def append_next(self) -> Tuple[np.ndarray, RandomDraw]:
        if not self.is_seeded:
            raise PreconditionViolation("Control points must be seeded before extending them")
        params = self._params
        last = self._points[-1]
        prev = self._points[-2]
        direction = normalize(last - prev)

        # //1.- Draw the step length and yaw relative to the current heading.
        distance = float(self._rng.uniform(params.min_segment_distance, params.max_segment_distance))
        turn_angle = float(self._rng.uniform(-params.max_turn_angle, params.max_turn_angle))
        offset_direction = rotate_yaw(direction, turn_angle)
        point = last + offset_direction * distance

        # //2.- Offset the height and clamp it into the global band.
        raw_height = last[1] + float(self._rng.uniform(-params.max_height_variation, params.max_height_variation))
        point[1] = min(max(raw_height, params.min_global_height), params.max_global_height)

        # //3.- Append and drop history beyond the retention limit.
        self._points.append(point)
        self._trim()
        draw = RandomDraw(distance=distance, turn_angle=turn_angle, height_offset=float(point[1] - last[1]))
        LOGGER.debug("Control point %d at %s (%s)", len(self) - 1, point, draw)
        return point, draw

    def ensure_lookahead(self, index: int) -> RandomDraw:
        """Extend the list until span ``index`` has its ``p3`` available."""

        draw = RandomDraw()
        while index + 2 >= len(self):
            _, draw = self.append_next()
        return draw

    def span(self, index: int) -> CurveSpan:
        if not self.is_seeded:
            raise PreconditionViolation("Control points must be seeded before evaluating spans")
        try:
            p0, p1, p2, p3 = (self[i] for i in range(index - 1, index + 3))
        except IndexError as exc:
            raise PreconditionViolation(f"Span {index} is not available: {exc}") from exc
        return CurveSpan(index=index, p0=p0, p1=p1, p2=p2, p3=p3)

    def nearest_index(self, position: Sequence[float]) -> int:
        """Absolute index of the retained point nearest ``position``.

        Ties resolve to the lowest index.
        """

        if not self._points:
            raise PreconditionViolation("No control points to search")
        target = np.asarray(position, dtype=float)
        best_index = 0
        best_distance = float("inf")
        for local, point in enumerate(self._points):
            d = float(np.linalg.norm(point - target))
            if d < best_distance:
                best_distance = d
                best_index = local
        return best_index + self._offset

    def _trim(self) -> None:
        limit = self._params.history_limit
        if limit is None:
            return
        limit = max(limit, SEED_POINT_COUNT)
        excess = len(self._points) - limit
        if excess > 0:
            del self._points[:excess]
            self._offset += excess


__all__ = ["ControlPointSequence", "RandomDraw", "make_rng", "SEED_POINT_COUNT"]
