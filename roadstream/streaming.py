"""Segment streaming: build road and river ahead, retire them behind.

:class:`SegmentStreamer` owns every piece of mutable state in the
pipeline: the control points, the active road segments, the active river
chunks and the single-slot river seam cache. An external loop calls
:meth:`SegmentStreamer.tick` once per step with the observer position
and the elapsed time.
"""
from __future__ import annotations

import enum
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from .config import StreamingParams
from .control_points import ControlPointSequence, RandomDraw, make_rng
from .errors import DegenerateGeometry, PreconditionViolation
from .geometry import MeshBuffer
from .ribbon import build_ribbon_mesh, stable_tangent
from .river import RiverChunk, build_offset_curve, build_river_chunks
from .vector import FORWARD, as_vector, distance, horizontal, normalize_or
from .wind import WindFieldEstimator

LOGGER = logging.getLogger(__name__)


class StreamerState(enum.Enum):
    EMPTY = "empty"
    SEEDED = "seeded"
    STEADY = "steady"


@dataclass(frozen=True)
class SegmentDiagnostics:
    """Inputs and random draw behind one road segment."""

    span_index: int
    control_points: Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]
    draw: RandomDraw


@dataclass
class Segment:
    """One generated road span and its mesh."""

    span_index: int
    mesh: MeshBuffer
    start_position: np.ndarray
    end_position: np.ndarray
    end_tangent: np.ndarray
    diagnostics: SegmentDiagnostics

    def summary(self) -> str:
        return f"Segment {self.span_index}: {self.mesh.summary()}"


class StreamListener:
    """Receives lifecycle notifications; every hook defaults to a no-op.

    The segment and chunk records are the handles: a renderer attaches
    its own resources when notified of creation and drops them on
    retirement.
    """

    def segment_created(self, segment: Segment) -> None:
        pass

    def segment_retired(self, segment: Segment) -> None:
        pass

    def chunk_created(self, chunk: RiverChunk) -> None:
        pass

    def chunk_retired(self, chunk: RiverChunk) -> None:
        pass

    def flow_updated(self, chunk: RiverChunk, params: Mapping[str, float]) -> None:
        pass


@dataclass
class TickReport:
    """What a single :meth:`SegmentStreamer.tick` changed."""

    created: Optional[Segment] = None
    retired: Optional[Segment] = None
    created_chunks: List[RiverChunk] = field(default_factory=list)
    retired_chunks: List[RiverChunk] = field(default_factory=list)
    flow: np.ndarray = field(default_factory=lambda: np.zeros(2))
    segment_count: int = 0
    chunk_count: int = 0


class SegmentStreamer:
    """Create-ahead / retire-behind window over the road and river tracks."""

    def __init__(
        self,
        params: Optional[StreamingParams] = None,
        rng: Optional[np.random.Generator] = None,
        listener: Optional[StreamListener] = None,
    ) -> None:
        self.params = params or StreamingParams()
        self.listener = listener or StreamListener()
        self.control_points = ControlPointSequence(self.params, rng if rng is not None else make_rng(None))
        self.wind = WindFieldEstimator(self.params.wind_lerp_speed)
        self.state = StreamerState.EMPTY
        self._segments: Deque[Segment] = deque()
        self._chunks: Deque[RiverChunk] = deque()
        self._cursor = 1
        self._row_cache: Optional[np.ndarray] = None

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def chunks(self) -> Tuple[RiverChunk, ...]:
        return tuple(self._chunks)

    @property
    def cursor(self) -> int:
        """Span index the next segment will be built from."""

        return self._cursor

    @property
    def row_cache(self) -> Optional[np.ndarray]:
        return None if self._row_cache is None else self._row_cache.copy()

    def start(
        self,
        origin: Iterable[float] = (0.0, 0.0, 0.0),
        direction: Iterable[float] = FORWARD,
    ) -> None:
        """Seed the control points and build the initial segments."""

        if self.state is not StreamerState.EMPTY:
            raise PreconditionViolation("Streamer has already been started")
        self.control_points.seed(origin, direction)
        for _ in range(self.params.segments_ahead):
            if self._create_segment() is None:
                raise PreconditionViolation("Failed to build the initial road segments")
        self.state = StreamerState.SEEDED
        LOGGER.info("Streamer seeded with %d segments and %d river chunks", len(self._segments), len(self._chunks))

    def tick(self, observer_position: Iterable[float], delta_time: float) -> TickReport:
        if self.state is StreamerState.EMPTY or not self._segments:
            raise PreconditionViolation("tick() called before start()")
        observer = as_vector(observer_position)
        ahead = self.params.segments_ahead
        threshold = 2.0 * self.params.max_segment_distance
        report = TickReport()

        # //1.- Create ahead: refill a short window, extend a full one only when the road end is near.
        count = len(self._segments)
        if count < ahead or (count == ahead and distance(observer, self._segments[-1].end_position) < threshold):
            chunk_count = len(self._chunks)
            report.created = self._create_segment()
            if report.created is not None:
                report.created_chunks = list(self._chunks)[chunk_count:]

        # //2.- Retire behind, never shrinking below segments_ahead - 1 (or a single segment).
        floor = max(ahead - 1, 1)
        if len(self._segments) > floor and distance(observer, self._segments[0].end_position) > threshold:
            report.retired, report.retired_chunks = self._retire_oldest()

        # //3.- Steer the river flow and push it to every live chunk.
        report.flow = self.wind.update(self.control_points, observer, delta_time).copy()
        self.wind.broadcast(self._chunks)
        for chunk in self._chunks:
            self.listener.flow_updated(chunk, chunk.material_params)

        self.state = StreamerState.STEADY
        report.segment_count = len(self._segments)
        report.chunk_count = len(self._chunks)
        return report

    def _create_segment(self) -> Optional[Segment]:
        params = self.params
        index = self._cursor
        # //4.- Build road and river geometry before touching the window.
        fallback = self._segments[-1].end_tangent if self._segments else None
        try:
            draw = self.control_points.ensure_lookahead(index)
            span = self.control_points.span(index)
            mesh = build_ribbon_mesh(span, params.road_width, params.subdivisions, fallback)
            end_tangent = stable_tangent(span, 1.0, fallback)
            river_fallback = None if fallback is None else normalize_or(horizontal(fallback), None)
            curve = build_offset_curve(span, params, river_fallback)
            chunks, row_cache = build_river_chunks(curve, params, self._row_cache)
        except DegenerateGeometry as exc:
            LOGGER.error("Skipping segment %d: %s", index, exc)
            return None

        # //5.- Commit the segment, its chunks and the new seam cache together.
        segment = Segment(
            span_index=index,
            mesh=mesh,
            start_position=span.position(0.0),
            end_position=span.position(1.0),
            end_tangent=end_tangent,
            diagnostics=SegmentDiagnostics(span_index=index, control_points=span.points(), draw=draw),
        )
        self._segments.append(segment)
        self._chunks.extend(chunks)
        self._row_cache = row_cache
        self._cursor += 1
        LOGGER.debug("Created %s with %d river chunks", segment.summary(), len(chunks))

        self.listener.segment_created(segment)
        for chunk in chunks:
            self.listener.chunk_created(chunk)
        return segment

    def _retire_oldest(self) -> Tuple[Segment, List[RiverChunk]]:
        # //6.- Release the segment first, then every chunk generated alongside it.
        segment = self._segments.popleft()
        segment.mesh.release()
        LOGGER.debug("Retired segment %d", segment.span_index)
        self.listener.segment_retired(segment)

        retired: List[RiverChunk] = []
        while self._chunks and self._chunks[0].span_index <= segment.span_index:
            chunk = self._chunks.popleft()
            chunk.mesh.release()
            retired.append(chunk)
            self.listener.chunk_retired(chunk)
        return segment, retired

    def summary(self) -> Dict[str, object]:
        spans = [segment.span_index for segment in self._segments]
        return {
            "state": self.state.value,
            "cursor": self._cursor,
            "segments": len(self._segments),
            "chunks": len(self._chunks),
            "span_range": (spans[0], spans[-1]) if spans else None,
            "control_points": len(self.control_points),
            "flow": tuple(float(v) for v in self.wind.flow),
        }

    def band_summary(self) -> str:
        return ", ".join(
            f"{segment.span_index}:{segment.mesh.vertex_count}v" for segment in self._segments
        )


__all__ = [
    "StreamerState",
    "SegmentDiagnostics",
    "Segment",
    "StreamListener",
    "TickReport",
    "SegmentStreamer",
]
