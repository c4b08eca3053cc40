"""River track: offset curve generation, chunking and boundary stitching.

The river follows the road at a fixed lateral distance. Each road span
produces one offset curve of ``river_subdivisions + 1`` cross-section
rows, which is cut into chunks of at most ``max_rows_per_chunk`` rows.
Consecutive chunks share one row. Whenever a cached boundary row is
available the next chunk reuses those exact vertex positions as its
first row, so chunk seams never open up, even across spans whose offset
curves were computed independently.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from .config import StreamingParams
from .curve import CurveSpan, sample_parameters
from .errors import ChunkUnderflow, DegenerateGeometry, StitchMismatch
from .geometry import MeshBuffer
from .vector import horizontal, left_of, normalize_or

LOGGER = logging.getLogger(__name__)

FLOW_X = "flow.x"
FLOW_Y = "flow.y"


@dataclass(frozen=True)
class OffsetCurve:
    """Ordered river centreline samples for one road span."""

    span_index: int
    parameters: np.ndarray
    centers: np.ndarray
    lefts: np.ndarray

    @property
    def row_count(self) -> int:
        return int(self.centers.shape[0])


@dataclass
class RiverChunk:
    """A block of consecutive river rows with its own mesh."""

    span_index: int
    row_range: Tuple[int, int]
    mesh: MeshBuffer
    first_row: np.ndarray
    last_row: np.ndarray
    material_params: Dict[str, float] = field(default_factory=lambda: {FLOW_X: 0.0, FLOW_Y: 0.0})

    @property
    def row_count(self) -> int:
        return self.row_range[1] - self.row_range[0]

    def apply_flow(self, flow: np.ndarray) -> None:
        self.material_params[FLOW_X] = float(flow[0])
        self.material_params[FLOW_Y] = float(flow[1])

    def summary(self) -> str:
        start, end = self.row_range
        return f"span {self.span_index} rows [{start}, {end}) {self.mesh.summary()}"


# //1.- Offset the road centreline sideways using a smoothed horizontal heading.
def build_offset_curve(
    span: CurveSpan,
    params: StreamingParams,
    fallback_direction: Optional[np.ndarray] = None,
) -> OffsetCurve:
    ts = sample_parameters(params.river_subdivisions)
    tangents = [span.tangent(float(t)) for t in ts]
    last = len(ts) - 1
    offset = params.river_offset

    centers = np.empty((len(ts), 3))
    lefts = np.empty((len(ts), 3))
    previous = fallback_direction
    for i, t in enumerate(ts):
        averaged = (tangents[i] + tangents[min(i + 1, last)]) * 0.5
        direction = normalize_or(horizontal(averaged), previous)
        if direction is None:
            raise DegenerateGeometry(f"Span {span.index} has no horizontal heading for the river")
        previous = direction
        left = left_of(direction)
        center = span.position(float(t)) + left * offset
        center[1] = params.river_height
        centers[i] = center
        lefts[i] = left
    return OffsetCurve(span_index=span.index, parameters=ts, centers=centers, lefts=lefts)


# //2.- Split rows into windows that overlap by exactly one row.
def row_windows(row_count: int, max_rows: int) -> Iterator[Tuple[int, int]]:
    if max_rows < 2:
        raise ValueError("max_rows must be >= 2")
    start = 0
    while True:
        end = min(start + max_rows, row_count)
        yield start, end
        if end >= row_count:
            return
        start = end - 1


# //3.- Reject cached rows that do not match the current row width.
def validate_cached_row(cached_row: np.ndarray, columns: int) -> np.ndarray:
    expected = (columns, 3)
    actual = tuple(np.shape(cached_row))
    if actual != expected:
        raise StitchMismatch(expected, actual)
    return cached_row


# //4.- Lay out the vertex grid, forcing the first row onto the cached seam.
def build_chunk_mesh(
    curve: OffsetCurve,
    start: int,
    end: int,
    params: StreamingParams,
    cached_row: Optional[np.ndarray] = None,
) -> Tuple[MeshBuffer, np.ndarray]:
    rows = end - start
    if rows < 2:
        raise ChunkUnderflow(rows)
    width_subdiv = params.river_hoz_subdivisions
    columns = width_subdiv + 1

    across = (np.arange(columns, dtype=float) / width_subdiv - 0.5) * params.river_width
    grid = curve.centers[start:end, None, :] + curve.lefts[start:end, None, :] * across[None, :, None]
    if cached_row is not None:
        grid[0] = cached_row

    u = np.arange(columns, dtype=float) / width_subdiv
    v = curve.parameters[start:end]
    uvs = np.stack(np.broadcast_arrays(u[None, :], v[:, None]), axis=-1)

    indices: List[int] = []
    for r in range(rows - 1):
        for c in range(width_subdiv):
            bottom_left = r * columns + c
            bottom_right = bottom_left + 1
            top_left = bottom_left + columns
            top_right = top_left + 1
            indices.extend([bottom_left, top_left, bottom_right])
            indices.extend([bottom_right, top_left, top_right])

    mesh = MeshBuffer.build(grid.reshape(-1, 3), np.array(indices), uvs.reshape(-1, 2))
    return mesh, grid


# //5.- Build every chunk of one offset curve, threading the seam cache through.
def build_river_chunks(
    curve: OffsetCurve,
    params: StreamingParams,
    cached_row: Optional[np.ndarray] = None,
) -> Tuple[List[RiverChunk], Optional[np.ndarray]]:
    columns = params.river_hoz_subdivisions + 1
    chunks: List[RiverChunk] = []
    for start, end in row_windows(curve.row_count, params.max_rows_per_chunk):
        if cached_row is not None:
            try:
                validate_cached_row(cached_row, columns)
            except StitchMismatch as exc:
                LOGGER.warning("Rejecting cached river row for span %d: %s", curve.span_index, exc)
                cached_row = None
        try:
            mesh, grid = build_chunk_mesh(curve, start, end, params, cached_row)
        except ChunkUnderflow as exc:
            LOGGER.debug("Stopping river chunking for span %d: %s", curve.span_index, exc)
            break
        chunk = RiverChunk(
            span_index=curve.span_index,
            row_range=(start, end),
            mesh=mesh,
            first_row=grid[0].copy(),
            last_row=grid[-1].copy(),
        )
        chunks.append(chunk)
        cached_row = chunk.last_row.copy()
        LOGGER.debug("Built river chunk %s", chunk.summary())
    return chunks, cached_row


__all__ = [
    "FLOW_X",
    "FLOW_Y",
    "OffsetCurve",
    "RiverChunk",
    "build_offset_curve",
    "row_windows",
    "validate_cached_row",
    "build_chunk_mesh",
    "build_river_chunks",
]
