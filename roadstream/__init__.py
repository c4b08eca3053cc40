"""Endless road and river streaming.

Generates a Catmull-Rom road in front of a moving observer together with
a parallel river, builds ribbon and grid meshes just in time, and retires
them once they fall behind.
"""

from .config import StreamingParams, load_seed, load_streaming_config
from .control_points import ControlPointSequence, RandomDraw, make_rng
from .curve import CurveSpan, catmull_rom_position, catmull_rom_tangent
from .errors import (
    ChunkUnderflow,
    DegenerateGeometry,
    PreconditionViolation,
    RoadStreamError,
    StitchMismatch,
)
from .geometry import MeshBuffer
from .ribbon import build_ribbon_mesh
from .river import OffsetCurve, RiverChunk, build_offset_curve, build_river_chunks, row_windows
from .streaming import Segment, SegmentStreamer, StreamerState, StreamListener, TickReport
from .wind import WindFieldEstimator, WindState

__all__ = [
    "StreamingParams",
    "load_seed",
    "load_streaming_config",
    "ControlPointSequence",
    "RandomDraw",
    "make_rng",
    "CurveSpan",
    "catmull_rom_position",
    "catmull_rom_tangent",
    "RoadStreamError",
    "PreconditionViolation",
    "DegenerateGeometry",
    "ChunkUnderflow",
    "StitchMismatch",
    "MeshBuffer",
    "build_ribbon_mesh",
    "OffsetCurve",
    "RiverChunk",
    "build_offset_curve",
    "build_river_chunks",
    "row_windows",
    "Segment",
    "SegmentStreamer",
    "StreamerState",
    "StreamListener",
    "TickReport",
    "WindFieldEstimator",
    "WindState",
]
