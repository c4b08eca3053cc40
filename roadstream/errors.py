"""Exception taxonomy shared by the streaming pipeline."""
from __future__ import annotations


class RoadStreamError(Exception):
    """Base class for every error raised by :mod:`roadstream`."""


class PreconditionViolation(RoadStreamError, RuntimeError):
    """The streamer or control points were used before being seeded."""


class DegenerateGeometry(RoadStreamError, ValueError):
    """A direction could not be derived from a zero-length vector."""


class ChunkUnderflow(RoadStreamError):
    """Fewer than two rows remain, so no river chunk can be formed."""

    def __init__(self, row_count: int) -> None:
        super().__init__(f"River chunk needs at least 2 rows, got {row_count}")
        self.row_count = row_count


class StitchMismatch(RoadStreamError, ValueError):
    """A cached boundary row does not fit the chunk being built."""

    def __init__(self, expected: tuple[int, ...], actual: tuple[int, ...]) -> None:
        super().__init__(f"Cached river row has shape {actual}, expected {expected}")
        self.expected = expected
        self.actual = actual


__all__ = [
    "RoadStreamError",
    "PreconditionViolation",
    "DegenerateGeometry",
    "ChunkUnderflow",
    "StitchMismatch",
]
