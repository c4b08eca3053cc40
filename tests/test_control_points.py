"""Tests for random control point continuation."""
from __future__ import annotations

import numpy as np
import pytest

from roadstream.config import StreamingParams
from roadstream.control_points import ControlPointSequence, make_rng
from roadstream.errors import PreconditionViolation


def test_seed_places_four_collinear_points() -> None:
    points = ControlPointSequence(StreamingParams(), make_rng(1))
    points.seed(spacing=10.0)
    assert len(points) == 4
    zs = [float(p[2]) for p in points.points()]
    assert zs == [-30.0, -20.0, -10.0, 0.0]
    assert all(p[0] == 0.0 and p[1] == 0.0 for p in points.points())


def test_zero_turn_extends_along_seed_line() -> None:
    params = StreamingParams(max_turn_angle=0.0, max_height_variation=0.0)
    points = ControlPointSequence(params, make_rng(11))
    points.seed(spacing=10.0)

    point, draw = points.append_next()

    assert point[0] == 0.0
    assert point[1] == 0.0
    assert params.min_segment_distance <= point[2] <= params.max_segment_distance
    assert point[2] == draw.distance
    assert draw.turn_angle == 0.0
    assert draw.height_offset == 0.0


def test_heights_stay_within_global_bounds() -> None:
    params = StreamingParams(
        max_height_variation=6.0,
        min_global_height=-2.0,
        max_global_height=3.0,
        retain_full_history=True,
    )
    points = ControlPointSequence(params, make_rng(5))
    points.seed()
    for _ in range(200):
        points.append_next()
    heights = [float(p[1]) for p in points.points()]
    assert len(heights) == 204
    assert min(heights) >= params.min_global_height
    assert max(heights) <= params.max_global_height


def test_height_offset_reports_clamped_change() -> None:
    params = StreamingParams(max_height_variation=5.0, min_global_height=0.0, max_global_height=0.0)
    points = ControlPointSequence(params, make_rng(3))
    points.seed()
    for _ in range(10):
        point, draw = points.append_next()
        assert point[1] == 0.0
        assert draw.height_offset == 0.0


def test_same_seed_reproduces_layout() -> None:
    params = StreamingParams()
    first = ControlPointSequence(params, make_rng(2024))
    second = ControlPointSequence(params, make_rng(2024))
    first.seed()
    second.seed()
    for _ in range(8):
        a, _ = first.append_next()
        b, _ = second.append_next()
        assert np.array_equal(a, b)


def test_history_is_bounded_without_renumbering() -> None:
    params = StreamingParams(segments_ahead=5)
    points = ControlPointSequence(params, make_rng(8))
    points.seed()
    for _ in range(20):
        points.append_next()

    assert len(points) == 24
    assert len(points.points()) == params.segments_ahead + 4
    assert points.first_index == 24 - (params.segments_ahead + 4)
    span = points.span(21)
    assert np.array_equal(span.p3, points[23])
    with pytest.raises(IndexError):
        points[0]


def test_ensure_lookahead_appends_only_when_needed() -> None:
    points = ControlPointSequence(StreamingParams(), make_rng(4))
    points.seed()
    points.ensure_lookahead(1)
    assert len(points) == 4
    points.ensure_lookahead(2)
    assert len(points) == 5
    span = points.span(2)
    assert span.index == 2
    assert np.array_equal(span.p0, points[1])


def test_span_requires_seeding() -> None:
    points = ControlPointSequence(StreamingParams(), make_rng(0))
    with pytest.raises(PreconditionViolation):
        points.span(1)
    with pytest.raises(PreconditionViolation):
        points.append_next()


def test_nearest_index_prefers_lowest_on_ties() -> None:
    points = ControlPointSequence(StreamingParams(), make_rng(0))
    points.seed(spacing=10.0)
    assert points.nearest_index((0.0, 0.0, -15.0)) == 1
    assert points.nearest_index((0.0, 0.0, 50.0)) == 3
