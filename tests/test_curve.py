from __future__ import annotations

import numpy as np
import pytest

from roadstream.curve import CurveSpan, catmull_rom_position, catmull_rom_tangent, sample_parameters

P0 = np.array([0.0, 0.0, 0.0])
P1 = np.array([3.0, 1.0, 10.0])
P2 = np.array([-2.0, 2.5, 21.0])
P3 = np.array([4.0, -1.0, 33.0])


@pytest.mark.parametrize("t", [0.0, 0.25, 0.5, 0.9, 1.0])
def test_position_and_tangent_are_pure(t: float) -> None:
    first = catmull_rom_position(P0, P1, P2, P3, t)
    second = catmull_rom_position(P0.copy(), P1.copy(), P2.copy(), P3.copy(), t)
    assert np.array_equal(first, second)

    tangent_a = catmull_rom_tangent(P0, P1, P2, P3, t)
    tangent_b = catmull_rom_tangent(P0, P1, P2, P3, t)
    assert np.array_equal(tangent_a, tangent_b)


def test_position_interpolates_inner_points() -> None:
    assert np.array_equal(catmull_rom_position(P0, P1, P2, P3, 0.0), P1)
    assert catmull_rom_position(P0, P1, P2, P3, 1.0) == pytest.approx(P2)


def test_tangent_matches_finite_difference() -> None:
    h = 1e-6
    for t in (0.1, 0.5, 0.8):
        forward = catmull_rom_position(P0, P1, P2, P3, t + h)
        backward = catmull_rom_position(P0, P1, P2, P3, t - h)
        numeric = (forward - backward) / (2 * h)
        assert catmull_rom_tangent(P0, P1, P2, P3, t) == pytest.approx(numeric, rel=1e-5, abs=1e-5)


def test_endpoint_tangents_follow_neighbour_chords() -> None:
    assert catmull_rom_tangent(P0, P1, P2, P3, 0.0) == pytest.approx((P2 - P0) * 0.5)
    assert catmull_rom_tangent(P0, P1, P2, P3, 1.0) == pytest.approx((P3 - P1) * 0.5)


def test_straight_span_midpoint(straight_span: CurveSpan) -> None:
    assert straight_span.position(0.5) == pytest.approx([0.0, 0.0, 15.0])
    assert straight_span.tangent(0.5) == pytest.approx([0.0, 0.0, 10.0])


def test_sample_parameters_cover_unit_interval() -> None:
    ts = sample_parameters(4)
    assert ts.tolist() == [0.0, 0.25, 0.5, 0.75, 1.0]
