from __future__ import annotations

import numpy as np
import pytest

from roadstream.geometry import MeshBuffer


def make_triangle() -> MeshBuffer:
    return MeshBuffer.build(
        np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 2.0], [3.0, 0.0, 0.0]]),
        np.array([0, 1, 2]),
        np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0]]),
    )


def test_finalize_computes_normals_and_bounds() -> None:
    mesh = make_triangle()
    for normal in mesh.normals:
        assert normal == pytest.approx([0.0, 1.0, 0.0])
    assert mesh.bounds_min.tolist() == [0.0, 0.0, 0.0]
    assert mesh.bounds_max.tolist() == [3.0, 0.0, 2.0]


def test_unreferenced_vertices_point_up() -> None:
    mesh = MeshBuffer.build(np.zeros((2, 3)), np.zeros(0), np.zeros((2, 2)))
    assert mesh.normals.tolist() == [[0.0, 1.0, 0.0], [0.0, 1.0, 0.0]]


def test_finalize_rejects_partial_triangles() -> None:
    with pytest.raises(ValueError):
        MeshBuffer.build(np.zeros((3, 3)), np.array([0, 1]), np.zeros((3, 2)))


def test_release_happens_once() -> None:
    mesh = make_triangle()
    mesh.release()
    assert mesh.released
    assert mesh.vertex_count == 0
    with pytest.raises(RuntimeError):
        mesh.release()
