"""Mesh buffers produced for road segments and river chunks."""
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .vector import UP


def _empty(columns: int, dtype: type = float) -> np.ndarray:
    return np.zeros((0, columns), dtype=dtype)


@dataclass
class MeshBuffer:
    """Finalized triangle mesh handed to rendering and collision backends.

    ``indices`` is a flat triangle list, three entries per triangle.
    """

    vertices: np.ndarray
    indices: np.ndarray
    uvs: np.ndarray
    normals: np.ndarray = field(default_factory=lambda: _empty(3))
    bounds_min: np.ndarray = field(default_factory=lambda: np.zeros(3))
    bounds_max: np.ndarray = field(default_factory=lambda: np.zeros(3))
    released: bool = False

    @classmethod
    def build(cls, vertices: np.ndarray, indices: np.ndarray, uvs: np.ndarray) -> "MeshBuffer":
        mesh = cls(
            vertices=np.asarray(vertices, dtype=float).reshape(-1, 3),
            indices=np.asarray(indices, dtype=np.int64).reshape(-1),
            uvs=np.asarray(uvs, dtype=float).reshape(-1, 2),
        )
        mesh.finalize()
        return mesh

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.shape[0] // 3)

    def triangles(self) -> np.ndarray:
        return self.indices.reshape(-1, 3)

    def finalize(self) -> None:
        if len(self.indices) % 3 != 0:
            raise ValueError("Triangle index list length must be a multiple of 3")
        if len(self.uvs) != len(self.vertices):
            raise ValueError("UV count does not match vertex count")
        self.recalculate_normals()
        self.recalculate_bounds()

    def recalculate_normals(self) -> None:
        """Area-weighted vertex normals accumulated from the faces."""

        normals = np.zeros_like(self.vertices)
        if self.triangle_count:
            tris = self.triangles()
            a = self.vertices[tris[:, 0]]
            b = self.vertices[tris[:, 1]]
            c = self.vertices[tris[:, 2]]
            face_normals = np.cross(b - a, c - a)
            for corner in range(3):
                np.add.at(normals, tris[:, corner], face_normals)
        lengths = np.linalg.norm(normals, axis=1)
        missing = lengths < 1e-12
        normals[missing] = UP
        lengths[missing] = 1.0
        self.normals = normals / lengths[:, None]

    def recalculate_bounds(self) -> None:
        if self.vertex_count == 0:
            self.bounds_min = np.zeros(3)
            self.bounds_max = np.zeros(3)
            return
        self.bounds_min = self.vertices.min(axis=0)
        self.bounds_max = self.vertices.max(axis=0)

    def release(self) -> None:
        """Drop the buffers; a mesh may only be released once."""

        if self.released:
            raise RuntimeError("Mesh buffer already released")
        self.vertices = _empty(3)
        self.indices = np.zeros(0, dtype=np.int64)
        self.uvs = _empty(2)
        self.normals = _empty(3)
        self.released = True

    def summary(self) -> str:
        return f"vertices={self.vertex_count}, triangles={self.triangle_count}"


__all__ = ["MeshBuffer"]
