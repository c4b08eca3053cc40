"""Pytest configuration and shared fixtures for roadstream tests."""
from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

# //1.- Ensure repository root is available on the Python path for package imports.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roadstream.curve import CurveSpan  # noqa: E402


def make_straight_span(spacing: float = 10.0, index: int = 1) -> CurveSpan:
    points = [np.array([0.0, 0.0, spacing * k]) for k in range(4)]
    return CurveSpan(index, *points)


@pytest.fixture
def straight_span() -> CurveSpan:
    return make_straight_span()
