"""Shared pytest fixtures for kinect2stl tests."""

from collections import Counter
from pathlib import Path

import numpy as np
import pytest


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Create a temporary data root with the standard directory structure."""
    for subdir in ["raw", "interim", "processed"]:
        (tmp_path / subdir).mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def two_level_frame() -> np.ndarray:
    """2x2 frame: left column near (100), right column far (200)."""
    return np.array([[100, 200], [100, 200]], dtype=np.uint16)


@pytest.fixture
def ramp_frame() -> np.ndarray:
    """4x4 frame with raw = 100 + 10 * x."""
    return np.tile(100 + 10 * np.arange(4, dtype=np.uint16), (4, 1))


@pytest.fixture
def extremes_frame() -> np.ndarray:
    """2x2 frame spanning the full 11-bit range."""
    return np.array([[0, 2047], [1023, 1023]], dtype=np.uint16)


@pytest.fixture
def random_frame() -> np.ndarray:
    """Non-square 11-bit frame with invalid (0 / 2047) samples mixed in."""
    rng = np.random.RandomState(7)
    frame = rng.randint(400, 1100, size=(5, 7)).astype(np.uint16)
    frame[1, 2] = 0
    frame[3, 5] = 2047
    return frame


@pytest.fixture
def frame_file(data_root: Path, random_frame: np.ndarray) -> Path:
    """random_frame saved as .npy under raw/."""
    path = data_root / "raw" / "frame.npy"
    np.save(path, random_frame)
    return path


def _edge_counts(tris: np.ndarray) -> tuple[Counter, Counter]:
    """Count undirected and directed edges of a triangle soup by exact vertex value."""
    undirected: Counter = Counter()
    directed: Counter = Counter()
    for tri in tris:
        verts = [tuple(float(c) for c in v) for v in tri]
        for a, b in ((verts[0], verts[1]), (verts[1], verts[2]), (verts[2], verts[0])):
            directed[(a, b)] += 1
            undirected[frozenset((a, b))] += 1
    return undirected, directed


@pytest.fixture
def edge_counter():
    """Edge counting helper for watertightness checks."""
    return _edge_counts
