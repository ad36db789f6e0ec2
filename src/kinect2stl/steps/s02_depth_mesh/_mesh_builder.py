"""Closed solid from a Z grid: front surface, four skirts, flat rear cap.

The solid spans x in [0, W-1], y in [0, H-1] and z from the rear plane
``back`` up to the front surface. Every triangle is wound so that
(v1 - v0) x (v2 - v0) points out of the solid. Panels are emitted in
PANEL_ORDER; within a panel, triangles follow the cell order documented on
each builder (the top and left skirts walk their edge backwards so the
winding stays outward at the corners).
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

BACK = -3.0

PANEL_ORDER = ("front", "bottom", "right", "top", "left", "rear")


def _vertices(x, y, z) -> np.ndarray:
    """Stack broadcastable coordinate arrays into (..., 3) float32 vertices."""
    x, y, z = np.broadcast_arrays(
        np.asarray(x, dtype=np.float32),
        np.asarray(y, dtype=np.float32),
        np.asarray(z, dtype=np.float32),
    )
    return np.stack([x, y, z], axis=-1)


def _triangle_pairs(t0: tuple, t1: tuple) -> np.ndarray:
    """Interleave two triangles per cell: (..., 3) corners -> (n*2, 3, 3)."""
    first = np.stack(t0, axis=-2)
    second = np.stack(t1, axis=-2)
    return np.stack([first, second], axis=-3).reshape(-1, 3, 3)


def _quad(p0, p1, p2, p3) -> np.ndarray:
    """Split quad p0-p1-p2-p3 into (p0, p1, p2) and (p0, p2, p3)."""
    return _triangle_pairs((p0, p1, p2), (p0, p2, p3))


def panel_counts(width: int, height: int) -> dict[str, int]:
    """Triangles per panel for a width x height grid."""
    cells = (width - 1) * (height - 1)
    return {
        "front": 2 * cells,
        "bottom": 2 * (width - 1),
        "right": 2 * (height - 1),
        "top": 2 * (width - 1),
        "left": 2 * (height - 1),
        "rear": 2 * cells,
    }


def expected_triangle_count(width: int, height: int) -> int:
    return sum(panel_counts(width, height).values())


def panel_slices(width: int, height: int) -> dict[str, slice]:
    """Index range of each panel inside the mesh returned by build_mesh."""
    slices = {}
    start = 0
    for name, count in panel_counts(width, height).items():
        slices[name] = slice(start, start + count)
        start += count
    return slices


def front_panel(z: np.ndarray) -> np.ndarray:
    """Depth surface, row by row (y outer, x inner), two triangles per cell."""
    h, w = z.shape
    x0 = np.arange(w - 1)[None, :]
    y0 = np.arange(h - 1)[:, None]
    x1, y1 = x0 + 1, y0 + 1

    p00 = _vertices(x0, y0, z[:-1, :-1])
    p10 = _vertices(x1, y0, z[:-1, 1:])
    p11 = _vertices(x1, y1, z[1:, 1:])
    p01 = _vertices(x0, y1, z[1:, :-1])
    return _quad(p00, p10, p11, p01)


def bottom_skirt(z: np.ndarray, back: float = BACK) -> np.ndarray:
    """Wall along y = 0, x ascending."""
    _, w = z.shape
    x0 = np.arange(w - 1)
    x1 = x0 + 1
    return _quad(
        _vertices(x0, 0, back),
        _vertices(x1, 0, back),
        _vertices(x1, 0, z[0, x1]),
        _vertices(x0, 0, z[0, x0]),
    )


def right_skirt(z: np.ndarray, back: float = BACK) -> np.ndarray:
    """Wall along x = W-1, y ascending."""
    h, w = z.shape
    xr = w - 1
    y0 = np.arange(h - 1)
    y1 = y0 + 1
    return _quad(
        _vertices(xr, y0, back),
        _vertices(xr, y1, back),
        _vertices(xr, y1, z[y1, xr]),
        _vertices(xr, y0, z[y0, xr]),
    )


def top_skirt(z: np.ndarray, back: float = BACK) -> np.ndarray:
    """Wall along y = H-1, x descending from W-1 to 1."""
    h, w = z.shape
    yt = h - 1
    x0 = np.arange(w - 1, 0, -1)
    x1 = x0 - 1
    return _quad(
        _vertices(x0, yt, back),
        _vertices(x1, yt, back),
        _vertices(x1, yt, z[yt, x1]),
        _vertices(x0, yt, z[yt, x0]),
    )


def left_skirt(z: np.ndarray, back: float = BACK) -> np.ndarray:
    """Wall along x = 0, y descending from H-1 to 1."""
    h, _ = z.shape
    y0 = np.arange(h - 1, 0, -1)
    y1 = y0 - 1
    return _quad(
        _vertices(0, y0, back),
        _vertices(0, y1, back),
        _vertices(0, y1, z[y1, 0]),
        _vertices(0, y0, z[y0, 0]),
    )


def rear_cap(width: int, height: int, back: float = BACK) -> np.ndarray:
    """Flat plane z = back facing -z, same cell order as the front."""
    x0 = np.arange(width - 1)[None, :]
    y0 = np.arange(height - 1)[:, None]
    x1, y1 = x0 + 1, y0 + 1

    p00 = _vertices(x0, y0, back)
    p10 = _vertices(x1, y0, back)
    p11 = _vertices(x1, y1, back)
    p01 = _vertices(x0, y1, back)
    return _triangle_pairs((p00, p11, p10), (p00, p01, p11))


def build_mesh(z: np.ndarray, back: float = BACK) -> np.ndarray:
    """Triangulate a (H, W) float32 Z grid into a closed (N, 3, 3) float32 mesh."""
    if z.ndim != 2 or z.shape[0] < 2 or z.shape[1] < 2:
        raise ValueError(f"Z grid must be 2D and at least 2x2, got shape {z.shape}")
    h, w = z.shape
    if not np.all(z > back):
        raise ValueError(f"Front surface must lie above the rear plane z={back}")

    slices = panel_slices(w, h)
    tris = np.empty((expected_triangle_count(w, h), 3, 3), dtype=np.float32)

    tris[slices["front"]] = front_panel(z)
    tris[slices["bottom"]] = bottom_skirt(z, back)
    tris[slices["right"]] = right_skirt(z, back)
    tris[slices["top"]] = top_skirt(z, back)
    tris[slices["left"]] = left_skirt(z, back)
    tris[slices["rear"]] = rear_cap(w, h, back)

    logger.debug(f"Built {len(tris)} triangles for a {w}x{h} grid")
    return tris
