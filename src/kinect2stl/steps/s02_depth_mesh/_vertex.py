"""Vertex algebra on float32 vertices stored in the last axis of an array.

Every function accepts a single vertex of shape (3,) or a stack (..., 3);
triangles are (..., 3, 3) arrays ordered (v0, v1, v2).
"""

from __future__ import annotations

import numpy as np


def sub(a, b) -> np.ndarray:
    """Componentwise a - b."""
    return np.subtract(np.asarray(a, dtype=np.float32), np.asarray(b, dtype=np.float32))


def cross(a, b) -> np.ndarray:
    """Right-handed cross product."""
    return np.cross(np.asarray(a, dtype=np.float32), np.asarray(b, dtype=np.float32))


def normalize(a) -> np.ndarray:
    """Scale to unit length, accumulating in float64.

    Zero-length input yields NaN; callers must not pass degenerate triangles.
    """
    a64 = np.asarray(a, dtype=np.float32).astype(np.float64)
    scale = 1.0 / np.sqrt(np.sum(a64 * a64, axis=-1, keepdims=True))
    return (a64 * scale).astype(np.float32)


def triangle_normals(tris) -> np.ndarray:
    """Unit normals of (..., 3, 3) triangles, following the (v1-v0) x (v2-v0) winding."""
    tris = np.asarray(tris, dtype=np.float32)
    d1 = sub(tris[..., 1, :], tris[..., 0, :])
    d2 = sub(tris[..., 2, :], tris[..., 0, :])
    return normalize(cross(d1, d2))


def triangle_normal(tri) -> np.ndarray:
    """Unit normal of a single (3, 3) triangle."""
    return triangle_normals(np.asarray(tri, dtype=np.float32).reshape(3, 3))


def signed_volume(tris) -> float:
    """Volume enclosed by a closed triangle soup; positive when normals face outward."""
    tris = np.asarray(tris, dtype=np.float64)
    v0, v1, v2 = tris[..., 0, :], tris[..., 1, :], tris[..., 2, :]
    return float(np.einsum("...i,...i->...", v0, np.cross(v1, v2)).sum() / 6.0)
