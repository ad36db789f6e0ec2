"""Raw depth sample -> Z coordinate.

Z = (max - raw) * (z_range / (max - min)), computed in float32, so the nearest
sample of the frame sits at z_range and the farthest at 0. Samples the sensor
flags as invalid (0, 2047) are remapped like any other.
"""

from __future__ import annotations

import numpy as np

from kinect2stl.core.contracts import DepthRange
from kinect2stl.core.errors import DegenerateDepthRangeError

Z_RANGE = 250.0


def depth_range(frame: np.ndarray) -> DepthRange:
    return DepthRange.from_frame(frame)


def depth_scale(depth_range: DepthRange, z_range: float = Z_RANGE) -> np.float32:
    """Z units per raw depth unit."""
    if depth_range.is_degenerate:
        raise DegenerateDepthRangeError(depth_range.min_depth)
    return np.float32(z_range) / np.float32(depth_range.span)


def remap_depth(
    frame: np.ndarray,
    depth_range: DepthRange,
    z_range: float = Z_RANGE,
    clamp_degenerate: bool = False,
) -> np.ndarray:
    """Remap a whole (H, W) frame to float32 Z values.

    A zero-span range raises DegenerateDepthRangeError unless
    ``clamp_degenerate`` is set, in which case every Z is 0.
    """
    if depth_range.is_degenerate and clamp_degenerate:
        return np.zeros(frame.shape, dtype=np.float32)
    scale = depth_scale(depth_range, z_range)
    offset = depth_range.max_depth - frame.astype(np.int32)
    return offset.astype(np.float32) * scale


def depth_at(
    frame: np.ndarray,
    x: int,
    y: int,
    depth_range: DepthRange,
    z_range: float = Z_RANGE,
) -> np.float32:
    """Z of the sample at column ``x``, row ``y``."""
    scale = depth_scale(depth_range, z_range)
    return np.float32(depth_range.max_depth - int(frame[y, x])) * scale
