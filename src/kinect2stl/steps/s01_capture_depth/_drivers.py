"""Depth frame drivers.

A driver exposes the two calls the capture step needs, both returning a
libfreenect-style status (negative = failure):

- ``acquire_video()`` probes the device; a negative status means no device.
- ``acquire_depth()`` returns ``(frame, status)`` with an H x W uint16 frame.

Frames are handed out as read-only arrays.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

STATUS_OK = 0
STATUS_ERROR = -1


def _has_freenect() -> bool:
    """Check if the libfreenect Python bindings are available."""
    try:
        import freenect  # noqa: F401
        return True
    except ImportError:
        return False


def _readonly(frame: np.ndarray) -> np.ndarray:
    view = frame.view()
    view.setflags(write=False)
    return view


class DepthDriver(ABC):
    """Source of a single raw depth frame."""

    name: str = ""
    # (width, height) the device always delivers; None for arbitrary frames
    frame_size: Optional[tuple[int, int]] = None

    @abstractmethod
    def acquire_video(self) -> int:
        ...

    @abstractmethod
    def acquire_depth(self) -> tuple[Optional[np.ndarray], int]:
        ...

    def close(self) -> None:
        """Release the device, if any."""


class FreenectDriver(DepthDriver):
    """Kinect v1 through libfreenect's synchronous wrapper (11-bit depth, 640x480)."""

    name = "freenect"
    frame_size = (640, 480)

    def __init__(self, device_index: int = 0):
        self.device_index = device_index
        self._started = False

    def acquire_video(self) -> int:
        if not _has_freenect():
            logger.error(
                "libfreenect Python bindings not installed; "
                "build libfreenect with -DBUILD_PYTHON3=ON"
            )
            return STATUS_ERROR

        import freenect

        result = freenect.sync_get_video(self.device_index, freenect.VIDEO_RGB)
        if result is None:
            return STATUS_ERROR
        self._started = True
        return STATUS_OK

    def acquire_depth(self) -> tuple[Optional[np.ndarray], int]:
        if not _has_freenect():
            return None, STATUS_ERROR

        import freenect

        result = freenect.sync_get_depth(self.device_index, freenect.DEPTH_11BIT)
        if result is None:
            return None, STATUS_ERROR
        self._started = True
        depth, timestamp = result
        logger.info(f"Kinect #{self.device_index}: depth frame {depth.shape} at ts={timestamp}")
        return _readonly(np.ascontiguousarray(depth, dtype=np.uint16)), STATUS_OK

    def close(self) -> None:
        if self._started:
            import freenect

            freenect.sync_stop()
            self._started = False


class NpyFileDriver(DepthDriver):
    """Replays a frame previously saved with ``numpy.save``."""

    name = "file"

    def __init__(self, path: Path):
        self.path = Path(path)

    def acquire_video(self) -> int:
        if not self.path.exists():
            logger.error(f"Depth frame file not found: {self.path}")
            return STATUS_ERROR
        return STATUS_OK

    def acquire_depth(self) -> tuple[Optional[np.ndarray], int]:
        if not self.path.exists():
            return None, STATUS_ERROR
        frame = np.load(self.path, allow_pickle=False)
        logger.info(f"Loaded depth frame {frame.shape} ({frame.dtype}) from {self.path.name}")
        return _readonly(frame), STATUS_OK


class ArrayDriver(DepthDriver):
    """Serves an in-memory frame."""

    name = "array"

    def __init__(self, frame: np.ndarray):
        self.frame = np.asarray(frame)

    def acquire_video(self) -> int:
        return STATUS_OK

    def acquire_depth(self) -> tuple[Optional[np.ndarray], int]:
        return _readonly(self.frame), STATUS_OK


def make_driver(source: str, input_path: Optional[Path] = None, device_index: int = 0) -> DepthDriver:
    """Build the driver for a config ``source`` value."""
    if source == "freenect":
        return FreenectDriver(device_index=device_index)
    if source == "file":
        if input_path is None:
            raise ValueError("The 'file' source needs an input_path")
        return NpyFileDriver(input_path)
    raise ValueError(f"Unknown depth source: {source!r}")
