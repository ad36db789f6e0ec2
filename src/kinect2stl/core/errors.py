"""Fatal error kinds raised by pipeline steps and mapped to exit codes by the CLI."""

from __future__ import annotations


class Kinect2StlError(RuntimeError):
    """Base class for all kinect2stl failures."""

    exit_code: int = 1


class DeviceUnavailableError(Kinect2StlError):
    """The capture driver found no device (video probe failed)."""

    def __init__(self, message: str = "No kinect found"):
        super().__init__(message)


class DepthUnavailableError(Kinect2StlError):
    """The device is present but did not deliver a depth frame."""

    def __init__(self, message: str = "Could not get depth"):
        super().__init__(message)


class DegenerateDepthRangeError(Kinect2StlError, ValueError):
    """Every sample in the frame has the same value, so Z cannot be scaled."""

    exit_code = 2

    def __init__(self, value: int):
        self.value = value
        super().__init__(f"Degenerate depth range [{value}, {value}]")


class FrameShapeError(Kinect2StlError, ValueError):
    """The frame does not have the expected shape or dtype."""

    exit_code = 2
