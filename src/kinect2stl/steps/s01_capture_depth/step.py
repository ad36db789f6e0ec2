"""Step 01: Capture one raw depth frame and scan its sample range."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Optional

import numpy as np

from kinect2stl.core.contracts import DepthRange
from kinect2stl.core.errors import DepthUnavailableError, DeviceUnavailableError, FrameShapeError
from kinect2stl.core.step_base import BaseStep
from ._drivers import DepthDriver, make_driver
from .config import CaptureDepthConfig
from .contracts import CaptureDepthInput, CaptureDepthOutput

logger = logging.getLogger(__name__)


def check_frame(
    frame: np.ndarray,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> np.ndarray:
    """Validate a raw frame and return it as a 2D uint16 array.

    Integer frames of another dtype are accepted if every sample fits in 16 bits.
    """
    if frame.ndim != 2:
        raise FrameShapeError(f"Depth frame must be 2D (H x W), got shape {frame.shape}")
    rows, cols = frame.shape
    if rows < 2 or cols < 2:
        raise FrameShapeError(f"Depth frame must be at least 2x2, got {cols}x{rows}")
    if (width is not None and cols != width) or (height is not None and rows != height):
        raise FrameShapeError(f"Expected a {width}x{height} depth frame, got {cols}x{rows}")

    if frame.dtype == np.uint16:
        return frame
    if not np.issubdtype(frame.dtype, np.integer):
        raise FrameShapeError(f"Depth samples must be integers, got {frame.dtype}")
    if frame.min() < 0 or frame.max() > np.iinfo(np.uint16).max:
        raise FrameShapeError(
            f"Depth samples out of uint16 range: [{frame.min()}, {frame.max()}]"
        )
    logger.warning(f"Converting {frame.dtype} depth frame to uint16")
    return frame.astype(np.uint16)


class CaptureDepthStep(BaseStep[CaptureDepthInput, CaptureDepthOutput, CaptureDepthConfig]):
    """Grab a single depth frame from the configured driver.

    Produces the frame as a .npy intermediate plus its observed depth range,
    which the mesh step uses to scale Z.
    """

    name: ClassVar[str] = "capture_depth"
    input_type: ClassVar = CaptureDepthInput
    output_type: ClassVar = CaptureDepthOutput
    config_type: ClassVar = CaptureDepthConfig

    def __init__(self, config: CaptureDepthConfig, data_root: Path, driver: Optional[DepthDriver] = None):
        super().__init__(config=config, data_root=data_root)
        self.driver = driver

    def _resolve_driver(self, inputs: CaptureDepthInput) -> DepthDriver:
        if self.driver is not None:
            return self.driver
        if inputs.input_path is not None:
            return make_driver("file", input_path=inputs.input_path)
        return make_driver(
            self.config.source,
            input_path=self.config.input_path,
            device_index=self.config.device_index,
        )

    def validate_inputs(self, inputs: CaptureDepthInput) -> bool:
        if self.driver is not None or (self.config.source == "freenect" and inputs.input_path is None):
            return True
        path = inputs.input_path or self.config.input_path
        if path is None:
            logger.error("File source selected but no input_path given")
            return False
        if not path.exists():
            logger.error(f"Depth frame file not found: {path}")
            return False
        if path.suffix.lower() != ".npy":
            logger.error(f"Expected .npy depth frame, got: {path.suffix}")
            return False
        return True

    def run(self, inputs: CaptureDepthInput) -> CaptureDepthOutput:
        driver = self._resolve_driver(inputs)
        try:
            if self.config.probe_video and driver.acquire_video() < 0:
                raise DeviceUnavailableError()

            frame, status = driver.acquire_depth()
            if status < 0 or frame is None:
                raise DepthUnavailableError()
        finally:
            driver.close()

        width, height = self.config.frame_width, self.config.frame_height
        if driver.frame_size is not None:
            width = width or driver.frame_size[0]
            height = height or driver.frame_size[1]
        frame = check_frame(frame, width, height)
        depth_range = DepthRange.from_frame(frame)
        height, width = frame.shape
        logger.info(f"Depth frame {width}x{height}, range {depth_range}")

        depth_path = self.interim_dir / "depth_frame.npy"
        np.save(depth_path, frame)

        if self.config.save_frame_path is not None:
            self.config.save_frame_path.parent.mkdir(parents=True, exist_ok=True)
            np.save(self.config.save_frame_path, frame)
            logger.info(f"Saved raw frame -> {self.config.save_frame_path}")

        return CaptureDepthOutput(
            depth_path=depth_path,
            width=width,
            height=height,
            min_depth=depth_range.min_depth,
            max_depth=depth_range.max_depth,
            source=driver.name,
        )
