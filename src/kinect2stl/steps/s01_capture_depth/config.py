"""Configuration for Step 01: Depth frame capture."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field


class CaptureDepthConfig(BaseModel):
    source: Literal["freenect", "file"] = Field(
        "freenect",
        description="'freenect' grabs a frame from a Kinect, 'file' loads a saved uint16 .npy frame",
    )
    input_path: Optional[Path] = Field(None, description="Frame .npy path for the 'file' source")
    device_index: int = Field(0, ge=0, description="Kinect device index for libfreenect")
    probe_video: bool = Field(
        True, description="Probe the RGB stream first to detect a missing device"
    )

    # Expected frame size; None falls back to the driver's fixed size (640x480 for
    # a Kinect) and otherwise accepts any size >= 2x2
    frame_width: Optional[int] = Field(None, ge=2, description="Expected frame width (columns)")
    frame_height: Optional[int] = Field(None, ge=2, description="Expected frame height (rows)")

    save_frame_path: Optional[Path] = Field(
        None, description="Also save the raw frame here as .npy for later re-meshing"
    )
