"""I/O contracts for Step 01: Depth frame capture."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class CaptureDepthInput(BaseModel):
    input_path: Optional[Path] = Field(
        None, description="Saved frame to load; overrides config.input_path and forces the file source"
    )


class CaptureDepthOutput(BaseModel):
    depth_path: Path = Field(..., description="Path to the captured raw frame (uint16 .npy, H x W)")
    width: int = Field(..., description="Frame width in samples")
    height: int = Field(..., description="Frame height in samples")
    min_depth: int = Field(..., description="Smallest raw sample (nearest surface)")
    max_depth: int = Field(..., description="Largest raw sample (farthest surface)")
    source: str = Field(..., description="Driver that produced the frame")
