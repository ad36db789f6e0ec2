"""Configuration for Step 03: STL export."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class StlExportConfig(BaseModel):
    output_path: Path = Field(Path("kinect.stl"), description="STL file to write (overwritten)")
    format: Literal["binary", "ascii"] = Field("binary", description="STL encoding")
    header: str = Field(
        "x" * 80, max_length=80, description="Binary header text, space-padded to 80 bytes"
    )
    solid_name: str = Field("kinect", description="Solid name for ASCII STL")
    validate_mesh: bool = Field(
        False, description="Reload the written file with trimesh and check watertightness"
    )
