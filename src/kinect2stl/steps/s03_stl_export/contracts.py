"""I/O contracts for Step 03: STL export."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class StlExportInput(BaseModel):
    triangles_path: Path = Field(..., description="float32 (N, 3, 3) triangles .npy from s02")


class StlExportOutput(BaseModel):
    stl_path: Path = Field(..., description="Path to the written STL file")
    num_triangles: int = Field(..., description="Triangles written")
    file_size: int = Field(..., description="Size of the STL file in bytes")
    format: str = Field("binary", description="STL encoding used")
    watertight: Optional[bool] = Field(None, description="trimesh watertight check (if run)")
    volume: Optional[float] = Field(None, description="Enclosed volume from trimesh (if run)")
