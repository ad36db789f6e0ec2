"""I/O contracts for Step 02: Depth frame -> watertight triangle mesh."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class DepthMeshInput(BaseModel):
    depth_path: Path = Field(..., description="Raw uint16 depth frame (.npy, H x W) from s01")
    min_depth: Optional[int] = Field(None, description="Known frame minimum (rescanned if None)")
    max_depth: Optional[int] = Field(None, description="Known frame maximum (rescanned if None)")


class DepthMeshOutput(BaseModel):
    triangles_path: Path = Field(..., description="Path to triangles.npy, float32 (N, 3, 3)")
    num_triangles: int = Field(..., description="Total triangle count N")
    width: int = Field(..., description="Grid width the mesh was built from")
    height: int = Field(..., description="Grid height the mesh was built from")
    panel_counts: dict[str, int] = Field(
        default_factory=dict, description="Triangles per panel, in emission order"
    )
    z_min: float = Field(0.0, description="Lowest front-surface Z")
    z_max: float = Field(0.0, description="Highest front-surface Z")
