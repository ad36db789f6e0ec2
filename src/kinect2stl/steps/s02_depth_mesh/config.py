"""Configuration for Step 02: Depth frame -> watertight triangle mesh."""

from typing import Literal

from pydantic import BaseModel, Field


class DepthMeshConfig(BaseModel):
    z_range: float = Field(
        250.0, gt=0, description="Z of the nearest sample; the farthest sample sits at 0"
    )
    back_plane: float = Field(-3.0, lt=0, description="Z of the flat rear cap")
    on_degenerate_range: Literal["error", "clamp"] = Field(
        "error",
        description="Zero-span frame: 'error' aborts, 'clamp' puts the whole front surface at Z=0",
    )
