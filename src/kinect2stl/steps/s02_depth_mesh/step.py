"""Step 02: Depth mesh - remap a raw frame to Z and close it into a solid.

Produces six panels in a fixed order (front, bottom, right, top, left, rear)
into one float32 (N, 3, 3) triangle array with outward winding.
"""

from __future__ import annotations

import logging
from typing import ClassVar

import numpy as np

from kinect2stl.core.contracts import DepthRange
from kinect2stl.core.errors import FrameShapeError
from kinect2stl.core.step_base import BaseStep
from .config import DepthMeshConfig
from .contracts import DepthMeshInput, DepthMeshOutput

logger = logging.getLogger(__name__)


class DepthMeshStep(BaseStep[DepthMeshInput, DepthMeshOutput, DepthMeshConfig]):
    name: ClassVar[str] = "depth_mesh"
    input_type: ClassVar = DepthMeshInput
    output_type: ClassVar = DepthMeshOutput
    config_type: ClassVar = DepthMeshConfig

    def validate_inputs(self, inputs: DepthMeshInput) -> bool:
        if not inputs.depth_path.exists():
            logger.error(f"Depth frame not found: {inputs.depth_path}")
            return False
        if (inputs.min_depth is None) != (inputs.max_depth is None):
            logger.error("min_depth and max_depth must be given together")
            return False
        return True

    def run(self, inputs: DepthMeshInput) -> DepthMeshOutput:
        from ._mesh_builder import build_mesh, panel_counts
        from ._remap import remap_depth

        frame = np.load(inputs.depth_path, allow_pickle=False)
        if frame.ndim != 2 or min(frame.shape) < 2:
            raise FrameShapeError(f"Depth frame must be 2D and at least 2x2, got {frame.shape}")
        height, width = frame.shape

        # --- 1. Depth range ---
        if inputs.min_depth is not None and inputs.max_depth is not None:
            depth_range = DepthRange(min_depth=inputs.min_depth, max_depth=inputs.max_depth)
        else:
            depth_range = DepthRange.from_frame(frame)
        if depth_range.is_degenerate:
            logger.warning(
                f"Degenerate depth range {depth_range} "
                f"(on_degenerate_range={self.config.on_degenerate_range})"
            )

        # --- 2. Remap to Z ---
        z = remap_depth(
            frame,
            depth_range,
            z_range=self.config.z_range,
            clamp_degenerate=self.config.on_degenerate_range == "clamp",
        )
        z_min, z_max = float(z.min()), float(z.max())
        logger.info(f"Z in [{z_min:.3f}, {z_max:.3f}], rear plane at {self.config.back_plane}")

        # --- 3. Six panels ---
        tris = build_mesh(z, back=self.config.back_plane)
        counts = panel_counts(width, height)
        logger.info(
            f"Built {len(tris)} triangles "
            + ", ".join(f"{name}={n}" for name, n in counts.items())
        )

        # --- 4. Save ---
        triangles_path = self.interim_dir / "triangles.npy"
        np.save(triangles_path, tris)

        return DepthMeshOutput(
            triangles_path=triangles_path,
            num_triangles=len(tris),
            width=width,
            height=height,
            panel_counts=counts,
            z_min=z_min,
            z_max=z_max,
        )
