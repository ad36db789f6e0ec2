"""Step 03: STL export - write the triangle array as binary (or ASCII) STL."""

from __future__ import annotations

import logging
from typing import ClassVar

import numpy as np

from kinect2stl.core.step_base import BaseStep
from .config import StlExportConfig
from .contracts import StlExportInput, StlExportOutput

logger = logging.getLogger(__name__)


class StlExportStep(BaseStep[StlExportInput, StlExportOutput, StlExportConfig]):
    name: ClassVar[str] = "stl_export"
    input_type: ClassVar = StlExportInput
    output_type: ClassVar = StlExportOutput
    config_type: ClassVar = StlExportConfig

    def validate_inputs(self, inputs: StlExportInput) -> bool:
        if not inputs.triangles_path.exists():
            logger.error(f"Triangles file not found: {inputs.triangles_path}")
            return False
        return True

    def run(self, inputs: StlExportInput) -> StlExportOutput:
        from ._stl_io import write_ascii_stl, write_binary_stl

        tris = np.load(inputs.triangles_path, allow_pickle=False)
        output_path = self.config.output_path
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config.format == "ascii":
            write_ascii_stl(tris, output_path, solid_name=self.config.solid_name)
        else:
            write_binary_stl(tris, output_path, header=self.config.header)

        file_size = output_path.stat().st_size
        size_mb = file_size / (1024 * 1024)
        logger.info(f"STL exported: {output_path} ({size_mb:.2f} MB, {len(tris)} triangles)")

        watertight = None
        volume = None
        if self.config.validate_mesh:
            from ._validate import _has_trimesh, validate_stl

            if _has_trimesh():
                report = validate_stl(output_path)
                watertight = report["watertight"]
                volume = report["volume"]
            else:
                logger.warning(
                    "trimesh not installed, skipping mesh validation. "
                    "Install with: pip install trimesh"
                )

        return StlExportOutput(
            stl_path=output_path,
            num_triangles=len(tris),
            file_size=file_size,
            format=self.config.format,
            watertight=watertight,
            volume=volume,
        )
