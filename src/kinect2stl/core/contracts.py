"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import numpy as np
from pydantic import BaseModel, Field, model_validator


class StepMeta(BaseModel):
    """Timing and parameters of one executed step."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class DepthRange(BaseModel):
    """Observed raw sample range of a depth frame (invalid samples included)."""

    min_depth: int = Field(..., ge=0, le=65535)
    max_depth: int = Field(..., ge=0, le=65535)

    @model_validator(mode="after")
    def _check_order(self) -> DepthRange:
        if self.min_depth > self.max_depth:
            raise ValueError(
                f"min_depth ({self.min_depth}) must not exceed max_depth ({self.max_depth})"
            )
        return self

    @classmethod
    def from_frame(cls, frame: np.ndarray) -> DepthRange:
        """Scan the whole frame for its smallest and largest sample."""
        return cls(min_depth=int(frame.min()), max_depth=int(frame.max()))

    @property
    def span(self) -> int:
        return self.max_depth - self.min_depth

    @property
    def is_degenerate(self) -> bool:
        return self.span == 0

    def __str__(self) -> str:
        return f"[{self.min_depth}, {self.max_depth}]"


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "kinect2stl"
    data_root: Optional[Path] = Field(
        None, description="Directory for intermediates (None = temporary, removed after the run)"
    )
    steps: list[StepEntry] = Field(default_factory=list)


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: Optional[str] = None
    config: dict[str, Any] = Field(
        default_factory=dict, description="Inline overrides applied on top of config_file"
    )
    depends_on: list[str] = Field(default_factory=list)
    enabled: bool = True


# Fix forward reference
PipelineConfig.model_rebuild()
