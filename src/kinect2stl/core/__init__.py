"""kinect2stl core: pipeline runner, base step, shared contracts, errors."""

from .step_base import BaseStep
from .contracts import DepthRange, PipelineConfig, StepEntry, StepMeta
from .errors import (
    DegenerateDepthRangeError,
    DepthUnavailableError,
    DeviceUnavailableError,
    FrameShapeError,
    Kinect2StlError,
)
from .pipeline_runner import default_pipeline_config, load_pipeline_config, run_pipeline
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "DepthRange",
    "PipelineConfig",
    "StepEntry",
    "StepMeta",
    "Kinect2StlError",
    "DeviceUnavailableError",
    "DepthUnavailableError",
    "DegenerateDepthRangeError",
    "FrameShapeError",
    "default_pipeline_config",
    "run_pipeline",
    "load_pipeline_config",
    "setup_logging",
]
