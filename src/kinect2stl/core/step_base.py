"""Base class for all pipeline steps.

Each step declares typed Input, Output and Config Pydantic models, so a step
can be run on its own (tests, CLI) or chained by the pipeline runner, which
feeds one step's output fields into the next step's input.
"""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar, ClassVar, Optional

from pydantic import BaseModel

from .contracts import StepMeta

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for pipeline steps.

    Subclasses set ``name``, ``input_type``, ``output_type`` and
    ``config_type`` and implement ``run()`` and ``validate_inputs()``::

        class DepthMeshStep(BaseStep[DepthMeshInput, DepthMeshOutput, DepthMeshConfig]):
            input_type = DepthMeshInput
            output_type = DepthMeshOutput
            config_type = DepthMeshConfig

            def run(self, inputs: DepthMeshInput) -> DepthMeshOutput: ...
            def validate_inputs(self, inputs: DepthMeshInput) -> bool: ...
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT, data_root: Path):
        self.config = config
        self.data_root = Path(data_root)
        self.last_meta: Optional[StepMeta] = None

    @property
    def step_name(self) -> str:
        return self.name or self.__class__.__name__

    @property
    def interim_dir(self) -> Path:
        """Per-step directory for intermediate artifacts (created on access)."""
        path = self.data_root / "interim" / self.step_name
        path.mkdir(parents=True, exist_ok=True)
        return path

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Execute this pipeline step. Returns output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Check that all required input artifacts exist and are valid."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Run with logging, timing, and validation."""
        step_name = self.step_name
        logger.debug(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise ValueError(f"[{step_name}] Input validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.perf_counter()
        result = self.run(inputs)
        elapsed = time.perf_counter() - t0
        self.last_meta = StepMeta(
            step_name=step_name,
            elapsed_seconds=elapsed,
            params=self.config.model_dump(mode="json"),
        )
        logger.info(f"[{step_name}] Done in {elapsed:.2f}s")
        return result

    @classmethod
    def get_input_schema(cls) -> dict:
        """Return JSON schema for inputs."""
        return cls.input_type.model_json_schema()

    @classmethod
    def get_output_schema(cls) -> dict:
        """Return JSON schema for outputs."""
        return cls.output_type.model_json_schema()

    @classmethod
    def get_config_schema(cls) -> dict:
        """Return JSON schema for config."""
        return cls.config_type.model_json_schema()
