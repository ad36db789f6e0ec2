"""Pipeline orchestrator: reads pipeline.yaml and executes steps in order."""

from __future__ import annotations

import importlib
import logging
import tempfile
from pathlib import Path
from typing import Any, Callable, Optional, Union

import yaml
from pydantic import BaseModel

from .contracts import PipelineConfig, StepEntry

logger = logging.getLogger(__name__)

StepCallback = Callable[[str, BaseModel], None]


def default_pipeline_config() -> PipelineConfig:
    """The capture -> mesh -> STL pipeline with every step on its defaults."""
    return PipelineConfig(
        project_name="kinect2stl",
        steps=[
            StepEntry(name="capture_depth", module="kinect2stl.steps.s01_capture_depth"),
            StepEntry(
                name="depth_mesh",
                module="kinect2stl.steps.s02_depth_mesh",
                depends_on=["capture_depth"],
            ),
            StepEntry(
                name="stl_export",
                module="kinect2stl.steps.s03_stl_export",
                depends_on=["depth_mesh"],
            ),
        ],
    )


def load_pipeline_config(config_path: Path) -> PipelineConfig:
    """Load and validate pipeline.yaml."""
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return PipelineConfig(**raw)


def load_step_config(
    config_path: Optional[Path],
    config_class: type[BaseModel],
    overrides: Optional[dict[str, Any]] = None,
) -> BaseModel:
    """Load a step-specific YAML config into its Pydantic model.

    ``config_path`` may be None, in which case the model defaults apply.
    ``overrides`` are merged on top of the file contents.
    """
    raw: dict[str, Any] = {}
    if config_path is not None:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    if overrides:
        raw.update(overrides)
    return config_class(**raw)


def import_step_class(module_path: str):
    """Dynamically import a step class from its module path.

    Expects module_path like 'kinect2stl.steps.s01_capture_depth'
    and looks for a class ending in 'Step' in that module's step.py.
    """
    step_module = importlib.import_module(f"{module_path}.step")
    for attr_name in dir(step_module):
        attr = getattr(step_module, attr_name)
        if (
            isinstance(attr, type)
            and hasattr(attr, "run")
            and attr_name.endswith("Step")
            and attr_name != "BaseStep"
        ):
            return attr
    raise ImportError(f"No Step class found in {module_path}.step")


def _run_steps(
    pipeline_cfg: PipelineConfig,
    data_root: Path,
    on_step_done: Optional[StepCallback],
) -> dict[str, BaseModel]:
    results: dict[str, BaseModel] = {}

    enabled_steps = [s for s in pipeline_cfg.steps if s.enabled]
    logger.info(f"Pipeline '{pipeline_cfg.project_name}' with {len(enabled_steps)} steps")

    for entry in enabled_steps:
        logger.info(f"--- Step: {entry.name} ---")

        step_cls = import_step_class(entry.module)
        config_path = Path(entry.config_file) if entry.config_file else None
        step_config = load_step_config(config_path, step_cls.config_type, entry.config)
        step_instance = step_cls(config=step_config, data_root=data_root)

        # Build input from previous step outputs
        input_data: dict[str, Any] = {}
        for dep in entry.depends_on:
            if dep not in results:
                raise KeyError(f"Step '{entry.name}' depends on '{dep}', which has not run")
            input_data.update(results[dep].model_dump())

        step_input = step_cls.input_type(**input_data)
        output = step_instance.execute(step_input)
        results[entry.name] = output
        if on_step_done is not None:
            on_step_done(entry.name, output)

    logger.info("Pipeline complete.")
    return results


def run_pipeline(
    config: Union[Path, PipelineConfig],
    on_step_done: Optional[StepCallback] = None,
) -> dict[str, BaseModel]:
    """Execute the full pipeline from a config file or an in-memory config.

    Returns the output model of every step, keyed by step name.
    ``on_step_done`` is called after each step with its name and output.
    """
    pipeline_cfg = config if isinstance(config, PipelineConfig) else load_pipeline_config(config)

    if pipeline_cfg.data_root is not None:
        data_root = Path(pipeline_cfg.data_root)
        data_root.mkdir(parents=True, exist_ok=True)
        return _run_steps(pipeline_cfg, data_root, on_step_done)

    with tempfile.TemporaryDirectory(prefix="kinect2stl_") as tmp:
        logger.debug(f"Intermediates in temporary directory {tmp}")
        return _run_steps(pipeline_cfg, Path(tmp), on_step_done)
