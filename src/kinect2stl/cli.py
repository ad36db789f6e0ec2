"""CLI entry point for kinect2stl.

Usage:
    kinect2stl                          # Kinect -> ./kinect.stl
    kinect2stl -i frame.npy -o out.stl  # Re-mesh a saved frame
    kinect2stl -c configs/pipeline.yaml # Run a configured pipeline

Stdout carries a single ``depth range [min, max]`` line; diagnostics go to
stderr. Exit codes: 0 ok, 1 no device / no depth frame, 2 unusable frame, bad input
or an unreadable or invalid config.
Unknown arguments are ignored.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from kinect2stl.core.contracts import PipelineConfig
from kinect2stl.core.errors import Kinect2StlError
from kinect2stl.core.logging import setup_logging

app = typer.Typer(name="kinect2stl", help="Kinect depth frame to watertight STL", add_completion=False)
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

logger = logging.getLogger(__name__)


class DepthSource(str, Enum):
    freenect = "freenect"
    file = "file"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def _override(pipeline_cfg: PipelineConfig, step_name: str, **values: Any) -> None:
    """Merge non-None values into the inline config of one pipeline step."""
    values = {k: v for k, v in values.items() if v is not None}
    if not values:
        return
    for entry in pipeline_cfg.steps:
        if entry.name == step_name:
            entry.config.update(values)
            return
    logger.warning(f"Step '{step_name}' not in pipeline; ignoring {sorted(values)}")


def _print_summary(results: dict[str, BaseModel]) -> None:
    table = Table(title="kinect2stl")
    table.add_column("Step", style="cyan")
    table.add_column("Result", style="green")
    for name, output in results.items():
        fields = output.model_dump(mode="json")
        table.add_row(name, ", ".join(f"{k}={v}" for k, v in fields.items()))
    console.print(table)


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def scan(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="STL file to write [default: kinect.stl]"),
    source: Optional[DepthSource] = typer.Option(None, "--source", help="Depth source"),
    input_path: Optional[Path] = typer.Option(None, "--input", "-i", help="Saved uint16 frame (.npy) to mesh"),
    device_index: Optional[int] = typer.Option(None, "--device-index", help="Kinect device index"),
    ascii_stl: bool = typer.Option(False, "--ascii", help="Write ASCII instead of binary STL"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Pipeline config path"),
    data_root: Optional[Path] = typer.Option(None, "--data-root", help="Keep intermediates here"),
    save_frame: Optional[Path] = typer.Option(None, "--save-frame", help="Also save the raw frame as .npy"),
    validate: bool = typer.Option(False, "--validate", help="Check the written STL with trimesh"),
    summary: bool = typer.Option(False, "--summary", help="Print a table of step results"),
    log_level: LogLevel = typer.Option(
        LogLevel.WARNING, "--log-level", case_sensitive=False, help="Logging level"
    ),
) -> None:
    """Capture one depth frame and write it as a closed STL solid."""
    setup_logging(log_level.value)

    if ctx.args:
        logger.debug(f"Ignoring extra arguments: {ctx.args}")

    try:
        results = _run_scan(
            config=config,
            data_root=data_root,
            source=source,
            input_path=input_path,
            device_index=device_index,
            save_frame=save_frame,
            output=output,
            ascii_stl=ascii_stl,
            validate=validate,
        )
    except Kinect2StlError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]", soft_wrap=True)
        raise typer.Exit(e.exit_code)
    except (ValueError, OSError, yaml.YAMLError) as e:
        err_console.print(f"[red]{escape(str(e))}[/red]", soft_wrap=True)
        raise typer.Exit(2)

    if summary:
        _print_summary(results)


def _run_scan(
    config: Optional[Path],
    data_root: Optional[Path],
    source: Optional[DepthSource],
    input_path: Optional[Path],
    device_index: Optional[int],
    save_frame: Optional[Path],
    output: Optional[Path],
    ascii_stl: bool,
    validate: bool,
) -> dict[str, BaseModel]:
    """Build the pipeline config from the command line and run it."""
    from kinect2stl.core.pipeline_runner import default_pipeline_config, load_pipeline_config, run_pipeline
    from kinect2stl.steps.s01_capture_depth.contracts import CaptureDepthOutput

    pipeline_cfg = load_pipeline_config(config) if config else default_pipeline_config()
    if data_root is not None:
        pipeline_cfg.data_root = data_root
    if input_path is not None and source is None:
        source = DepthSource.file

    _override(
        pipeline_cfg,
        "capture_depth",
        source=source.value if source else None,
        input_path=input_path,
        device_index=device_index,
        save_frame_path=save_frame,
    )
    _override(
        pipeline_cfg,
        "stl_export",
        output_path=output,
        format="ascii" if ascii_stl else None,
        validate_mesh=True if validate else None,
    )

    def _report(step_name: str, step_output: BaseModel) -> None:
        if isinstance(step_output, CaptureDepthOutput):
            typer.echo(f"depth range [{step_output.min_depth}, {step_output.max_depth}]")

    return run_pipeline(pipeline_cfg, on_step_done=_report)


if __name__ == "__main__":
    app()
