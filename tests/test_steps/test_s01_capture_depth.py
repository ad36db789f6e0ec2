"""Tests for S01: Depth capture step and frame drivers."""

import sys
import types
from pathlib import Path
from typing import Optional

import numpy as np
import pytest

from kinect2stl.core.errors import DepthUnavailableError, DeviceUnavailableError, FrameShapeError
from kinect2stl.steps.s01_capture_depth.config import CaptureDepthConfig
from kinect2stl.steps.s01_capture_depth.contracts import CaptureDepthInput, CaptureDepthOutput
from kinect2stl.steps.s01_capture_depth._drivers import (
    STATUS_ERROR,
    STATUS_OK,
    ArrayDriver,
    DepthDriver,
    FreenectDriver,
    NpyFileDriver,
    make_driver,
)


class FailingDriver(DepthDriver):
    """Driver with scripted statuses."""

    name = "failing"

    def __init__(self, video_status: int = STATUS_OK, depth_status: int = STATUS_OK):
        self.video_status = video_status
        self.depth_status = depth_status
        self.closed = False

    def acquire_video(self) -> int:
        return self.video_status

    def acquire_depth(self) -> tuple[Optional[np.ndarray], int]:
        if self.depth_status < 0:
            return None, self.depth_status
        return np.array([[1, 2], [3, 4]], dtype=np.uint16), self.depth_status

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_freenect(monkeypatch):
    """Install a stand-in ``freenect`` module serving a 640x480 ramp."""
    module = types.SimpleNamespace(
        VIDEO_RGB=0,
        DEPTH_11BIT=0,
        calls=[],
    )
    depth = (np.arange(480 * 640, dtype=np.uint32) % 2048).astype(np.uint16).reshape(480, 640)

    def sync_get_video(index=0, fmt=0):
        module.calls.append(("video", index))
        return np.zeros((480, 640, 3), dtype=np.uint8), 1

    def sync_get_depth(index=0, fmt=0):
        module.calls.append(("depth", index))
        return depth, 2

    def sync_stop():
        module.calls.append(("stop",))

    module.sync_get_video = sync_get_video
    module.sync_get_depth = sync_get_depth
    module.sync_stop = sync_stop
    monkeypatch.setitem(sys.modules, "freenect", module)
    return module


# ── Contract tests ──


class TestCaptureDepthContracts:
    def test_config_defaults(self):
        cfg = CaptureDepthConfig()
        assert cfg.source == "freenect"
        assert cfg.input_path is None
        assert cfg.device_index == 0
        assert cfg.probe_video is True
        assert cfg.frame_width is None
        assert cfg.frame_height is None

    def test_config_rejects_unknown_source(self):
        with pytest.raises(ValueError):
            CaptureDepthConfig(source="webcam")

    def test_output_schema(self):
        schema = CaptureDepthOutput.model_json_schema()
        for field in ("depth_path", "width", "height", "min_depth", "max_depth"):
            assert field in schema["properties"]


# ── Drivers ──


class TestDrivers:
    def test_array_driver_is_read_only(self, random_frame):
        driver = ArrayDriver(random_frame)
        assert driver.acquire_video() == STATUS_OK
        frame, status = driver.acquire_depth()
        assert status == STATUS_OK
        np.testing.assert_array_equal(frame, random_frame)
        with pytest.raises(ValueError):
            frame[0, 0] = 1

    def test_npy_file_driver(self, frame_file: Path, random_frame):
        driver = NpyFileDriver(frame_file)
        assert driver.acquire_video() == STATUS_OK
        frame, status = driver.acquire_depth()
        assert status == STATUS_OK
        np.testing.assert_array_equal(frame, random_frame)

    def test_npy_file_driver_missing(self, tmp_path: Path):
        driver = NpyFileDriver(tmp_path / "nope.npy")
        assert driver.acquire_video() == STATUS_ERROR
        assert driver.acquire_depth() == (None, STATUS_ERROR)

    def test_freenect_without_bindings(self, monkeypatch):
        # a None entry makes ``import freenect`` raise ImportError
        monkeypatch.setitem(sys.modules, "freenect", None)
        driver = FreenectDriver()
        assert driver.acquire_video() == STATUS_ERROR
        assert driver.acquire_depth() == (None, STATUS_ERROR)

    def test_freenect_with_bindings(self, fake_freenect):
        driver = FreenectDriver(device_index=1)
        assert driver.acquire_video() == STATUS_OK
        frame, status = driver.acquire_depth()
        driver.close()
        assert status == STATUS_OK
        assert frame.shape == (480, 640)
        assert frame.dtype == np.uint16
        assert fake_freenect.calls == [("video", 1), ("depth", 1), ("stop",)]

    def test_freenect_no_device(self, fake_freenect):
        fake_freenect.sync_get_video = lambda index=0, fmt=0: None
        driver = FreenectDriver()
        assert driver.acquire_video() == STATUS_ERROR

    def test_make_driver(self, frame_file: Path):
        assert isinstance(make_driver("freenect"), FreenectDriver)
        assert isinstance(make_driver("file", input_path=frame_file), NpyFileDriver)
        with pytest.raises(ValueError):
            make_driver("file")
        with pytest.raises(ValueError):
            make_driver("webcam")


# ── Step ──


class TestCaptureDepthStep:
    def test_run_from_array(self, data_root: Path, random_frame):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        step = CaptureDepthStep(
            config=CaptureDepthConfig(), data_root=data_root, driver=ArrayDriver(random_frame)
        )
        out = step.execute(CaptureDepthInput())

        assert out.depth_path.exists()
        assert (out.width, out.height) == (7, 5)
        assert (out.min_depth, out.max_depth) == (0, 2047)
        assert out.source == "array"
        np.testing.assert_array_equal(np.load(out.depth_path), random_frame)

    def test_run_from_file(self, data_root: Path, frame_file: Path, random_frame):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        cfg = CaptureDepthConfig(source="file", input_path=frame_file)
        step = CaptureDepthStep(config=cfg, data_root=data_root)
        out = step.execute(CaptureDepthInput())
        assert out.source == "file"
        assert out.max_depth == int(random_frame.max())

    def test_input_path_overrides_source(self, data_root: Path, frame_file: Path):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        step = CaptureDepthStep(config=CaptureDepthConfig(), data_root=data_root)
        out = step.execute(CaptureDepthInput(input_path=frame_file))
        assert out.source == "file"

    def test_run_from_freenect(self, data_root: Path, fake_freenect):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        cfg = CaptureDepthConfig(frame_width=640, frame_height=480)
        step = CaptureDepthStep(config=cfg, data_root=data_root)
        out = step.execute(CaptureDepthInput())
        assert (out.width, out.height) == (640, 480)
        assert (out.min_depth, out.max_depth) == (0, 2047)
        assert ("stop",) in fake_freenect.calls

    def test_freenect_frame_size_pinned_by_default(self, data_root: Path, fake_freenect):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        small = np.ones((240, 320), dtype=np.uint16)
        fake_freenect.sync_get_depth = lambda index=0, fmt=0: (small, 0)
        step = CaptureDepthStep(config=CaptureDepthConfig(), data_root=data_root)
        with pytest.raises(FrameShapeError, match="640x480"):
            step.execute(CaptureDepthInput())

    def test_freenect_default_accepts_kinect_frame(self, data_root: Path, fake_freenect):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        step = CaptureDepthStep(config=CaptureDepthConfig(), data_root=data_root)
        out = step.execute(CaptureDepthInput())
        assert (out.width, out.height) == (640, 480)

    def test_validate_missing_file(self, data_root: Path):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        cfg = CaptureDepthConfig(source="file", input_path=Path("/nonexistent/frame.npy"))
        step = CaptureDepthStep(config=cfg, data_root=data_root)
        assert step.validate_inputs(CaptureDepthInput()) is False

    def test_validate_wrong_suffix(self, data_root: Path):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        bad = data_root / "raw" / "frame.png"
        bad.write_bytes(b"\x89PNG")
        step = CaptureDepthStep(config=CaptureDepthConfig(source="file", input_path=bad), data_root=data_root)
        assert step.validate_inputs(CaptureDepthInput()) is False

    def test_no_device(self, data_root: Path):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        driver = FailingDriver(video_status=-1)
        step = CaptureDepthStep(config=CaptureDepthConfig(), data_root=data_root, driver=driver)
        with pytest.raises(DeviceUnavailableError, match="No kinect found"):
            step.execute(CaptureDepthInput())
        assert driver.closed

    def test_no_depth(self, data_root: Path):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        driver = FailingDriver(depth_status=-1)
        step = CaptureDepthStep(config=CaptureDepthConfig(), data_root=data_root, driver=driver)
        with pytest.raises(DepthUnavailableError, match="Could not get depth"):
            step.execute(CaptureDepthInput())
        assert driver.closed

    def test_skip_video_probe(self, data_root: Path):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        driver = FailingDriver(video_status=-1)
        cfg = CaptureDepthConfig(probe_video=False)
        step = CaptureDepthStep(config=cfg, data_root=data_root, driver=driver)
        out = step.execute(CaptureDepthInput())
        assert (out.min_depth, out.max_depth) == (1, 4)

    def test_wrong_frame_size(self, data_root: Path, random_frame):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        cfg = CaptureDepthConfig(frame_width=640, frame_height=480)
        step = CaptureDepthStep(config=cfg, data_root=data_root, driver=ArrayDriver(random_frame))
        with pytest.raises(FrameShapeError, match="640x480"):
            step.execute(CaptureDepthInput())

    def test_save_frame(self, data_root: Path, random_frame):
        from kinect2stl.steps.s01_capture_depth.step import CaptureDepthStep

        saved = data_root / "processed" / "scan.npy"
        cfg = CaptureDepthConfig(save_frame_path=saved)
        step = CaptureDepthStep(config=cfg, data_root=data_root, driver=ArrayDriver(random_frame))
        step.execute(CaptureDepthInput())
        np.testing.assert_array_equal(np.load(saved), random_frame)


class TestCheckFrame:
    def test_accepts_uint16(self, random_frame):
        from kinect2stl.steps.s01_capture_depth.step import check_frame

        assert check_frame(random_frame) is random_frame

    def test_converts_int_frames(self):
        from kinect2stl.steps.s01_capture_depth.step import check_frame

        frame = check_frame(np.array([[0, 2047], [5, 6]], dtype=np.int32))
        assert frame.dtype == np.uint16

    @pytest.mark.parametrize("frame", [
        np.zeros((4,), dtype=np.uint16),
        np.zeros((1, 4), dtype=np.uint16),
        np.zeros((3, 3), dtype=np.float32),
        np.array([[-1, 0], [0, 0]], dtype=np.int32),
        np.array([[70000, 0], [0, 0]], dtype=np.int64),
    ])
    def test_rejects_bad_frames(self, frame):
        from kinect2stl.steps.s01_capture_depth.step import check_frame

        with pytest.raises(FrameShapeError):
            check_frame(frame)
