"""
Tests for the CLI entry point.
"""

import cv2
import numpy as np

import main


def test_build_overrides():
    """Test that CLI flags map onto config sections."""
    args = main.parse_args(["--overlap", "0.3", "--labels", "voc.names", "--source", "img/"])

    overrides = main.build_overrides(args)

    assert overrides["detection"] == {"confidence_threshold": None, "overlap_threshold": 0.3}
    assert overrides["model"]["labels_path"] == "voc.names"
    assert overrides["input"]["source"] == "img/"


def test_main_rejects_bad_threshold():
    """Test that an invalid threshold stops the run before loading the model."""
    assert main.main(["--confidence", "1.5"]) == 1


def test_main_missing_config(tmp_path):
    """Test that a missing config file exits with an error code."""
    assert main.main(["--config", str(tmp_path / "missing.yaml")]) == 1


class _StubSource:
    def __init__(self, source):
        self.released = False

    def __iter__(self):
        for frame_id in range(3):
            yield frame_id, np.zeros((8, 8, 3), dtype=np.uint8)

    def release(self):
        self.released = True


class _StubOutput:
    def __init__(self, config):
        self.frames = []
        self.finalized = False

    def process_frame(self, frame_id, frame, detections):
        self.frames.append(frame_id)

    def finalize(self):
        self.finalized = True


class _FlakyDetector:
    """Raises an OpenCV error on frame 1 and detects nothing otherwise."""

    def __init__(self, config):
        self.calls = 0

    def detect(self, frame):
        self.calls += 1
        if self.calls == 2:
            raise cv2.error("forward failed")
        return []


def test_main_continues_after_opencv_error_on_one_frame(monkeypatch):
    """Test that an OpenCV failure on one frame skips that frame only."""
    outputs = []

    def make_output(config):
        handler = _StubOutput(config)
        outputs.append(handler)
        return handler

    monkeypatch.setattr(main, "Detector", _FlakyDetector)
    monkeypatch.setattr(main, "FrameSource", _StubSource)
    monkeypatch.setattr(main, "OutputHandler", make_output)

    assert main.main([]) == 0
    assert outputs[0].frames == [0, 2]
    assert outputs[0].finalized
