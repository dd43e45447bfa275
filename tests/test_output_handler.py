"""
Tests for the output handler.
"""

import json
import logging

import numpy as np

from yolodet.config import AppConfig, OutputConfig
from yolodet.detection import Box, Detection
from yolodet.output_handler import OutputHandler

DETECTIONS = [Detection(class_id=0, class_name="person", confidence=0.9, box=Box(5, 5, 20, 30))]


def _config(mode, save_path):
    return AppConfig(output=OutputConfig(mode=mode, save_path=str(save_path)))


def test_report_mode_logs_lines(tmp_path, caplog):
    """Test that report mode logs one line per detection."""
    caplog.set_level(logging.INFO, logger="yolodet.output_handler")
    handler = OutputHandler(_config("report", tmp_path / "out"))

    handler.process_frame(4, np.zeros((40, 40, 3), dtype=np.uint8), DETECTIONS)
    handler.finalize()

    assert "[frame 4] Detected 0: person, Confidence: 90.00%" in caplog.text
    assert not (tmp_path / "out").exists()


def test_file_modes(tmp_path):
    """Test that image, JSON and CSV sinks all write their files."""
    out = tmp_path / "out"
    handler = OutputHandler(_config("save_image, save_json,save_csv", out))
    assert handler.modes == {"save_image", "save_json", "save_csv"}

    frame = np.zeros((40, 40, 3), dtype=np.uint8)
    handler.process_frame(0, frame, DETECTIONS)
    handler.process_frame(1, frame, [])
    handler.finalize()

    assert (out / "frame_000000.jpg").is_file()
    assert (out / "frame_000001.jpg").is_file()
    assert (out / "detections.csv").is_file()
    payload = json.loads((out / "detections.json").read_text(encoding="utf-8"))
    assert payload["total_frames"] == 2
    assert payload["total_detections"] == 1
