"""
Output handling for the YOLO detection pipeline.

Responsibility:
    Route each frame's detections to the configured sinks. Several
    modes can be active at once:

        - 'report': log the report lines for every frame.
        - 'save_image': write the annotated frame as a JPEG.
        - 'save_json' / 'save_csv': buffer detections, write on finalize.

Non-goals:
    - No display window and no video writing.
    - No detection logic or input acquisition.
"""

import logging
from typing import Dict, List

import cv2
import numpy as np

from yolodet.config import AppConfig, parse_output_modes, resolve_path
from yolodet.detection import Detection
from yolodet.serializer import format_report, save_csv, save_json
from yolodet.visualizer import draw_detections

logger = logging.getLogger(__name__)

_FILE_MODES = {"save_image", "save_json", "save_csv"}


class OutputHandler:
    """Routes detection results to configured output sinks.

    Usage:
        handler = OutputHandler(config)
        handler.process_frame(frame_id, frame, detections)
        ...
        handler.finalize()  # Flush buffered JSON/CSV output
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._modes = parse_output_modes(config.output.mode)
        self._detections_buffer: Dict[int, List[Detection]] = {}
        self._save_path = resolve_path(config.output.save_path)

        if self._modes & _FILE_MODES:
            self._save_path.mkdir(parents=True, exist_ok=True)

        logger.info(
            "OutputHandler initialized: modes=%s, save_path=%s",
            sorted(self._modes), self._save_path,
        )

    @property
    def modes(self) -> set:
        return set(self._modes)

    def process_frame(
        self,
        frame_id: int,
        frame: np.ndarray,
        detections: List[Detection],
    ) -> None:
        """Send one frame's detections to every active sink."""
        if "report" in self._modes:
            for line in format_report(detections):
                logger.info("[frame %d] %s", frame_id, line)

        if "save_image" in self._modes:
            annotated = draw_detections(frame, detections, self._config.visualization)
            output_file = self._save_path / f"frame_{frame_id:06d}.jpg"
            if not cv2.imwrite(str(output_file), annotated):
                logger.warning("Failed to write annotated frame: %s", output_file)
            else:
                logger.debug("Saved frame %d to %s", frame_id, output_file)

        if self._modes & {"save_json", "save_csv"}:
            self._detections_buffer[frame_id] = list(detections)

    def finalize(self) -> None:
        """Flush buffered output. Must be called after the last frame."""
        if "save_json" in self._modes and self._detections_buffer:
            save_json(self._detections_buffer, str(self._save_path / "detections.json"))

        if "save_csv" in self._modes and self._detections_buffer:
            save_csv(self._detections_buffer, str(self._save_path / "detections.csv"))

        self._detections_buffer.clear()
        logger.info("OutputHandler finalized.")
