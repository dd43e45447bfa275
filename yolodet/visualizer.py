"""
Visualization for the YOLO detection pipeline.

Responsibility:
    Draw each detection's class label and bounding box onto a frame.
    This is a pure rendering module: it produces an annotated copy of
    the frame and performs no I/O and no window management.
"""

from typing import List

import cv2
import numpy as np

from yolodet.config import VisualizationConfig
from yolodet.detection import Detection

_FONT = cv2.FONT_HERSHEY_SIMPLEX
_FONT_THICKNESS = 1
_TEXT_PADDING = 3


def draw_detections(
    frame: np.ndarray,
    detections: List[Detection],
    config: VisualizationConfig,
) -> np.ndarray:
    """Draw labeled bounding boxes onto a frame.

    The label sits on a filled background anchored at the box's
    top-left corner and growing upwards. The outline is drawn last so
    it stays visible on top of the label background.

    Args:
        frame: Input BGR image (not modified; a copy is returned).
        detections: Detection objects to render.
        config: Colors, thickness and font scale.

    Returns:
        A new BGR numpy array with detections drawn.
    """
    annotated = frame.copy()

    for det in detections:
        x1, y1 = det.box.x1, det.box.y1

        if config.show_labels:
            (text_w, text_h), _ = cv2.getTextSize(
                det.class_name, _FONT, config.font_scale, _FONT_THICKNESS
            )
            cv2.rectangle(
                annotated,
                (x1, y1),
                (x1 + text_w + 2 * _TEXT_PADDING, y1 - text_h - 2 * _TEXT_PADDING),
                color=config.label_color,
                thickness=cv2.FILLED,
            )
            cv2.putText(
                annotated,
                det.class_name,
                (x1 + _TEXT_PADDING, y1 - 2 * _TEXT_PADDING),
                _FONT,
                config.font_scale,
                config.text_color,
                _FONT_THICKNESS,
            )

        cv2.rectangle(
            annotated,
            (x1, y1),
            (det.box.x2, det.box.y2),
            color=config.box_color,
            thickness=config.thickness,
        )

    return annotated
