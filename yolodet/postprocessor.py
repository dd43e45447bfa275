"""
Postprocessing for the YOLO detection pipeline.

Responsibility:
    Run the two pure stages of the engine back to back: decode the raw
    output layers, then suppress duplicates. Thresholds come from a
    DetectionConfig and the label list is passed in by the caller.

Non-goals:
    - No drawing, saving, or display logic.
    - No model loading or inference.
    - No state between calls (each frame is independent).
"""

from typing import List, Sequence

import numpy as np

from yolodet.config import DetectionConfig
from yolodet.decoder import decode
from yolodet.detection import Detection
from yolodet.suppressor import suppress


def postprocess(
    layers: Sequence[np.ndarray],
    frame_width: int,
    frame_height: int,
    labels: Sequence[str],
    config: DetectionConfig,
) -> List[Detection]:
    """Turn raw output layers into the final detection list for one frame.

    Args:
        layers: Raw output of every detection layer (one 2-D array each).
        frame_width: Original frame width in pixels (for coordinate mapping).
        frame_height: Original frame height in pixels (for coordinate mapping).
        labels: Class names indexed by class id.
        config: Confidence/overlap thresholds and the score column offset.

    Returns:
        De-duplicated detections sorted by confidence (descending).
        Empty list if nothing passes the confidence threshold.
    """
    candidates = decode(
        layers,
        frame_width,
        frame_height,
        labels,
        config.confidence_threshold,
        score_offset=config.score_offset,
    )
    return suppress(candidates, config.overlap_threshold)
