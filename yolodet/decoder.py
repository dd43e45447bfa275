"""
Decoding of raw YOLO output layers into detection candidates.

Responsibility:
    Convert the per-cell rows of one or more output layers into
    pixel-space Detection candidates whose best class score is strictly
    above the confidence threshold.

Non-goals:
    - No suppression or ordering (see suppressor).
    - No inference, no clamping to the frame, no label-file reading.

Hard-coded:
    - Row layout: [cx, cy, w, h, objectness, class_scores...] with the
      geometry normalized to [0, 1] relative to the input image. The
      first class-score column is configurable via score_offset.
    - Float-to-pixel conversion truncates toward zero, and the box's
      top-left corner is found with truncating integer division. The
      resulting +-1 pixel drift is part of the output contract.
"""

import logging
from typing import List, Sequence

import numpy as np

from yolodet.config import validate_confidence_threshold
from yolodet.detection import Box, DetectionCandidate
from yolodet.errors import LabelLookupError

logger = logging.getLogger(__name__)

# Darknet rows carry objectness in column 4; class scores start at 5.
DARKNET_SCORE_OFFSET = 5

_NUM_BOX_COLUMNS = 4


def decode(
    layers: Sequence[np.ndarray],
    image_width: int,
    image_height: int,
    labels: Sequence[str],
    confidence_threshold: float,
    score_offset: int = DARKNET_SCORE_OFFSET,
) -> List[DetectionCandidate]:
    """Decode raw output layers into detection candidates.

    Args:
        layers: One 2-D array per output layer, one row per prediction.
        image_width: Width in pixels of the image the boxes refer to.
        image_height: Height in pixels of the image the boxes refer to.
        labels: Class names, indexed by class id.
        confidence_threshold: Rows whose best class score is not strictly
            greater than this value are dropped.
        score_offset: Column index where class scores begin.

    Returns:
        Candidates from all layers, concatenated in layer order. No
        ordering by confidence is implied.

    Raises:
        ConfigurationError: If confidence_threshold is not in [0, 1).
        ValueError: If the image size is not positive, or a layer is not
            a 2-D array with at least one class-score column.
        LabelLookupError: If a kept row's class id has no label.
    """
    validate_confidence_threshold(confidence_threshold)
    if image_width <= 0 or image_height <= 0:
        raise ValueError(
            f"Image dimensions must be positive, got {image_width}x{image_height}."
        )
    if score_offset < _NUM_BOX_COLUMNS:
        raise ValueError(
            f"score_offset must be at least {_NUM_BOX_COLUMNS}, got {score_offset}."
        )

    candidates: List[DetectionCandidate] = []
    num_layers = 0
    for layer_index, layer in enumerate(layers):
        num_layers += 1
        decoded = _decode_layer(
            layer,
            layer_index,
            image_width,
            image_height,
            labels,
            confidence_threshold,
            score_offset,
        )
        candidates.extend(decoded)

    logger.debug(
        "Decoded %d candidates from %d layer(s) (threshold=%.2f)",
        len(candidates), num_layers, confidence_threshold,
    )
    return candidates


def _decode_layer(
    layer: np.ndarray,
    layer_index: int,
    image_width: int,
    image_height: int,
    labels: Sequence[str],
    confidence_threshold: float,
    score_offset: int,
) -> List[DetectionCandidate]:
    """Decode the rows of a single layer."""
    rows = np.asarray(layer)
    if rows.size == 0:
        return []
    if rows.ndim != 2:
        raise ValueError(
            f"Layer {layer_index}: expected a 2-D array of predictions, "
            f"got shape {rows.shape}."
        )
    if rows.shape[1] <= score_offset:
        raise ValueError(
            f"Layer {layer_index}: rows have {rows.shape[1]} columns, "
            f"need more than {score_offset} to hold any class score."
        )
    if not np.issubdtype(rows.dtype, np.floating):
        rows = rows.astype(np.float64)

    scores = rows[:, score_offset:]
    class_ids = np.argmax(scores, axis=1)
    confidences = scores[np.arange(scores.shape[0]), class_ids]

    keep = np.flatnonzero(confidences > confidence_threshold)
    if keep.size == 0:
        return []

    # Scale in the layer's own precision, then truncate toward zero.
    scale = np.array(
        [image_width, image_height, image_width, image_height], dtype=rows.dtype
    )
    geometry = (rows[keep, :_NUM_BOX_COLUMNS] * scale).astype(np.int64)
    center_x, center_y, width, height = geometry.T
    left = center_x - _halve(width)
    top = center_y - _halve(height)

    candidates = []
    for i, row_index in enumerate(keep):
        class_id = int(class_ids[row_index])
        if class_id >= len(labels):
            raise LabelLookupError(class_id, len(labels))

        x1, y1 = int(left[i]), int(top[i])
        candidates.append(DetectionCandidate(
            class_id=class_id,
            class_name=labels[class_id],
            confidence=float(confidences[row_index]),
            box=Box.from_corners(x1, y1, x1 + int(width[i]), y1 + int(height[i])),
        ))

    return candidates


def _halve(values: np.ndarray) -> np.ndarray:
    """Integer division by two, truncating toward zero like C/Go."""
    return np.sign(values) * (np.abs(values) // 2)
