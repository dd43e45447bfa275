"""
Preprocessing for the YOLO detection pipeline.

Responsibility:
    Convert a raw BGR frame (numpy array) into a 4D DNN-compatible
    input blob using cv2.dnn.blobFromImage.

Non-goals:
    - No frame acquisition or I/O.
    - No inference or coordinate mapping.

Hard-coded:
    - Zero mean subtraction and no cropping. The whole frame is
      stretched to the network input size, so normalized outputs map
      straight back onto the original frame.
"""

import numpy as np
import cv2

from yolodet.config import ModelConfig


def preprocess(frame: np.ndarray, config: ModelConfig) -> np.ndarray:
    """Convert a raw BGR frame into a DNN input blob.

    Args:
        frame: Input image as a BGR numpy array (H, W, 3).
        config: ModelConfig providing input_size, scale_factor and swap_rb.

    Returns:
        A 4D numpy array of shape (1, 3, H, W) with dtype float32,
        ready to be passed to net.setInput().

    Raises:
        ValueError: If the frame is empty.
    """
    if frame is None or frame.size == 0:
        raise ValueError(
            "Cannot preprocess an empty frame. "
            "Ensure the input source is providing valid frames."
        )

    return cv2.dnn.blobFromImage(
        image=frame,
        scalefactor=config.scale_factor,
        size=config.input_size,
        mean=(0, 0, 0),
        swapRB=config.swap_rb,
        crop=False,
    )
