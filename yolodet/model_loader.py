"""
Model loading for the YOLO detection system.

Responsibility:
    Load the Darknet network from disk, configure the compute backend,
    and report which layers produce detections.

Non-goals:
    - No preprocessing, inference, or frame-level logic.
    - No automatic model downloading.
    - No fallback to alternative models.

Failure behavior:
    - Missing model files raise FileNotFoundError with the exact
      missing path and expected location.
    - Incompatible backend raises RuntimeError.
"""

import logging
from typing import List

import cv2

from yolodet.config import ModelConfig, resolve_path

logger = logging.getLogger(__name__)


def load_model(config: ModelConfig) -> cv2.dnn.Net:
    """Load and configure the YOLO Darknet model.

    Args:
        config: ModelConfig containing file paths and backend preference.

    Returns:
        A configured cv2.dnn.Net ready for inference.

    Raises:
        FileNotFoundError: If the .cfg or .weights file does not exist.
        RuntimeError: If the requested backend is unavailable.
    """
    network_cfg = resolve_path(config.config_path)
    weights = resolve_path(config.weights_path)

    if not network_cfg.is_file():
        raise FileNotFoundError(
            f"Model config not found.\n"
            f"  Expected: {network_cfg}\n"
            f"  Provide the file or update 'model.config_path' in your config."
        )

    if not weights.is_file():
        raise FileNotFoundError(
            f"Model weights not found.\n"
            f"  Expected: {weights}\n"
            f"  Download the weights file and place it at the path above,\n"
            f"  or update 'model.weights_path' in your config."
        )

    logger.info("Loading model: config=%s, weights=%s", network_cfg, weights)
    net = cv2.dnn.readNetFromDarknet(str(network_cfg), str(weights))
    if net.empty():
        raise RuntimeError(
            f"OpenCV could not build a network from {network_cfg} and {weights}."
        )

    if config.backend == "cuda":
        logger.info("Setting CUDA backend and target.")
        try:
            net.setPreferableBackend(cv2.dnn.DNN_BACKEND_CUDA)
            net.setPreferableTarget(cv2.dnn.DNN_TARGET_CUDA)
        except cv2.error as e:
            raise RuntimeError(
                f"Failed to set CUDA backend. Ensure OpenCV was built with "
                f"CUDA support (opencv-contrib-python or custom build).\n"
                f"  OpenCV error: {e}"
            ) from e
    else:
        logger.info("Using CPU backend.")
        net.setPreferableBackend(cv2.dnn.DNN_BACKEND_OPENCV)
        net.setPreferableTarget(cv2.dnn.DNN_TARGET_CPU)

    logger.info("Model loaded successfully.")
    return net


def get_output_layer_names(net: cv2.dnn.Net) -> List[str]:
    """Return the names of the layers whose outputs carry detections.

    For YOLOv4 these are the three region layers, one per scale.
    """
    names = list(net.getUnconnectedOutLayersNames())
    logger.info("Detection output layers: %s", names)
    return names
