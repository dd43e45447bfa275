"""
Detector: the public API for YOLO object detection.

Public contract:
    Detector.detect(frame: np.ndarray) -> list[Detection]

Constraints:
    - Input must be a BGR numpy array (as returned by OpenCV).
    - The method is stateless per call and deterministic.
    - Thread-safety is not guaranteed (single-threaded design).

Non-goals:
    - No file reading (other than model and labels at construction),
      camera access, or output writing.
    - No tracking or temporal smoothing across frames.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from yolodet.config import AppConfig, load_config, resolve_path
from yolodet.detection import Detection
from yolodet.labels import load_labels
from yolodet.model_loader import get_output_layer_names, load_model
from yolodet.postprocessor import postprocess
from yolodet.preprocessor import preprocess

logger = logging.getLogger(__name__)


class Detector:
    """Multi-scale YOLO detector running on OpenCV DNN.

    Usage:
        detector = Detector()                      # Uses safe defaults
        detector = Detector(config=my_config)       # Custom config
        detections = detector.detect(frame)         # BGR numpy array

    The constructor loads the network and the label list once.
    Every detect() call forwards all detection layers and runs the
    decode/suppress engine on their combined output.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        labels: Optional[Sequence[str]] = None,
    ) -> None:
        """Initialize the detector and load the model.

        Args:
            config: Application configuration. If None, safe defaults
                    are used (no config file required).
            labels: Class names. If None, they are read from
                    config.model.labels_path.

        Raises:
            FileNotFoundError: If model or label files are missing.
            RuntimeError: If the requested backend is unavailable.
            ConfigurationError: If configuration values are invalid.
        """
        if config is None:
            config = load_config()

        self._config = config
        if labels is None:
            labels = load_labels(resolve_path(config.model.labels_path))
        self._labels = list(labels)
        self._net = load_model(config.model)
        self._output_layers = get_output_layer_names(self._net)

        logger.info(
            "Detector initialized (backend=%s, classes=%d, "
            "confidence_threshold=%.2f, overlap_threshold=%.2f)",
            config.model.backend,
            len(self._labels),
            config.detection.confidence_threshold,
            config.detection.overlap_threshold,
        )

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """Detect objects in a single BGR frame.

        Args:
            frame: A BGR image as a numpy array with shape (H, W, 3).

        Returns:
            A list of Detection objects, sorted by confidence (descending).
            Returns an empty list if nothing is detected.

        Raises:
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame has incorrect shape or is empty, or the
                network output is malformed.
            LabelLookupError: If the model predicts a class the label
                list does not cover.
        """
        self._validate_frame(frame)

        blob = preprocess(frame, self._config.model)

        self._net.setInput(blob)
        outputs = self._net.forward(self._output_layers)

        h, w = frame.shape[:2]
        return postprocess(
            layers=outputs,
            frame_width=w,
            frame_height=h,
            labels=self._labels,
            config=self._config.detection,
        )

    @property
    def config(self) -> AppConfig:
        """Return the active configuration (read-only)."""
        return self._config

    @property
    def labels(self) -> List[str]:
        """Return a copy of the class label list."""
        return list(self._labels)

    @staticmethod
    def _validate_frame(frame: np.ndarray) -> None:
        """Validate that the input frame meets the API contract.

        Raises:
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame is empty or has wrong dimensions.
        """
        if not isinstance(frame, np.ndarray):
            raise TypeError(
                f"Expected frame to be a numpy ndarray, "
                f"got {type(frame).__name__}. "
                f"Use cv2.imread() or VideoCapture.read() to obtain frames."
            )

        if frame.size == 0:
            raise ValueError(
                "Frame is empty (zero size). "
                "Ensure the input source is providing valid frames."
            )

        if frame.ndim != 3 or frame.shape[2] != 3:
            raise ValueError(
                f"Expected a 3-channel BGR frame (H, W, 3), got shape {frame.shape}."
            )
