"""
yolodet: multi-scale YOLO object detection on OpenCV DNN.

Public API:
    - Detector: loads a Darknet model and detects objects in BGR frames.
    - decode / suppress: the pure engine that turns raw output layers
      into de-duplicated detections. Usable without OpenCV inference.
    - Detection, Box: result types.
    - ConfigurationError, LabelLookupError: engine errors.

Usage:
    from yolodet import Detector

    detector = Detector()
    for det in detector.detect(frame):
        print(det)
"""

from yolodet.decoder import decode
from yolodet.detection import Box, Detection, DetectionCandidate
from yolodet.detector import Detector
from yolodet.errors import ConfigurationError, LabelLookupError
from yolodet.suppressor import suppress

__all__ = [
    "Box",
    "ConfigurationError",
    "Detection",
    "DetectionCandidate",
    "Detector",
    "LabelLookupError",
    "decode",
    "suppress",
]
