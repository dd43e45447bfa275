"""
Frame acquisition for the YOLO detection pipeline.

Responsibility:
    Yield (frame_id, frame) pairs from a single image, a directory of
    images, a video file, or a webcam, so the detection loop does not
    care where frames come from.

Non-goals:
    - No detection, drawing, or output writing.
    - No resizing. Detections are reported in the frame's own pixels.
"""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp"}
VIDEO_EXTENSIONS = {".mp4", ".avi", ".mov", ".mkv", ".wmv"}

# Consecutive failed webcam reads tolerated before giving up.
_MAX_WEBCAM_FAILURES = 30


class FrameSource:
    """Iterable over the frames of an image, directory, video or webcam.

    Usage:
        with FrameSource("img/person.jpg") as source:
            for frame_id, frame in source:
                ...

    Unreadable images are logged and skipped.
    """

    def __init__(self, source: Union[str, int]) -> None:
        """Classify and open the source.

        Raises:
            FileNotFoundError: If a path source does not exist.
            ValueError: If the file type is unsupported or a directory
                holds no images.
            RuntimeError: If a video or webcam cannot be opened.
        """
        self._cap: Optional[cv2.VideoCapture] = None
        self._image_paths: List[Path] = []

        text = str(source).strip()
        path = Path(text)

        if text.isdigit():
            self.kind = "webcam"
            self._open_capture(int(text))
        elif path.is_dir():
            self.kind = "directory"
            self._image_paths = sorted(
                p for p in path.iterdir() if p.suffix.lower() in IMAGE_EXTENSIONS
            )
            if not self._image_paths:
                raise ValueError(f"No image files found in directory: '{text}'.")
        elif path.is_file():
            suffix = path.suffix.lower()
            if suffix in IMAGE_EXTENSIONS:
                self.kind = "image"
                self._image_paths = [path]
            elif suffix in VIDEO_EXTENSIONS:
                self.kind = "video"
                self._open_capture(text)
            else:
                raise ValueError(
                    f"Unrecognized file extension '{suffix}' for source '{text}'."
                )
        else:
            raise FileNotFoundError(
                f"Input source not found: '{text}'. "
                f"Provide a valid file path, directory, or device index."
            )

        logger.info("FrameSource opened: kind=%s, source=%s", self.kind, text)

    def _open_capture(self, target: Union[str, int]) -> None:
        self._cap = cv2.VideoCapture(target)
        if not self._cap.isOpened():
            raise RuntimeError(f"Failed to open video source {target!r}.")

    def __iter__(self) -> Iterator[Tuple[int, np.ndarray]]:
        if self._cap is None:
            yield from self._iterate_images()
        else:
            yield from self._iterate_capture()

    def _iterate_images(self) -> Iterator[Tuple[int, np.ndarray]]:
        for frame_id, path in enumerate(self._image_paths):
            frame = cv2.imread(str(path))
            if frame is None:
                logger.warning("Skipping unreadable image (frame_id=%d): %s", frame_id, path)
                continue
            yield frame_id, frame

    def _iterate_capture(self) -> Iterator[Tuple[int, np.ndarray]]:
        frame_id = 0
        failures = 0
        while True:
            ok, frame = self._cap.read()
            if ok and frame is not None:
                failures = 0
                yield frame_id, frame
            elif self.kind == "video":
                logger.info("End of video reached at frame %d.", frame_id)
                return
            else:
                failures += 1
                if failures >= _MAX_WEBCAM_FAILURES:
                    logger.error("Webcam failed %d reads in a row, stopping.", failures)
                    return
                logger.warning("Failed to read frame %d from webcam, skipping.", frame_id)
            frame_id += 1

    def release(self) -> None:
        """Release the capture handle, if any."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def __enter__(self) -> "FrameSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()
