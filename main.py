"""
YOLO Detection CLI Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, wire together
    the detector and I/O handlers, and run the main processing loop.

Usage:
    python main.py --source img/person.jpg
    python main.py --source images/ --output-mode report,save_json
    python main.py --source video.mp4 --output-mode save_image --overlap 0.3
    python main.py --config my_config.yaml

This module is the executable entry point. It should not be imported
by other modules.
"""

import argparse
import logging
import sys
import time
from typing import Any, Dict, List, Optional

import cv2

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

from yolodet.config import load_config
from yolodet.detector import Detector
from yolodet.errors import LabelLookupError
from yolodet.input_handler import FrameSource
from yolodet.output_handler import OutputHandler


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="YOLO object detection on images, videos and webcams",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--source",
        type=str,
        help="Input source: '0' for webcam, path to image/video file, or directory.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--labels",
        type=str,
        help="Path to the class labels file (one label per line). Overrides config.",
    )
    parser.add_argument(
        "--confidence",
        type=float,
        help="Confidence threshold in [0.0, 1.0). Overrides config.",
    )
    parser.add_argument(
        "--overlap",
        type=float,
        help="Overlap threshold for duplicate suppression in [0.0, 1.0]. Overrides config.",
    )
    parser.add_argument(
        "--backend",
        type=str,
        choices=["cpu", "cuda"],
        help="Compute backend preference. Overrides config.",
    )
    parser.add_argument(
        "--output-mode",
        type=str,
        help="Output mode(s), comma-separated: report, save_image, save_json, "
             "save_csv. Overrides config.",
    )
    parser.add_argument(
        "--output-path",
        type=str,
        help="Directory for output artifacts. Overrides config.",
    )

    return parser.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> Dict[str, Dict[str, Any]]:
    """Map parsed CLI arguments onto config sections."""
    return {
        "model": {"labels_path": args.labels, "backend": args.backend},
        "detection": {
            "confidence_threshold": args.confidence,
            "overlap_threshold": args.overlap,
        },
        "input": {"source": args.source},
        "output": {"mode": args.output_mode, "save_path": args.output_path},
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution loop."""
    args = parse_args(argv)

    # 1. Load Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = load_config(args.config, overrides=build_overrides(args))
    except Exception as e:
        logger.error("Configuration error: %s", e)
        return 1

    # 2. Initialize Components
    try:
        detector = Detector(config)
        source = FrameSource(config.input.source)
        output_handler = OutputHandler(config)
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error("Initialization failed: %s", e)
        return 1
    except Exception as e:
        logger.exception("Unexpected initialization error: %s", e)
        return 1

    # 3. Processing Loop
    frame_count = 0
    failed_frames = 0
    start_time = time.perf_counter()

    try:
        for frame_id, frame in source:
            frame_count += 1

            try:
                detections = detector.detect(frame)
            except (LabelLookupError, ValueError, cv2.error) as e:
                # A bad frame must not end a stream; move on to the next one.
                failed_frames += 1
                logger.error("Detection failed on frame %d: %s", frame_id, e)
                continue

            if frame_count % 30 == 0:
                logger.info("Processed %d frames...", frame_count)

            output_handler.process_frame(frame_id, frame, detections)

    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    except Exception as e:
        logger.exception("Runtime error during processing: %s", e)
        return 1
    finally:
        # 4. Cleanup
        elapsed = time.perf_counter() - start_time
        fps = frame_count / elapsed if elapsed > 0 else 0.0

        source.release()
        output_handler.finalize()

        logger.info(
            "Processing finished. Total frames: %d (failed: %d). Avg FPS: %.2f.",
            frame_count, failed_frames, fps,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
