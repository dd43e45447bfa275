"""
Serialization for the YOLO detection pipeline.

Responsibility:
    Export detection results as human-readable report lines or as
    structured files (JSON, CSV) for offline analysis.

Non-goals:
    - No rendering, display, or detection logic.
    - No streaming output. Files are written once on finalize.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Dict, List, Sequence

from yolodet.detection import Detection

logger = logging.getLogger(__name__)

_CSV_FIELDS = ["frame_id", "class_id", "class_name", "confidence", "x1", "y1", "x2", "y2"]


def format_report(detections: Sequence[Detection]) -> List[str]:
    """Render a detection list as report lines.

    Example:
        Detected objects:
        Detected 0: person, Confidence: 87.00%, Bbox: (10,20)-(110,220)
    """
    if not detections:
        return ["No objects detected"]
    return ["Detected objects:"] + [str(d) for d in detections]


def save_json(
    detections_by_frame: Dict[int, List[Detection]],
    output_path: str,
) -> None:
    """Export all detections to a JSON file.

    Output schema:
        {
            "frames": [
                {
                    "frame_id": 0,
                    "detections": [
                        {"class_id": ..., "class_name": ..., "confidence": ...,
                         "x1": ..., "y1": ..., "x2": ..., "y2": ...}
                    ]
                }
            ],
            "total_frames": N,
            "total_detections": M
        }

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    frames = []
    total_detections = 0

    for frame_id in sorted(detections_by_frame):
        dets = detections_by_frame[frame_id]
        total_detections += len(dets)
        frames.append({
            "frame_id": frame_id,
            "detections": [d.to_dict() for d in dets],
        })

    payload = {
        "frames": frames,
        "total_frames": len(frames),
        "total_detections": total_detections,
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info(
        "JSON output saved: %s (%d frames, %d detections)",
        output_path, len(frames), total_detections,
    )


def save_csv(
    detections_by_frame: Dict[int, List[Detection]],
    output_path: str,
) -> None:
    """Export all detections to a CSV file, one row per detection.

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    total = 0
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_FIELDS)
        writer.writeheader()

        for frame_id in sorted(detections_by_frame):
            for det in detections_by_frame[frame_id]:
                writer.writerow({"frame_id": frame_id, **det.to_dict()})
                total += 1

    logger.info("CSV output saved: %s (%d rows)", output_path, total)


def _ensure_parent_dir(path: str) -> None:
    """Create parent directories if they don't exist."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
