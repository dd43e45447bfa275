"""
Greedy duplicate suppression for decoded detections.

Responsibility:
    Order candidates by confidence and drop every candidate that is
    covered too much by an already accepted, more confident one.

Overlap rule:
    A candidate is rejected when

        area(candidate ∩ accepted) > overlap_threshold * area(candidate)

    for any accepted box. The denominator is the candidate's own area,
    not the union used by IoU, so a small box inside a larger accepted
    box is always removed while a large box around a small accepted box
    usually survives. Class ids are not compared.

Non-goals:
    - No per-class suppression.
    - No spatial indexing. The pass is O(n^2) in the candidate count.
"""

import logging
from operator import attrgetter
from typing import Iterable, List

from yolodet.config import validate_overlap_threshold
from yolodet.detection import Detection, DetectionCandidate

logger = logging.getLogger(__name__)


def suppress(
    candidates: Iterable[DetectionCandidate],
    overlap_threshold: float,
) -> List[Detection]:
    """Remove duplicate detections.

    Args:
        candidates: Decoded candidates in any order.
        overlap_threshold: Fraction of a candidate's own area that may be
            covered by a single accepted box before it is dropped.

    Returns:
        Accepted detections in descending confidence order. The relative
        order of equal-confidence candidates is not part of the contract.

    Raises:
        ConfigurationError: If overlap_threshold is not in [0, 1].
    """
    validate_overlap_threshold(overlap_threshold)

    ordered = sorted(candidates, key=attrgetter("confidence"), reverse=True)
    accepted: List[Detection] = []

    for candidate in ordered:
        limit = overlap_threshold * candidate.box.area
        if any(
            candidate.box.intersect(kept.box).area > limit
            for kept in accepted
        ):
            continue
        accepted.append(candidate)

    logger.debug(
        "Suppression kept %d of %d candidates (overlap_threshold=%.2f)",
        len(accepted), len(ordered), overlap_threshold,
    )
    return accepted
