"""
Tests for the decoder module.
"""

import random

import numpy as np
import pytest

from yolodet.decoder import decode
from yolodet.detection import Box
from yolodet.errors import ConfigurationError, LabelLookupError

LABELS = ["person", "car", "dog"]


def _row(cx, cy, w, h, *scores, objectness=1.0):
    """Build a Darknet-style row: [cx, cy, w, h, objectness, scores...]."""
    return [cx, cy, w, h, objectness, *scores]


def test_decode_single_row():
    """Test center/size un-normalization into a top-left anchored box."""
    layer = np.array([_row(0.5, 0.5, 0.2, 0.2, 0.9, 0.1, 0.0)])

    candidates = decode([layer], 100, 100, LABELS, 0.5)

    assert len(candidates) == 1
    det = candidates[0]
    assert det.class_id == 0
    assert det.class_name == "person"
    assert det.confidence == pytest.approx(0.9)
    assert det.box == Box(40, 40, 60, 60)


def test_decode_picks_best_class():
    """Test that class id and confidence come from the highest class score."""
    layer = np.array([_row(0.5, 0.5, 0.2, 0.2, 0.1, 0.7, 0.2)])

    candidates = decode([layer], 100, 100, LABELS, 0.5)

    assert candidates[0].class_id == 1
    assert candidates[0].class_name == "car"
    assert candidates[0].confidence == pytest.approx(0.7)


def test_decode_ignores_objectness_column():
    """Test that column 4 is not treated as a class score."""
    layer = np.array([_row(0.5, 0.5, 0.2, 0.2, 0.3, 0.2, 0.1, objectness=0.99)])

    assert decode([layer], 100, 100, LABELS, 0.5) == []


def test_decode_custom_score_offset():
    """Test layouts without an objectness column."""
    layer = np.array([[0.5, 0.5, 0.2, 0.2, 0.1, 0.8, 0.0]])

    candidates = decode([layer], 100, 100, LABELS, 0.5, score_offset=4)

    assert len(candidates) == 1
    assert candidates[0].class_id == 1
    assert candidates[0].confidence == pytest.approx(0.8)


def test_decode_threshold_is_exclusive():
    """Test that a score equal to the threshold is dropped and threshold + eps kept."""
    layer = np.array([
        _row(0.2, 0.2, 0.1, 0.1, 0.5, 0.0, 0.0),
        _row(0.75, 0.75, 0.25, 0.25, 0.5 + 1e-6, 0.0, 0.0),
    ])

    candidates = decode([layer], 100, 100, LABELS, 0.5)

    assert len(candidates) == 1
    assert candidates[0].confidence > 0.5
    assert candidates[0].box == Box(63, 63, 88, 88)


def test_decode_truncates_toward_zero():
    """Test odd sizes: the half-width is truncated, not rounded."""
    layer = np.array([_row(0.5, 0.5, 0.25, 0.25, 0.9, 0.0, 0.0)])

    box = decode([layer], 100, 100, LABELS, 0.5)[0].box

    # cx=50, w=25 -> left = 50 - 12 = 38, right = 38 + 25 = 63
    assert box == Box(38, 38, 63, 63)


def test_decode_negative_size_truncates_toward_zero():
    """Test that negative sizes halve toward zero and the box is canonical."""
    layer = np.array([_row(0.5, 0.5, -0.25, 0.25, 0.9, 0.0, 0.0)])

    box = decode([layer], 100, 100, LABELS, 0.5)[0].box

    # w=-25 -> half=-12 (floor would give -13) -> left=62, right=37
    assert (box.x1, box.x2) == (37, 62)
    assert (box.y1, box.y2) == (38, 63)


def test_decode_does_not_clamp():
    """Test that boxes may extend beyond the image frame."""
    layer = np.array([_row(0.03125, 0.96875, 0.125, 0.125, 0.9, 0.0, 0.0)])

    box = decode([layer], 100, 100, LABELS, 0.5)[0].box

    # cx=3, cy=96, w=h=12
    assert box == Box(-3, 90, 9, 102)


def test_decode_uses_image_dimensions():
    """Test that x is scaled by width and y by height."""
    layer = np.array([_row(0.5, 0.5, 0.5, 0.5, 0.9, 0.0, 0.0)])

    box = decode([layer], 640, 480, LABELS, 0.5)[0].box

    assert box == Box(160, 120, 480, 360)


def test_decode_float32_layer():
    """Test that float32 network output decodes without precision surprises."""
    layer = np.array([_row(0.5, 0.5, 0.2, 0.2, 0.9, 0.0, 0.0)], dtype=np.float32)

    det = decode([layer], 416, 416, LABELS, 0.5)[0]

    assert det.confidence == pytest.approx(0.9, abs=1e-6)
    assert isinstance(det.box.x1, int)
    assert det.box.width == 83


def test_decode_concatenates_layers():
    """Test that every layer contributes candidates."""
    small = np.array([_row(0.1, 0.1, 0.05, 0.05, 0.8, 0.0, 0.0)])
    large = np.array([
        _row(0.5, 0.5, 0.6, 0.6, 0.0, 0.0, 0.95),
        _row(0.5, 0.5, 0.6, 0.6, 0.0, 0.0, 0.10),
    ])

    candidates = decode([small, large], 100, 100, LABELS, 0.5)

    assert sorted(c.class_name for c in candidates) == ["dog", "person"]


def test_decode_layer_order_does_not_change_candidate_set():
    """Test that shuffling layers yields the same set of candidates."""
    rng = np.random.default_rng(7)
    layers = []
    for _ in range(3):
        layer = rng.uniform(0.0, 1.0, size=(20, 5 + len(LABELS)))
        layers.append(layer)

    reference = decode(layers, 320, 240, LABELS, 0.5)
    shuffled = list(layers)
    random.Random(3).shuffle(shuffled)

    assert set(decode(shuffled, 320, 240, LABELS, 0.5)) == set(reference)
    assert len(reference) > 0


def test_decode_empty_inputs():
    """Test that no layers, or layers without rows, are not errors."""
    assert decode([], 100, 100, LABELS, 0.5) == []
    assert decode([np.empty((0, 8))], 100, 100, LABELS, 0.5) == []


def test_decode_unknown_class_raises_lookup_error():
    """Test that a class id beyond the label list raises a distinct error."""
    layer = np.array([_row(0.5, 0.5, 0.2, 0.2, 0.1, 0.1, 0.1, 0.9)])

    with pytest.raises(LabelLookupError) as excinfo:
        decode([layer], 100, 100, LABELS, 0.5)

    assert isinstance(excinfo.value, LookupError)
    assert excinfo.value.class_id == 3
    assert excinfo.value.num_labels == 3


def test_decode_unknown_class_below_threshold_is_ignored():
    """Test that dropped rows never need a label."""
    layer = np.array([_row(0.5, 0.5, 0.2, 0.2, 0.1, 0.1, 0.1, 0.3)])

    assert decode([layer], 100, 100, LABELS, 0.5) == []


def test_decode_malformed_layer_aborts():
    """Test that a malformed layer fails the whole call."""
    good = np.array([_row(0.5, 0.5, 0.2, 0.2, 0.9, 0.0, 0.0)])

    with pytest.raises(ValueError, match="2-D"):
        decode([good, np.array([0.5, 0.5, 0.2, 0.2, 0.9])], 100, 100, LABELS, 0.5)

    with pytest.raises(ValueError, match="class score"):
        decode([good, np.array([[0.5, 0.5, 0.2, 0.2, 0.9]])], 100, 100, LABELS, 0.5)


def test_decode_invalid_arguments():
    """Test threshold and image size validation."""
    layer = np.array([_row(0.5, 0.5, 0.2, 0.2, 0.9, 0.0, 0.0)])

    with pytest.raises(ConfigurationError):
        decode([layer], 100, 100, LABELS, 1.0)
    with pytest.raises(ConfigurationError):
        decode([layer], 100, 100, LABELS, -0.1)
    with pytest.raises(ValueError, match="positive"):
        decode([layer], 0, 100, LABELS, 0.5)
