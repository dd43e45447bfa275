"""
Tests for the preprocessing module.
"""

import numpy as np
import pytest

from yolodet.config import ModelConfig
from yolodet.preprocessor import preprocess


def test_preprocess_valid_input():
    """Test standard preprocessing on a valid frame."""
    frame = np.zeros((480, 640, 3), dtype=np.uint8)

    blob = preprocess(frame, ModelConfig())

    assert isinstance(blob, np.ndarray)
    assert blob.shape == (1, 3, 416, 416)
    assert blob.dtype == np.float32


def test_preprocess_scales_and_swaps_channels():
    """Test 1/255 scaling and BGR to RGB reordering."""
    frame = np.zeros((200, 200, 3), dtype=np.uint8)
    frame[:, :, 0] = 255  # solid blue in BGR

    blob = preprocess(frame, ModelConfig(input_size=(100, 100)))

    assert blob.shape == (1, 3, 100, 100)
    assert np.allclose(blob[0, 0], 0.0)  # red
    assert np.allclose(blob[0, 2], 1.0)  # blue


def test_preprocess_without_swap():
    """Test that channel order is kept when swap_rb is disabled."""
    frame = np.zeros((50, 50, 3), dtype=np.uint8)
    frame[:, :, 0] = 255

    blob = preprocess(frame, ModelConfig(input_size=(32, 32), swap_rb=False))

    assert np.allclose(blob[0, 0], 1.0)


def test_preprocess_empty_frame():
    """Test that preprocessing rejects empty frames."""
    with pytest.raises(ValueError):
        preprocess(np.array([]), ModelConfig())


def test_preprocess_none_frame():
    """Test that preprocessing rejects None."""
    with pytest.raises(ValueError):
        preprocess(None, ModelConfig())
