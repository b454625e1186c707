"""Pytest configuration and shared fixtures for chromakey tests."""

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def background_png(tmp_path):
    """A 4x2 RGB gradient image on disk."""
    data = np.zeros((2, 4, 3), dtype=np.uint8)
    data[..., 0] = np.arange(4, dtype=np.uint8) * 10
    data[..., 1] = np.arange(2, dtype=np.uint8)[:, None] * 20
    data[..., 2] = 7
    path = tmp_path / "background.png"
    Image.fromarray(data).save(path)
    return path


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


def pytest_configure(config):
    config.addinivalue_line("markers", "video: test needs a working OpenCV video codec")
