"""Per-pixel key classification.

A pixel is "key" when it belongs to the removable backdrop and must be
replaced by the background image. Decisions are made independently for
every pixel; no neighbouring pixel is ever consulted.

Two policies are provided:

* :class:`ThresholdKey` - the baseline near-white key: R, G and B must all
  strictly exceed a single lower bound (default 150).
* :class:`ColorKey` - a target color plus a per-channel tolerance.

Both offer a scalar :meth:`~KeyClassifier.is_key` and a vectorised
:meth:`~KeyClassifier.mask` that agree pixel for pixel.
"""

from abc import ABC, abstractmethod
from typing import Sequence, Tuple

import numpy as np


DEFAULT_THRESHOLD = 150


def is_key(pixel: Sequence[int], threshold: int = DEFAULT_THRESHOLD) -> bool:
    """Return True when ``pixel`` is a key pixel under the threshold policy.

    The comparison is strict: a channel equal to ``threshold`` does not
    count as exceeding it. Alpha, if present, is ignored.
    """
    r, g, b = pixel[0], pixel[1], pixel[2]
    return r > threshold and g > threshold and b > threshold


def _check_channel(name: str, value: int) -> int:
    value = int(value)
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be in [0, 255], got {value}")
    return value


class KeyClassifier(ABC):
    """Decides whether a source pixel should be replaced."""

    @abstractmethod
    def is_key(self, pixel: Sequence[int]) -> bool:
        """Classify a single ``(r, g, b[, a])`` pixel."""

    @abstractmethod
    def mask(self, pixels: np.ndarray) -> np.ndarray:
        """Classify every pixel of an ``(H, W, 3|4)`` uint8 array.

        Returns:
            Boolean array of shape ``(H, W)``; True marks key pixels.
        """


class ThresholdKey(KeyClassifier):
    """Near-white key: all of R, G, B strictly greater than ``threshold``."""

    def __init__(self, threshold: int = DEFAULT_THRESHOLD):
        self.threshold = _check_channel("threshold", threshold)

    def is_key(self, pixel: Sequence[int]) -> bool:
        return is_key(pixel, self.threshold)

    def mask(self, pixels: np.ndarray) -> np.ndarray:
        return np.all(pixels[..., :3] > self.threshold, axis=-1)

    def __repr__(self) -> str:
        return f"ThresholdKey(threshold={self.threshold})"


class ColorKey(KeyClassifier):
    """Key on a target color: every channel within ``tolerance`` of it."""

    def __init__(
        self,
        color: Tuple[int, int, int] = (255, 255, 255),
        tolerance: int = 60,
    ):
        if len(color) != 3:
            raise ValueError(f"color must be an (r, g, b) triple, got {color!r}")
        self.color = tuple(_check_channel("color", c) for c in color)
        self.tolerance = _check_channel("tolerance", tolerance)
        self._target = np.array(self.color, dtype=np.int16)

    def is_key(self, pixel: Sequence[int]) -> bool:
        return all(
            abs(int(pixel[i]) - self.color[i]) <= self.tolerance
            for i in range(3)
        )

    def mask(self, pixels: np.ndarray) -> np.ndarray:
        diff = np.abs(pixels[..., :3].astype(np.int16) - self._target)
        return np.all(diff <= self.tolerance, axis=-1)

    def __repr__(self) -> str:
        return f"ColorKey(color={self.color}, tolerance={self.tolerance})"


def classifier_from_config(key_config) -> KeyClassifier:
    """Build the classifier described by a :class:`KeyConfig`."""
    if key_config.mode == "color":
        return ColorKey(color=tuple(key_config.color), tolerance=key_config.tolerance)
    return ThresholdKey(threshold=key_config.threshold)
