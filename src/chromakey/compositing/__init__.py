"""Key classification and frame compositing."""

from .classifier import (
    DEFAULT_THRESHOLD,
    ColorKey,
    KeyClassifier,
    ThresholdKey,
    classifier_from_config,
    is_key,
)
from .compositor import Compositor, composite

__all__ = [
    "DEFAULT_THRESHOLD",
    "ColorKey",
    "KeyClassifier",
    "ThresholdKey",
    "classifier_from_config",
    "is_key",
    "Compositor",
    "composite",
]
