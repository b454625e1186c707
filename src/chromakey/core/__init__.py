"""Core types, enums and errors for the chroma-key pipeline."""

from .enums import (
    EventType,
    Interpolation,
    SchedulerState,
)

from .errors import (
    ChromaKeyError,
    DimensionError,
    DimensionMismatch,
    ImageLoadError,
    StreamUnavailableError,
)

from .types import (
    CHANNELS,
    CycleStats,
    Frame,
    Pixel,
    Session,
)

__all__ = [
    # Enums
    "EventType",
    "Interpolation",
    "SchedulerState",
    # Errors
    "ChromaKeyError",
    "DimensionError",
    "DimensionMismatch",
    "ImageLoadError",
    "StreamUnavailableError",
    # Types
    "CHANNELS",
    "CycleStats",
    "Frame",
    "Pixel",
    "Session",
]
