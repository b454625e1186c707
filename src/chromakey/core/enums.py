"""Core enumerations for the chroma-key pipeline."""

from enum import Enum, auto


class SchedulerState(Enum):
    """Lifecycle state of a compositing session."""
    IDLE = auto()
    LOADING = auto()
    RUNNING = auto()
    PAUSED = auto()
    STOPPED = auto()


class EventType(Enum):
    """Types of events published by the frame scheduler."""
    STATE_CHANGED = auto()
    FRAME_PRESENTED = auto()
    CYCLE_FAILED = auto()


class Interpolation(str, Enum):
    """Resampling method used when fitting the background to the frame."""
    NEAREST = "nearest"
    BILINEAR = "bilinear"
