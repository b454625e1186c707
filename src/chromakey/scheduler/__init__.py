"""Compositing session scheduling."""

from .events import SchedulerEvent, SchedulerEventBus
from .frame_scheduler import FrameScheduler

__all__ = [
    "FrameScheduler",
    "SchedulerEvent",
    "SchedulerEventBus",
]
