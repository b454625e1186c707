"""Output sinks for composited frames."""

from chromakey.sinks.base import FrameSink
from chromakey.sinks.memory import MemorySink
from chromakey.sinks.window import WindowSink
from chromakey.sinks.video_file import VideoFileSink

__all__ = [
    "FrameSink",
    "MemorySink",
    "WindowSink",
    "VideoFileSink",
]
