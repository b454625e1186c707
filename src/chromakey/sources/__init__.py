"""Input stream adapters for the compositing pipeline.

Every source produces RGBA :class:`~chromakey.core.Frame` objects and
reports its playback state (``paused`` / ``ended``) to the scheduler.

Quick start::

    from chromakey.sources import WebcamSource

    with WebcamSource(0) as src:
        frame = src.read()
"""

from chromakey.sources.base import FrameSource
from chromakey.sources.memory import ArraySource
from chromakey.sources.webcam import WebcamSource
from chromakey.sources.video_file import VideoFileSource
from chromakey.sources.screen_capture import ScreenCaptureSource

__all__ = [
    "FrameSource",
    "ArraySource",
    "WebcamSource",
    "VideoFileSource",
    "ScreenCaptureSource",
]
