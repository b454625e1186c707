"""Sink that records composited frames to a video file."""

import logging
from pathlib import Path
from typing import Optional

import cv2

from chromakey.core import ChromaKeyError, Frame
from chromakey.sinks.base import FrameSink

logger = logging.getLogger(__name__)


class VideoFileSink(FrameSink):
    """Writes composited frames with OpenCV's VideoWriter.

    The writer's size is fixed when it is opened; frames of another size
    (after a mid-session resize) are scaled to fit.

    Args:
        path: Output file. The container follows the extension.
        fps: Frame rate written into the file header.
        fourcc: Four-character codec code (default ``mp4v``).
    """

    def __init__(self, path: str | Path, fps: float = 20.0, fourcc: str = "mp4v"):
        self.path = Path(path)
        self.fps = fps
        self.fourcc = fourcc
        self._writer: Optional[cv2.VideoWriter] = None
        self._size: tuple[int, int] = (0, 0)
        self.frames_written = 0

    def open(self, width: int, height: int) -> None:
        if self._writer is not None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        writer = cv2.VideoWriter(
            str(self.path),
            cv2.VideoWriter_fourcc(*self.fourcc),
            self.fps,
            (width, height),
        )
        if not writer.isOpened():
            raise ChromaKeyError(
                f"Could not open video writer: {self.path} ({self.fourcc})"
            )
        self._writer = writer
        self._size = (width, height)
        logger.info(
            "VideoFileSink opened: %s  %dx%d @ %.1f fps (%s)",
            self.path, width, height, self.fps, self.fourcc,
        )

    def push(self, frame: Frame) -> None:
        if self._writer is None:
            return
        image = frame.to_bgr()
        if frame.size != self._size:
            image = cv2.resize(image, self._size, interpolation=cv2.INTER_LINEAR)
        self._writer.write(image)
        self.frames_written += 1

    def close(self) -> None:
        if self._writer is not None:
            self._writer.release()
            self._writer = None
            logger.info(
                "VideoFileSink closed: %s (%d frames)", self.path, self.frames_written
            )
