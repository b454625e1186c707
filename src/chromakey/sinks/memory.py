"""Sink that keeps the most recent composited frames in memory."""

import threading
from collections import deque
from typing import Callable, List, Optional

from chromakey.core import Frame
from chromakey.sinks.base import FrameSink


class MemorySink(FrameSink):
    """Collects copies of pushed frames, newest last.

    Args:
        max_frames: Number of frames retained (oldest are discarded).
        on_frame: Optional callback invoked after each push.
    """

    def __init__(
        self,
        max_frames: int = 100,
        on_frame: Optional[Callable[[Frame], None]] = None,
    ):
        self._frames: deque[Frame] = deque(maxlen=max_frames)
        self._on_frame = on_frame
        self._lock = threading.Lock()
        self.size: Optional[tuple[int, int]] = None
        self.pushed = 0
        self.open_count = 0
        self.closed = False

    def open(self, width: int, height: int) -> None:
        self.size = (width, height)
        self.open_count += 1
        self.closed = False

    def push(self, frame: Frame) -> None:
        with self._lock:
            self._frames.append(frame.copy())
            self.pushed += 1
        if self._on_frame is not None:
            self._on_frame(frame)

    def close(self) -> None:
        self.closed = True

    @property
    def frames(self) -> List[Frame]:
        with self._lock:
            return list(self._frames)

    @property
    def latest(self) -> Optional[Frame]:
        with self._lock:
            return self._frames[-1] if self._frames else None
