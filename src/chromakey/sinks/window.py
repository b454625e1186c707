"""On-screen preview sink using an OpenCV HighGUI window."""

import logging
from typing import Callable, Optional

import cv2

from chromakey.core import Frame
from chromakey.sinks.base import FrameSink

logger = logging.getLogger(__name__)


class WindowSink(FrameSink):
    """Shows composited frames in a desktop window.

    Args:
        title: Window title.
        on_quit: Called when one of ``quit_keys`` is pressed in the window.
        quit_keys: Keys that trigger ``on_quit`` (default ``q`` and Esc).
    """

    def __init__(
        self,
        title: str = "ChromaKey",
        on_quit: Optional[Callable[[], None]] = None,
        quit_keys: tuple[int, ...] = (ord("q"), 27),
    ):
        self.title = title
        self.on_quit = on_quit
        self._quit_keys = quit_keys
        self._open = False

    def open(self, width: int, height: int) -> None:
        if not self._open:
            cv2.namedWindow(self.title, cv2.WINDOW_NORMAL)
            self._open = True
        cv2.resizeWindow(self.title, width, height)
        logger.info("WindowSink opened: '%s' %dx%d", self.title, width, height)

    def push(self, frame: Frame) -> None:
        if not self._open:
            return
        cv2.imshow(self.title, frame.to_bgr())
        key = cv2.waitKey(1) & 0xFF
        if key in self._quit_keys and self.on_quit is not None:
            logger.info("Quit key pressed in '%s'", self.title)
            self.on_quit()

    def close(self) -> None:
        if self._open:
            cv2.destroyWindow(self.title)
            cv2.waitKey(1)
            self._open = False
            logger.info("WindowSink closed: '%s'", self.title)
