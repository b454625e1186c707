"""In-memory frame source backed by a list of RGBA frames."""

import logging
import time
from typing import Iterable, Optional

import numpy as np

from chromakey.core import Frame, StreamUnavailableError
from chromakey.sources.base import FrameSource

logger = logging.getLogger(__name__)


class ArraySource(FrameSource):
    """Frame source that replays a fixed sequence of frames.

    Each :meth:`read` returns a copy, so compositing in place never
    alters the stored frames.

    Args:
        frames: :class:`Frame` objects or RGBA uint8 arrays of shape
            (H, W, 4).
        loop: When ``True``, restart from the first frame after the last
            one instead of ending.
        name: Identifier used in ``Frame.source_name``.
    """

    def __init__(
        self,
        frames: Iterable[Frame | np.ndarray],
        loop: bool = False,
        name: str = "memory",
    ):
        super().__init__()
        self._frames = [
            f if isinstance(f, Frame) else Frame(pixels=np.asarray(f))
            for f in frames
        ]
        self._loop = loop
        self._name = name

        self._open = False
        self._closed = False
        self._position = 0
        self._delivered = 0
        self._start_time = 0.0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        if self._open:
            return
        if not self._frames:
            raise StreamUnavailableError(f"ArraySource '{self._name}' has no frames")
        self._open = True
        self._closed = False
        self._position = 0
        self._delivered = 0
        self._start_time = time.monotonic()
        w, h = self.resolution
        logger.info(
            "ArraySource opened: %s  %d frames  %dx%d  loop=%s",
            self._name, len(self._frames), w, h, self._loop,
        )

    def close(self) -> None:
        if self._open:
            self._open = False
            self._closed = True
            logger.info("ArraySource closed: %s", self._name)

    def read(self) -> Optional[Frame]:
        if not self._open:
            return None
        if self._position >= len(self._frames):
            if not self._loop:
                return None
            self._position = 0

        template = self._frames[self._position]
        self._position += 1
        frame = Frame(
            pixels=template.pixels.copy(),
            timestamp=time.monotonic() - self._start_time,
            frame_number=self._delivered,
            source_name=f"memory:{self._name}",
        )
        self._delivered += 1
        return frame

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def frames_delivered(self) -> int:
        return self._delivered

    @property
    def resolution(self) -> tuple[int, int]:
        if not self._frames:
            return (0, 0)
        return self._frames[0].size

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def ended(self) -> bool:
        if self._closed:
            return True
        return not self._loop and self._position >= len(self._frames)
