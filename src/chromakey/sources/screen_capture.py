"""Live screen capture frame source using mss."""

import logging
import time
from typing import Optional

import numpy as np

from chromakey.core import Frame, StreamUnavailableError
from chromakey.sources.base import FrameSource

logger = logging.getLogger(__name__)


class ScreenCaptureSource(FrameSource):
    """Live frame source from screen / monitor capture.

    Requires the ``mss`` package (``pip install chromakey[screen]``).

    Args:
        monitor: Monitor index (``0`` = all monitors combined,
            ``1`` = primary, ``2`` = secondary, etc.).
        region: Optional ``(left, top, width, height)`` sub-region to
            capture.  When ``None`` the full monitor area is used.
    """

    def __init__(
        self,
        monitor: int = 1,
        region: Optional[tuple[int, int, int, int]] = None,
    ):
        super().__init__()
        self._monitor_idx = monitor
        self._region = region

        self._sct = None  # mss instance
        self._bbox: Optional[dict] = None
        self._width: int = 0
        self._height: int = 0
        self._frame_count: int = 0
        self._start_time: float = 0.0
        self._opened: bool = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        if self._opened:
            return
        try:
            import mss
        except ImportError:
            raise ImportError(
                "ScreenCaptureSource requires the 'mss' package. "
                "Install it with: pip install mss"
            )

        self._sct = mss.mss()
        try:
            if self._region is not None:
                left, top, w, h = self._region
                self._bbox = {"left": left, "top": top, "width": w, "height": h}
            else:
                self._bbox = self._sct.monitors[self._monitor_idx]
        except IndexError as e:
            self._sct.close()
            self._sct = None
            raise StreamUnavailableError(
                f"No such monitor: {self._monitor_idx}"
            ) from e

        self._width = self._bbox["width"]
        self._height = self._bbox["height"]
        self._frame_count = 0
        self._start_time = time.monotonic()
        self._opened = True

        logger.info(
            "ScreenCaptureSource opened: monitor=%d  %dx%d",
            self._monitor_idx, self._width, self._height,
        )

    def close(self) -> None:
        if self._sct is not None:
            self._sct.close()
            self._sct = None
        if self._opened:
            self._opened = False
            logger.info("ScreenCaptureSource closed")

    def read(self) -> Optional[Frame]:
        if not self._opened or self._sct is None:
            return None

        raw = self._sct.grab(self._bbox)
        # mss returns BGRA with an unreliable alpha byte; drop it
        image = np.array(raw, dtype=np.uint8)[:, :, :3]

        frame = Frame.from_bgr(
            image,
            timestamp=time.monotonic() - self._start_time,
            frame_number=self._frame_count,
            source_name=f"screen:{self._monitor_idx}",
        )
        self._frame_count += 1
        return frame

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def resolution(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def is_open(self) -> bool:
        return self._opened
