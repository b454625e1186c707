"""Pre-recorded video file frame source."""

import logging
from pathlib import Path
from typing import Optional

import cv2

from chromakey.core import Frame, StreamUnavailableError
from chromakey.sources.base import FrameSource

logger = logging.getLogger(__name__)


class VideoFileSource(FrameSource):
    """Frame source backed by a video file on disk.

    Frames are delivered one per :meth:`read`, independent of the file's
    native frame rate; the scheduler's cadence decides the pace.

    Args:
        path: Path to the video file (mp4, avi, mkv, etc.).
        loop: When ``True``, restart from the beginning on EOF instead of
            ending the stream.
        max_frames: Stop after delivering this many frames (``None`` = all).
    """

    def __init__(
        self,
        path: str | Path,
        loop: bool = False,
        max_frames: Optional[int] = None,
    ):
        super().__init__()
        self._path = str(path)
        self._loop = loop
        self._max_frames = max_frames

        self._cap: Optional[cv2.VideoCapture] = None
        self._native_fps: float = 30.0
        self._total_frames: int = 0
        self._width: int = 0
        self._height: int = 0

        self._delivered: int = 0
        self._raw_pos: int = 0
        self._eof: bool = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        if self._cap is not None:
            return
        if not Path(self._path).exists():
            raise StreamUnavailableError(f"Video file not found: {self._path}")

        self._cap = cv2.VideoCapture(self._path)
        if not self._cap.isOpened():
            self._cap = None
            raise StreamUnavailableError(f"Could not open video: {self._path}")

        self._native_fps = self._cap.get(cv2.CAP_PROP_FPS) or 30.0
        self._total_frames = int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT))
        self._width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self._height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self._delivered = 0
        self._raw_pos = 0
        self._eof = False

        logger.info(
            "VideoFileSource opened: %s  %dx%d @ %.1f fps  %d frames  loop=%s  max=%s",
            self._path, self._width, self._height, self._native_fps,
            self._total_frames, self._loop, self._max_frames,
        )

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("VideoFileSource closed: %s", self._path)

    def read(self) -> Optional[Frame]:
        if self._cap is None or self._eof:
            return None

        if self._max_frames is not None and self._delivered >= self._max_frames:
            self._eof = True
            return None

        ret, image = self._cap.read()
        if not ret and self._loop and self._raw_pos > 0:
            self._cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
            self._raw_pos = 0
            ret, image = self._cap.read()
        if not ret:
            self._eof = True
            return None

        frame = Frame.from_bgr(
            image,
            timestamp=self._raw_pos / self._native_fps,
            frame_number=self._delivered,
            source_name=f"file:{Path(self._path).name}",
        )
        self._raw_pos += 1
        self._delivered += 1
        return frame

    # ------------------------------------------------------------------
    # Extra properties
    # ------------------------------------------------------------------

    @property
    def total_frames(self) -> int:
        """Total number of raw frames in the video file."""
        return self._total_frames

    @property
    def frames_delivered(self) -> int:
        """Number of frames returned so far."""
        return self._delivered

    @property
    def fps(self) -> float:
        return self._native_fps

    # ------------------------------------------------------------------
    # FrameSource properties
    # ------------------------------------------------------------------

    @property
    def resolution(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    @property
    def ended(self) -> bool:
        return self._eof or not self.is_open
