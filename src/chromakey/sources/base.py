"""Abstract base class for all input frame sources."""

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from chromakey.core import Frame


class FrameSource(ABC):
    """Uniform interface for pulling RGBA frames into the compositor.

    Concrete implementations exist for webcams, video files, screen
    capture and in-memory arrays. Besides reading frames, a source reports
    its playback state: :attr:`paused` and :attr:`ended`. The scheduler
    polls both at the top of every cycle.

    Usage::

        with WebcamSource(0) as src:
            for frame in src:
                compositor.composite(frame, background)
    """

    def __init__(self) -> None:
        self._paused = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    def open(self) -> None:
        """Open the underlying device / file.

        Raises:
            StreamUnavailableError: If the stream cannot be opened.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the underlying device / file."""

    @abstractmethod
    def read(self) -> Optional[Frame]:
        """Read the current frame.

        Returns:
            A freshly allocated :class:`Frame` the caller may mutate, or
            ``None`` when the source is exhausted or a read failed.
        """

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def resolution(self) -> tuple[int, int]:
        """``(width, height)`` of produced frames, ``(0, 0)`` if unknown."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """``True`` when the source has been opened and not yet closed."""

    @property
    def ended(self) -> bool:
        """``True`` once the stream has finished for good."""
        return not self.is_open

    # ------------------------------------------------------------------
    # Playback state
    # ------------------------------------------------------------------

    @property
    def paused(self) -> bool:
        return self._paused

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "FrameSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Iterator protocol
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Frame]:
        return self

    def __next__(self) -> Frame:
        frame = self.read()
        if frame is None:
            raise StopIteration
        return frame
