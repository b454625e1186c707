"""Abstract base class for composited-frame sinks."""

from abc import ABC, abstractmethod

from chromakey.core import Frame


class FrameSink(ABC):
    """Destination for composited frames.

    Pushes are fire-and-forget: the scheduler does not wait for an
    acknowledgement and applies no backpressure. A sink is opened once the
    session dimensions are known and may be re-opened after a resize.
    """

    @abstractmethod
    def open(self, width: int, height: int) -> None:
        """Prepare to receive frames of ``width x height``."""

    @abstractmethod
    def push(self, frame: Frame) -> None:
        """Accept the next composited frame."""

    @abstractmethod
    def close(self) -> None:
        """Release display / file resources."""

    def __enter__(self) -> "FrameSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
