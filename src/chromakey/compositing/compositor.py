"""In-place chroma-key compositing of whole frames."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np

from chromakey.core import DimensionMismatch, Frame
from chromakey.compositing.classifier import KeyClassifier, ThresholdKey


logger = logging.getLogger(__name__)


class Compositor:
    """Replaces key pixels of a frame with the matching background pixels.

    The transform is applied in place: the input frame's R, G, B bytes are
    overwritten wherever the classifier reports a key pixel, alpha is never
    touched, and the same :class:`Frame` object is returned.

    Because no pixel depends on its neighbours, a frame can be split into
    horizontal bands composited concurrently. With ``workers > 1`` a thread
    pool is used for this; :meth:`composite` only returns once every band
    is done, so callers still see one cycle at a time.

    Example usage:
        with Compositor(ThresholdKey(150)) as compositor:
            out = compositor.composite(frame, background)
    """

    def __init__(
        self,
        classifier: Optional[KeyClassifier] = None,
        workers: int = 1,
        min_band_rows: int = 64,
    ):
        self.classifier = classifier or ThresholdKey()
        self.workers = max(1, int(workers))
        self.min_band_rows = max(1, int(min_band_rows))
        self._executor: Optional[ThreadPoolExecutor] = None
        if self.workers > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=self.workers,
                thread_name_prefix="chromakey-band",
            )

    def composite(self, frame: Frame, background: Frame) -> Frame:
        """Composite ``frame`` over ``background`` in place.

        Raises:
            DimensionMismatch: If the two frames differ in size. The input
                buffer is left untouched in that case.
            ValueError: If ``frame`` is read-only.
        """
        if frame.size != background.size:
            raise DimensionMismatch(expected=background.size, actual=frame.size)
        if not frame.writeable:
            raise ValueError("Cannot composite into a read-only frame")

        fg = frame.pixels
        bg = background.pixels
        bands = self._bands(frame.height)

        if self._executor is None or len(bands) == 1:
            self._composite_rows(fg, bg)
        else:
            futures = [
                self._executor.submit(self._composite_rows, fg[start:stop], bg[start:stop])
                for start, stop in bands
            ]
            for future in futures:
                future.result()

        return frame

    def _composite_rows(self, fg: np.ndarray, bg: np.ndarray) -> None:
        mask = self.classifier.mask(fg)
        np.copyto(fg[..., :3], bg[..., :3], where=mask[..., np.newaxis])

    def _bands(self, height: int) -> list[tuple[int, int]]:
        count = min(self.workers, max(1, height // self.min_band_rows))
        edges = np.linspace(0, height, count + 1, dtype=int)
        return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the band worker pool, if any."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
            logger.debug("Compositor worker pool shut down")

    def __enter__(self) -> "Compositor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def composite(frame: Frame, background: Frame, threshold: int = 150) -> Frame:
    """Composite with the baseline threshold key, single-threaded."""
    return Compositor(ThresholdKey(threshold)).composite(frame, background)
