"""Background image loading and resampling."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np
from PIL import Image

from chromakey.core import (
    DimensionError,
    Frame,
    ImageLoadError,
    Interpolation,
)


logger = logging.getLogger(__name__)


_CV2_INTERPOLATION = {
    Interpolation.NEAREST: cv2.INTER_NEAREST,
    Interpolation.BILINEAR: cv2.INTER_LINEAR,
}


def decode_image(path: str | Path) -> np.ndarray:
    """Decode an image file into an RGBA uint8 array of shape (H, W, 4).

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded.
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            rgba = np.array(img.convert("RGBA"))
    except FileNotFoundError as e:
        raise ImageLoadError(f"Background image not found: {path}") from e
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageLoadError(f"Could not decode background image {path}: {e}") from e
    return rgba


def to_rgba(image: np.ndarray) -> np.ndarray:
    """Promote a gray, RGB or RGBA uint8 array to RGBA."""
    if image.dtype != np.uint8:
        raise ImageLoadError(f"Background image must be uint8, got {image.dtype}")
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2RGBA)
    if image.ndim == 3 and image.shape[2] == 4:
        return image
    raise ImageLoadError(f"Unsupported background image shape {image.shape}")


def resample(
    image: np.ndarray,
    width: int,
    height: int,
    interpolation: Interpolation = Interpolation.BILINEAR,
) -> np.ndarray:
    """Scale an RGBA image to exactly ``width x height``."""
    _check_size(width, height)
    if image.shape[1] == width and image.shape[0] == height:
        return image.copy()
    resized = cv2.resize(
        image,
        (width, height),
        interpolation=_CV2_INTERPOLATION[Interpolation(interpolation)],
    )
    return np.ascontiguousarray(resized)


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise DimensionError(f"Invalid background size {width}x{height}")


class BackgroundStore:
    """Holds the one background frame of a compositing session.

    The image is decoded once; the resulting frame is resampled to the
    session's dimensions and marked read-only so that it can be shared
    with compositing workers without copying. A size change re-derives
    the frame from the cached decode.

    Args:
        source: Default image path used by :meth:`prepare`.
        interpolation: ``"bilinear"`` (default) or ``"nearest"``.
    """

    def __init__(
        self,
        source: Optional[str | Path] = None,
        interpolation: Interpolation | str = Interpolation.BILINEAR,
    ):
        self.source = Path(source) if source is not None else None
        self.interpolation = Interpolation(interpolation)
        self._decoded: Optional[np.ndarray] = None
        self._frame: Optional[Frame] = None

    @property
    def frame(self) -> Optional[Frame]:
        """The active background frame, or None before the first load."""
        return self._frame

    @property
    def is_loaded(self) -> bool:
        return self._frame is not None

    async def load(self, image_path: str | Path, width: int, height: int) -> Frame:
        """Decode ``image_path`` and fit it to ``width x height``.

        Decoding runs in a worker thread; the new frame only becomes
        visible through :attr:`frame` once it is complete.

        Raises:
            DimensionError: If ``width`` or ``height`` is not positive.
            ImageLoadError: If the image cannot be decoded.
        """
        _check_size(width, height)
        logger.info("Loading background %s at %dx%d", image_path, width, height)
        decoded = await asyncio.to_thread(decode_image, image_path)
        self._decoded = decoded
        return await asyncio.to_thread(self._fit, width, height)

    def load_array(self, image: np.ndarray, width: int, height: int) -> Frame:
        """Use an already decoded gray/RGB/RGBA array as the background."""
        _check_size(width, height)
        self._decoded = to_rgba(image)
        return self._fit(width, height)

    async def prepare(self, width: int, height: int) -> Frame:
        """Make a background of ``width x height`` available.

        Reuses the cached decode when there is one, otherwise loads
        :attr:`source`.
        """
        if self._decoded is not None:
            return await asyncio.to_thread(self.rederive, width, height)
        if self.source is None:
            raise ImageLoadError("No background source configured")
        return await self.load(self.source, width, height)

    def rederive(self, width: int, height: int) -> Frame:
        """Resample the cached decode to a new size."""
        _check_size(width, height)
        if self._decoded is None:
            raise ImageLoadError("No background image has been loaded")
        logger.info("Re-deriving background at %dx%d", width, height)
        return self._fit(width, height)

    def _fit(self, width: int, height: int) -> Frame:
        pixels = resample(self._decoded, width, height, self.interpolation)
        frame = Frame(pixels=pixels, source_name="background").read_only()
        self._frame = frame
        logger.debug(
            "Background ready: %dx%d (%s)", width, height, self.interpolation.value
        )
        return frame
