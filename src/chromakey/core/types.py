"""Core data types for the chroma-key pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import NamedTuple, Optional, Tuple

import cv2
import numpy as np

from .enums import SchedulerState
from .errors import DimensionError


CHANNELS = 4  # R, G, B, A


class Pixel(NamedTuple):
    """A single RGBA pixel, each channel in [0, 255]."""
    r: int
    g: int
    b: int
    a: int = 255


# ============================================================================
# Frame buffers
# ============================================================================

@dataclass
class Frame:
    """A dense RGBA pixel buffer.

    The pixels live in a C-contiguous ``uint8`` array of shape
    ``(height, width, 4)``; :attr:`flat` exposes the same memory as the
    row-major RGBA sequence of length ``width * height * 4``.

    Attributes:
        pixels: RGBA uint8 numpy array of shape (H, W, 4).
        timestamp: Seconds since the producing source was opened.
        frame_number: Sequential counter assigned by the source.
        source_name: Human-readable identifier, e.g. ``"webcam:0"``.
    """

    pixels: np.ndarray
    timestamp: float = 0.0
    frame_number: int = 0
    source_name: str = ""

    def __post_init__(self):
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray):
            raise DimensionError(
                f"Frame pixels must be a numpy array, got {type(pixels).__name__}"
            )
        if pixels.dtype != np.uint8:
            raise DimensionError(f"Frame pixels must be uint8, got {pixels.dtype}")
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise DimensionError(
                f"Frame pixels must have shape (H, W, 4), got {pixels.shape}"
            )
        if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
            raise DimensionError(f"Frame has no pixels: shape {pixels.shape}")
        if not pixels.flags.c_contiguous:
            self.pixels = np.ascontiguousarray(pixels)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        color: Tuple[int, int, int, int] = (0, 0, 0, 255),
        **meta,
    ) -> "Frame":
        """Create a frame filled with a single color."""
        if width <= 0 or height <= 0:
            raise DimensionError(f"Invalid frame size {width}x{height}")
        pixels = np.empty((height, width, CHANNELS), dtype=np.uint8)
        pixels[:] = np.asarray(color, dtype=np.uint8)
        return cls(pixels=pixels, **meta)

    @classmethod
    def from_bytes(cls, data: bytes, width: int, height: int, **meta) -> "Frame":
        """Create a frame from a flat row-major RGBA byte sequence."""
        if width <= 0 or height <= 0:
            raise DimensionError(f"Invalid frame size {width}x{height}")
        expected = width * height * CHANNELS
        if len(data) != expected:
            raise DimensionError(
                f"Expected {expected} bytes for {width}x{height} RGBA, got {len(data)}"
            )
        pixels = np.frombuffer(data, dtype=np.uint8).reshape(height, width, CHANNELS)
        return cls(pixels=pixels.copy(), **meta)

    @classmethod
    def from_bgr(cls, image: np.ndarray, **meta) -> "Frame":
        """Create a frame from an OpenCV image (gray, BGR or BGRA)."""
        if image.ndim == 2:
            pixels = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        elif image.shape[2] == 3:
            pixels = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
        elif image.shape[2] == 4:
            pixels = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
        else:
            raise DimensionError(f"Unsupported image shape {image.shape}")
        return cls(pixels=pixels, **meta)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """``(width, height)`` of the frame."""
        return (self.width, self.height)

    @property
    def flat(self) -> np.ndarray:
        """Row-major RGBA view of length ``width * height * 4``."""
        return self.pixels.reshape(-1)

    @property
    def writeable(self) -> bool:
        return bool(self.pixels.flags.writeable)

    def pixel(self, x: int, y: int) -> Pixel:
        """Return the pixel at column ``x``, row ``y``."""
        r, g, b, a = self.pixels[y, x]
        return Pixel(int(r), int(g), int(b), int(a))

    def to_bgr(self) -> np.ndarray:
        """Convert to an OpenCV BGR image (alpha dropped)."""
        return cv2.cvtColor(self.pixels, cv2.COLOR_RGBA2BGR)

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def copy(self) -> "Frame":
        return Frame(
            pixels=self.pixels.copy(),
            timestamp=self.timestamp,
            frame_number=self.frame_number,
            source_name=self.source_name,
        )

    def read_only(self) -> "Frame":
        """Mark the buffer immutable and return ``self``."""
        self.pixels.flags.writeable = False
        return self


# ============================================================================
# Session state
# ============================================================================

@dataclass
class Session:
    """Live, dimension-bound context for one compositing run."""
    width: int = 0
    height: int = 0
    background: Optional[Frame] = None
    state: SchedulerState = SchedulerState.IDLE
    started_at: Optional[datetime] = None

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def is_ready(self) -> bool:
        """True once a background matching the session size is loaded."""
        return self.background is not None and self.background.size == self.size

    def matches(self, frame: Frame) -> bool:
        return frame.size == self.size


@dataclass
class CycleStats:
    """Counters and timings for composite cycles."""
    cycles: int = 0
    presented: int = 0
    dropped: int = 0
    errors: int = 0
    last_cycle_ms: float = 0.0
    total_cycle_ms: float = 0.0
    last_presented_at: Optional[datetime] = None

    def record(self, duration_ms: float) -> None:
        self.cycles += 1
        self.last_cycle_ms = duration_ms
        self.total_cycle_ms += duration_ms

    @property
    def mean_cycle_ms(self) -> float:
        if self.cycles == 0:
            return 0.0
        return self.total_cycle_ms / self.cycles

    def as_dict(self) -> dict:
        return {
            "cycles": self.cycles,
            "presented": self.presented,
            "dropped": self.dropped,
            "errors": self.errors,
            "last_cycle_ms": round(self.last_cycle_ms, 3),
            "mean_cycle_ms": round(self.mean_cycle_ms, 3),
        }
