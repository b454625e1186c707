"""Exception hierarchy for the chroma-key pipeline."""


class ChromaKeyError(Exception):
    """Base class for all chroma-key errors."""


class StreamUnavailableError(ChromaKeyError):
    """The input stream (camera, file, screen) could not be opened."""


class ImageLoadError(ChromaKeyError):
    """The background image could not be read or decoded."""


class DimensionError(ChromaKeyError, ValueError):
    """Invalid frame dimensions (zero, negative, or malformed buffer)."""


class DimensionMismatch(ChromaKeyError):
    """Two frames taking part in one composite cycle differ in size."""

    def __init__(self, expected: tuple[int, int], actual: tuple[int, int]):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Frame is {actual[0]}x{actual[1]}, "
            f"expected {expected[0]}x{expected[1]}"
        )
