"""Background image store."""

from .store import BackgroundStore, decode_image, resample, to_rgba

__all__ = ["BackgroundStore", "decode_image", "resample", "to_rgba"]
