"""ChromaKey - real-time chroma-key compositing.

Replaces key pixels (near-white by default) of a live video stream with
the matching pixels of a static background image at a fixed cadence.
"""

__version__ = "0.1.0"


def main() -> int:
    """Entry point for the chromakey command."""
    from chromakey.cli import main as cli_main

    return cli_main()
