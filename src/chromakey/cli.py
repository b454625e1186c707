"""Command-line entry point.

Run with:
    chromakey --background media/beach.jpg

Or from a recorded clip into a file:
    chromakey --background media/beach.jpg --video clip.mp4 --output out.mp4
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional

from chromakey import __version__
from chromakey.app import build_scheduler
from chromakey.core import ChromaKeyError
from chromakey.scheduler import FrameScheduler
from chromakey.utils.config import load_config


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="chromakey",
        description="Replace near-white pixels of a live video with a background image.",
    )
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--background", help="Background image path")
    parser.add_argument("--threshold", type=int, help="Key threshold (0-255)")
    parser.add_argument("--interval-ms", type=float, help="Delay between cycles in ms")
    parser.add_argument("--workers", type=int, help="Compositing threads per frame")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--device", help="Webcam index or device path")
    source.add_argument("--video", help="Use a video file as input")
    source.add_argument("--screen", type=int, metavar="MONITOR", help="Capture a screen")
    parser.add_argument("--loop", action="store_true", help="Loop the input video")
    parser.add_argument("--output", help="Record to this video file instead of a window")
    parser.add_argument("--headless", action="store_true", help="Do not display or record")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate command-line flags into dotted config overrides."""
    overrides: Dict[str, Any] = {}
    if args.background:
        overrides["background.source"] = args.background
    if args.threshold is not None:
        overrides["key.threshold"] = args.threshold
    if args.interval_ms is not None:
        overrides["scheduler.cycle_interval_ms"] = args.interval_ms
    if args.workers is not None:
        overrides["scheduler.workers"] = args.workers
    if args.device is not None:
        overrides["input.kind"] = "webcam"
        overrides["input.device"] = int(args.device) if args.device.isdigit() else args.device
    if args.video:
        overrides["input.kind"] = "file"
        overrides["input.path"] = args.video
    if args.screen is not None:
        overrides["input.kind"] = "screen"
        overrides["input.monitor"] = args.screen
    if args.loop:
        overrides["input.loop"] = True
    if args.output:
        overrides["output.kind"] = "file"
        overrides["output.path"] = args.output
    if args.headless:
        overrides["output.kind"] = "none"
    if args.log_level:
        overrides["logging.level"] = args.log_level
    return overrides


async def run_session(scheduler: FrameScheduler) -> None:
    try:
        stats = await scheduler.run()
    except asyncio.CancelledError:
        scheduler.stop()
        raise
    logger.info(f"Composited {stats.presented} frames ({stats.mean_cycle_ms:.1f} ms/cycle)")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the chromakey command."""
    args = parse_args(argv)
    try:
        config = load_config(args.config, overrides=overrides_from_args(args))
    except (OSError, ValueError) as e:
        print(f"chromakey: invalid configuration: {e}", file=sys.stderr)
        return 1

    if not config.background.source:
        print("chromakey: no background image (use --background)", file=sys.stderr)
        return 1

    scheduler = build_scheduler(config)
    try:
        asyncio.run(run_session(scheduler))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except ChromaKeyError as e:
        logger.error(f"Session failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
