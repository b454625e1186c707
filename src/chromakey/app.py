"""Wiring of a complete compositing session from configuration."""

import logging
from typing import Optional

from chromakey.background import BackgroundStore
from chromakey.compositing import Compositor, classifier_from_config
from chromakey.scheduler import FrameScheduler, SchedulerEventBus
from chromakey.sinks import FrameSink, MemorySink, VideoFileSink, WindowSink
from chromakey.sources import (
    FrameSource,
    ScreenCaptureSource,
    VideoFileSource,
    WebcamSource,
)
from chromakey.utils.config import ChromaKeyConfig


logger = logging.getLogger(__name__)


def build_source(config: ChromaKeyConfig) -> FrameSource:
    """Create the input stream described by ``config.input``."""
    cfg = config.input
    if cfg.kind == "file":
        return VideoFileSource(cfg.path, loop=cfg.loop)
    if cfg.kind == "screen":
        return ScreenCaptureSource(monitor=cfg.monitor)
    return WebcamSource(cfg.device, fps=cfg.fps, width=cfg.width, height=cfg.height)


def build_sink(config: ChromaKeyConfig) -> FrameSink:
    """Create the output sink described by ``config.output``."""
    cfg = config.output
    if cfg.kind == "file":
        fps = cfg.fps or 1000.0 / config.scheduler.cycle_interval_ms
        return VideoFileSink(cfg.path, fps=fps, fourcc=cfg.fourcc)
    if cfg.kind == "none":
        return MemorySink(max_frames=1)
    return WindowSink(title=cfg.window_title)


def build_scheduler(
    config: ChromaKeyConfig,
    source: Optional[FrameSource] = None,
    sink: Optional[FrameSink] = None,
    event_bus: Optional[SchedulerEventBus] = None,
) -> FrameScheduler:
    """Assemble a scheduler with every collaborator injected.

    ``source`` and ``sink`` override the configured ones, which is how
    tests and embedding applications supply their own streams.
    """
    background = BackgroundStore(
        config.background.source,
        interpolation=config.background.interpolation,
    )
    compositor = Compositor(
        classifier_from_config(config.key),
        workers=config.scheduler.workers,
    )
    sink = sink or build_sink(config)
    scheduler = FrameScheduler(
        source=source or build_source(config),
        background=background,
        sink=sink,
        compositor=compositor,
        config=config.scheduler,
        event_bus=event_bus,
    )
    if isinstance(sink, WindowSink) and sink.on_quit is None:
        sink.on_quit = scheduler.stop

    logger.info(
        f"Scheduler built: input={config.input.kind} output={config.output.kind} "
        f"key={compositor.classifier!r} interval={config.scheduler.cycle_interval_ms}ms"
    )
    return scheduler
