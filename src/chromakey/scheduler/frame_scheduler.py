"""Fixed-cadence capture -> composite -> present loop."""

import asyncio
import logging
import time
from datetime import datetime
from typing import Callable, Optional

from chromakey.background import BackgroundStore
from chromakey.compositing import Compositor
from chromakey.core import (
    CycleStats,
    DimensionMismatch,
    EventType,
    Frame,
    SchedulerState,
    Session,
    StreamUnavailableError,
)
from chromakey.scheduler.events import SchedulerEvent, SchedulerEventBus
from chromakey.sinks import FrameSink
from chromakey.sources import FrameSource
from chromakey.utils.config import SchedulerConfig


logger = logging.getLogger(__name__)


class FrameScheduler:
    """Drives a compositing session through its lifecycle.

    States::

        IDLE -> LOADING -> RUNNING <-> PAUSED
                   |          |          |
                   +----------+----------+--> STOPPED

    * ``start()`` opens the source, derives the session size and awaits
      the background load (LOADING), then enters RUNNING.
    * Every RUNNING tick checks the cancellation event, then the source's
      ``ended`` / ``paused`` state, and otherwise runs one composite cycle.
      The next tick is armed ``cycle_interval_ms`` after the cycle's work
      returns, so cycles never overlap.
    * A paused session stays PAUSED until :meth:`resume` is called.
    * :meth:`stop` (callable from any thread) cancels the session; no frame
      reaches the sink once the stop has been processed.

    A failing cycle is logged and dropped and scheduling continues. A
    frame whose size differs from the session's triggers re-derivation of
    the background at the new size. With ``fail_fast`` the first cycle
    error stops the session instead and propagates out of :meth:`run`.

    Example usage:
        scheduler = FrameScheduler(
            source=WebcamSource(0),
            background=BackgroundStore("media/beach.jpg"),
            sink=WindowSink(),
        )
        asyncio.run(scheduler.run())
    """

    def __init__(
        self,
        source: FrameSource,
        background: BackgroundStore,
        sink: FrameSink,
        compositor: Optional[Compositor] = None,
        config: Optional[SchedulerConfig] = None,
        event_bus: Optional[SchedulerEventBus] = None,
    ):
        self.config = config or SchedulerConfig()
        self.event_bus = event_bus or SchedulerEventBus()
        self.session = Session()
        self.stats = CycleStats()

        self._source = source
        self._background = background
        self._sink = sink
        self._compositor = compositor or Compositor()

        self._cancel = asyncio.Event()
        self._resume = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Optional[Frame] = None
        self._released = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self.session.state

    @property
    def interval(self) -> float:
        """Delay between the end of one cycle and the next, in seconds."""
        return self.config.cycle_interval_ms / 1000.0

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> Session:
        """Open the stream and load the background (IDLE -> LOADING -> RUNNING).

        Raises:
            StreamUnavailableError: The input stream cannot be opened.
            ImageLoadError: The background cannot be decoded.
            DimensionError: The stream reports an unusable size.
        """
        if self.state != SchedulerState.IDLE:
            raise RuntimeError(f"Cannot start scheduler in state {self.state.name}")
        self._loop = asyncio.get_running_loop()

        if self.cancelled:
            await self._shutdown("stopped before start")
            return self.session

        try:
            self._source.open()
            width, height = self._source.resolution
            if width <= 0 or height <= 0:
                # Size unknown until the stream delivers its first frame
                first = self._source.read()
                if first is None:
                    raise StreamUnavailableError("Input stream produced no frames")
                self._pending = first
                width, height = first.size

            await self._set_state(SchedulerState.LOADING, width=width, height=height)
            await self._derive_session(width, height)
        except asyncio.CancelledError:
            await self._shutdown("cancelled during startup")
            raise
        except Exception as e:
            logger.error(f"Session startup failed: {e}")
            await self._shutdown(f"startup failed: {e}")
            raise

        if self.cancelled:
            await self._shutdown("stopped during loading")
            return self.session

        self.session.started_at = datetime.now()
        await self._set_state(SchedulerState.RUNNING)
        return self.session

    async def run(self) -> CycleStats:
        """Run the session until the stream ends or :meth:`stop` is called.

        Returns:
            The cycle statistics of the finished session.
        """
        reason = "stopped"
        try:
            if self.state == SchedulerState.IDLE:
                await self.start()

            while self.state != SchedulerState.STOPPED:
                if self.cancelled:
                    break

                if self.state == SchedulerState.PAUSED:
                    if not await self._wait_for_resume():
                        reason = "input stream ended"
                        break
                    continue

                if self._pending is None and self._source.ended:
                    reason = "input stream ended"
                    break
                if self._source.paused:
                    self._resume.clear()
                    await self._set_state(SchedulerState.PAUSED)
                    continue

                await self._run_cycle_guarded()
                await self._sleep(self.interval)
        except asyncio.CancelledError:
            reason = "cancelled"
            raise
        except Exception as e:
            reason = f"fatal error: {e}"
            raise
        finally:
            await self._shutdown(reason)

        return self.stats

    def run_sync(self) -> CycleStats:
        """Synchronous wrapper for run()."""
        return asyncio.run(self.run())

    def stop(self) -> None:
        """Cancel the session. Safe to call from any thread."""
        logger.info("Stop requested")
        self._call_in_loop(self._request_stop)

    def resume(self) -> bool:
        """Re-arm a PAUSED session.

        The stream itself must be resumed by its owner; if it is still
        paused at the next tick the session returns to PAUSED.

        Returns:
            True if the session was paused and has been re-armed.
        """
        if self.state != SchedulerState.PAUSED:
            logger.debug(f"resume() ignored in state {self.state.name}")
            return False
        self._call_in_loop(self._resume.set)
        return True

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    async def run_cycle(self) -> bool:
        """Run one capture -> composite -> present cycle.

        Returns:
            True if a frame reached the sink. Always False outside RUNNING.

        Raises:
            DimensionMismatch: The frame size differs from the session's.
        """
        if self.state != SchedulerState.RUNNING or self.session.background is None:
            logger.debug(f"run_cycle() ignored in state {self.state.name}")
            return False

        started = time.perf_counter()
        frame = self._pending or self._source.read()
        self._pending = None
        if frame is None:
            self.stats.dropped += 1
            logger.debug("No frame available this cycle")
            return False

        background = self.session.background
        await asyncio.to_thread(self._compositor.composite, frame, background)

        if self.cancelled:
            self.stats.dropped += 1
            logger.debug(f"Discarding frame {frame.frame_number}: session cancelled")
            return False

        self._sink.push(frame)
        duration_ms = (time.perf_counter() - started) * 1000.0
        self.stats.record(duration_ms)
        self.stats.presented += 1
        self.stats.last_presented_at = datetime.now()
        logger.debug(f"Cycle {frame.frame_number}: {duration_ms:.2f} ms")

        await self.event_bus.publish(SchedulerEvent(
            event_type=EventType.FRAME_PRESENTED,
            state=self.state,
            frame_number=frame.frame_number,
            details={"cycle_ms": duration_ms},
        ))
        return True

    async def _run_cycle_guarded(self) -> None:
        try:
            await self.run_cycle()
        except DimensionMismatch as e:
            await self._record_failure(e)
            if self.config.fail_fast:
                raise
            logger.warning(f"{e}; re-deriving session")
            await self._rederive(*e.actual)
        except Exception as e:
            await self._record_failure(e)
            if self.config.fail_fast:
                raise
            logger.error(f"Composite cycle failed: {e}", exc_info=True)

    async def _record_failure(self, error: Exception) -> None:
        self.stats.errors += 1
        self.stats.dropped += 1
        await self.event_bus.publish(SchedulerEvent(
            event_type=EventType.CYCLE_FAILED,
            state=self.state,
            error=error,
        ))

    # ------------------------------------------------------------------
    # Session management
    # ------------------------------------------------------------------

    async def _derive_session(self, width: int, height: int) -> None:
        background = await self._background.prepare(width, height)
        self.session.width = width
        self.session.height = height
        self.session.background = background
        self._sink.open(width, height)
        logger.info(f"Session ready: {width}x{height}")

    async def _rederive(self, width: int, height: int) -> None:
        await self._set_state(SchedulerState.LOADING, width=width, height=height)
        await self._derive_session(width, height)
        if not self.cancelled:
            await self._set_state(SchedulerState.RUNNING)

    async def _wait_for_resume(self) -> bool:
        """Block until resumed or stopped, polling the stream every interval.

        Returns:
            False if the stream ended while the session was paused.
        """
        while not self._resume.is_set():
            if self._source.ended:
                return False
            try:
                await asyncio.wait_for(self._resume.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
        self._resume.clear()
        if not self.cancelled:
            await self._set_state(SchedulerState.RUNNING)
        return True

    async def _sleep(self, seconds: float) -> None:
        try:
            await asyncio.wait_for(self._cancel.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def _shutdown(self, reason: str) -> None:
        if not self._released:
            self._released = True
            self._close_resources()
            self.session.background = None
            self._pending = None
            logger.info(
                f"Session finished ({reason}): "
                + ", ".join(f"{k}={v}" for k, v in self.stats.as_dict().items())
            )
        if self.state != SchedulerState.STOPPED:
            await self._set_state(SchedulerState.STOPPED, reason=reason)

    def _close_resources(self) -> None:
        closers: list[tuple[str, Callable[[], None]]] = [
            ("source", self._source.close),
            ("sink", self._sink.close),
            ("compositor", self._compositor.close),
        ]
        for name, close in closers:
            try:
                close()
            except Exception as e:
                logger.error(f"Error closing {name}: {e}", exc_info=True)

    async def _set_state(self, state: SchedulerState, **details) -> None:
        previous = self.session.state
        self.session.state = state
        logger.info(f"State: {previous.name} -> {state.name}")
        await self.event_bus.publish(SchedulerEvent(
            event_type=EventType.STATE_CHANGED,
            state=state,
            details={"previous": previous, **details},
        ))

    # ------------------------------------------------------------------
    # Cancellation plumbing
    # ------------------------------------------------------------------

    def _request_stop(self) -> None:
        self._cancel.set()
        self._resume.set()

    def _call_in_loop(self, fn: Callable[[], None]) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            fn()
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            fn()
        else:
            loop.call_soon_threadsafe(fn)
