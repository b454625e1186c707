"""Event bus for scheduler notifications."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Callable, Optional, Any
import asyncio
import logging
from collections import defaultdict

from chromakey.core import EventType, SchedulerState


logger = logging.getLogger(__name__)


@dataclass
class SchedulerEvent:
    """An event published by the frame scheduler."""
    event_type: EventType
    state: SchedulerState
    frame_number: Optional[int] = None
    error: Optional[BaseException] = None
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


# Handlers may be plain callables or coroutine functions
EventHandler = Callable[[SchedulerEvent], Any]


class SchedulerEventBus:
    """Publish/subscribe hub for scheduler events.

    The scheduler publishes state transitions, presented frames and
    failed cycles here; UIs, recorders and tests subscribe.

    Features:
    - Sync and async handlers
    - Multiple subscribers per event type
    - Bounded event history for debugging
    """

    def __init__(self, history_size: int = 100):
        self._handlers: Dict[EventType, List[EventHandler]] = defaultdict(list)
        self._global_handlers: List[EventHandler] = []
        self._history: List[SchedulerEvent] = []
        self._history_size = history_size

    def subscribe(self, event_type: EventType, handler: EventHandler):
        """Subscribe to one event type.

        Args:
            event_type: The event type to subscribe to
            handler: Callable (sync or async) that takes SchedulerEvent
        """
        self._handlers[event_type].append(handler)
        logger.debug(f"Added subscriber for {event_type.name}")

    def subscribe_all(self, handler: EventHandler):
        """Subscribe to every event."""
        self._global_handlers.append(handler)
        logger.debug("Added global subscriber")

    def unsubscribe(self, event_type: EventType, handler: EventHandler):
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    async def publish(self, event: SchedulerEvent):
        """Store an event and notify its subscribers.

        Handler errors are logged and never propagate to the scheduler.
        """
        self._history.append(event)
        if len(self._history) > self._history_size:
            self._history.pop(0)

        handlers = list(self._handlers[event.event_type]) + list(self._global_handlers)
        for handler in handlers:
            try:
                result = handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Handler error for {event.event_type.name}: {e}", exc_info=True
                )

    def get_history(
        self,
        event_type: Optional[EventType] = None,
        limit: int = 10,
    ) -> List[SchedulerEvent]:
        """Get recent events, newest first.

        Args:
            event_type: Filter by type, or None for all
            limit: Maximum events to return
        """
        events = self._history[::-1]
        if event_type:
            events = [e for e in events if e.event_type == event_type]
        return events[:limit]

    def state_history(self) -> List[SchedulerState]:
        """All states entered so far, oldest first."""
        return [
            e.state for e in self._history
            if e.event_type == EventType.STATE_CHANGED
        ]

    async def wait_for(
        self,
        event_type: EventType,
        timeout: float = 5.0,
        predicate: Optional[Callable[[SchedulerEvent], bool]] = None,
    ) -> Optional[SchedulerEvent]:
        """Wait for the next matching event.

        Returns:
            The event, or None on timeout
        """
        future = asyncio.get_running_loop().create_future()

        def handler(event: SchedulerEvent):
            if not future.done() and (predicate is None or predicate(event)):
                future.set_result(event)

        self.subscribe(event_type, handler)
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError:
            return None
        finally:
            self.unsubscribe(event_type, handler)
