"""Tests for the scheduler event bus."""

import asyncio

import pytest

from chromakey.core import EventType, SchedulerState
from chromakey.scheduler import SchedulerEvent, SchedulerEventBus


def state_event(state: SchedulerState) -> SchedulerEvent:
    return SchedulerEvent(event_type=EventType.STATE_CHANGED, state=state)


def frame_event(n: int) -> SchedulerEvent:
    return SchedulerEvent(
        event_type=EventType.FRAME_PRESENTED,
        state=SchedulerState.RUNNING,
        frame_number=n,
    )


class TestSchedulerEventBus:
    @pytest.mark.asyncio
    async def test_subscribe_and_publish(self):
        bus = SchedulerEventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(EventType.STATE_CHANGED, handler)
        await bus.publish(state_event(SchedulerState.RUNNING))
        await bus.publish(frame_event(0))

        assert len(received) == 1
        assert received[0].state == SchedulerState.RUNNING

    @pytest.mark.asyncio
    async def test_sync_and_global_handlers(self):
        bus = SchedulerEventBus()
        received = []
        bus.subscribe_all(received.append)

        await bus.publish(state_event(SchedulerState.LOADING))
        await bus.publish(frame_event(0))

        assert len(received) == 2

    @pytest.mark.asyncio
    async def test_handler_error_does_not_propagate(self):
        bus = SchedulerEventBus()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(EventType.FRAME_PRESENTED, broken)
        bus.subscribe(EventType.FRAME_PRESENTED, received.append)

        await bus.publish(frame_event(1))

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_history_bounded_newest_first(self):
        bus = SchedulerEventBus(history_size=5)
        for i in range(10):
            await bus.publish(frame_event(i))

        history = bus.get_history(limit=10)
        assert len(history) == 5
        assert history[0].frame_number == 9

    @pytest.mark.asyncio
    async def test_state_history(self):
        bus = SchedulerEventBus()
        await bus.publish(state_event(SchedulerState.LOADING))
        await bus.publish(frame_event(0))
        await bus.publish(state_event(SchedulerState.STOPPED))
        assert bus.state_history() == [SchedulerState.LOADING, SchedulerState.STOPPED]

    @pytest.mark.asyncio
    async def test_wait_for_with_predicate(self):
        bus = SchedulerEventBus()

        async def publish_later():
            for i in range(3):
                await asyncio.sleep(0.01)
                await bus.publish(frame_event(i))

        task = asyncio.create_task(publish_later())
        event = await bus.wait_for(
            EventType.FRAME_PRESENTED, timeout=1.0,
            predicate=lambda e: e.frame_number == 2,
        )
        await task

        assert event is not None
        assert event.frame_number == 2

    @pytest.mark.asyncio
    async def test_wait_for_timeout_unsubscribes(self):
        bus = SchedulerEventBus()
        event = await bus.wait_for(EventType.CYCLE_FAILED, timeout=0.05)
        assert event is None
        assert bus._handlers[EventType.CYCLE_FAILED] == []
