"""
Tests for hook emitter functionality

Covers subscription, priority ordering, suppression and fault tolerance.
"""

import pytest

from shutdown_manager.models.enums import HookResult, HookType
from shutdown_manager.models.events import PreShutdownEvent, ShutdownCompleteEvent
from shutdown_manager.services.hook_emitter import HookEmitter


@pytest.fixture
def hooks():
    return HookEmitter()


@pytest.mark.asyncio
async def test_no_handlers_is_not_handled(hooks):
    assert await hooks.emit(PreShutdownEvent("SIGINT")) is HookResult.NOT_HANDLED


@pytest.mark.asyncio
async def test_sync_and_async_handlers_receive_event(hooks):
    received = []

    def sync_handler(event):
        received.append(("sync", event.trigger_name))

    async def async_handler(event):
        received.append(("async", event.trigger_name))

    hooks.subscribe(HookType.PRE_SHUTDOWN, sync_handler)
    hooks.subscribe(HookType.PRE_SHUTDOWN, async_handler)

    result = await hooks.emit(PreShutdownEvent("SIGTERM"))

    assert result is HookResult.NOT_HANDLED
    assert received == [("sync", "SIGTERM"), ("async", "SIGTERM")]


@pytest.mark.asyncio
async def test_priority_order(hooks):
    order = []
    hooks.subscribe(HookType.SHUTDOWN_COMPLETE, lambda e: order.append("low"), priority=-1)
    hooks.subscribe(HookType.SHUTDOWN_COMPLETE, lambda e: order.append("default"))
    hooks.subscribe(HookType.SHUTDOWN_COMPLETE, lambda e: order.append("high"), priority=10)
    hooks.subscribe(HookType.SHUTDOWN_COMPLETE, lambda e: order.append("default-2"))

    await hooks.emit(ShutdownCompleteEvent(None, 0))

    assert order == ["high", "default", "default-2", "low"]


@pytest.mark.asyncio
async def test_any_handled_wins_and_all_handlers_run(hooks):
    calls = []

    def handles(event):
        calls.append("handles")
        return HookResult.HANDLED

    def declines(event):
        calls.append("declines")
        return HookResult.NOT_HANDLED

    hooks.subscribe(HookType.SHUTDOWN_COMPLETE, handles, priority=1)
    hooks.subscribe(HookType.SHUTDOWN_COMPLETE, declines)

    result = await hooks.emit(ShutdownCompleteEvent(None, 0))

    assert result is HookResult.HANDLED
    assert calls == ["handles", "declines"]


@pytest.mark.asyncio
async def test_truthy_return_is_not_handled(hooks):
    hooks.subscribe(HookType.PRE_SHUTDOWN, lambda e: True)

    assert await hooks.emit(PreShutdownEvent("SIGINT")) is HookResult.NOT_HANDLED


@pytest.mark.asyncio
async def test_async_handled(hooks):
    async def handler(event):
        return HookResult.HANDLED

    hooks.subscribe(HookType.PRE_SHUTDOWN, handler)

    assert await hooks.emit(PreShutdownEvent("SIGINT")) is HookResult.HANDLED


@pytest.mark.asyncio
async def test_failing_handler_is_contained(hooks):
    after = []

    def broken(event):
        raise RuntimeError("observer bug")

    hooks.subscribe(HookType.PRE_SHUTDOWN, broken, priority=5)
    hooks.subscribe(HookType.PRE_SHUTDOWN, lambda e: after.append(True) or HookResult.HANDLED)

    result = await hooks.emit(PreShutdownEvent("SIGINT"))

    assert result is HookResult.HANDLED
    assert after == [True]


@pytest.mark.asyncio
async def test_events_are_routed_by_type(hooks):
    pre = []
    hooks.subscribe(HookType.PRE_SHUTDOWN, pre.append)

    await hooks.emit(ShutdownCompleteEvent(None, 0))

    assert pre == []


@pytest.mark.asyncio
async def test_unsubscribe(hooks):
    calls = []
    handler = calls.append
    hooks.subscribe(HookType.PRE_SHUTDOWN, handler)

    assert hooks.handler_count(HookType.PRE_SHUTDOWN) == 1
    assert hooks.unsubscribe(HookType.PRE_SHUTDOWN, handler) is True
    assert hooks.unsubscribe(HookType.PRE_SHUTDOWN, handler) is False

    await hooks.emit(PreShutdownEvent("SIGINT"))
    assert calls == []


def test_event_payload():
    event = ShutdownCompleteEvent(errors="boom", exit_code=255)

    assert event.type is HookType.SHUTDOWN_COMPLETE
    assert event.to_data() == {"errors": "boom", "exit_code": 255}
    assert event.timestamp > 0
