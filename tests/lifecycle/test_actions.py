import asyncio

import pytest

from shutdown_manager.lifecycle.actions import ServerShutdownAction, TaskCancellationAction
from shutdown_manager.lifecycle.shutdown_protocol import IShutdownAction
from shutdown_manager.models.trigger import ShutdownTrigger, TriggerType


class FakeUvicornServer:
    def __init__(self, started=True):
        self.started = started
        self.shutdown_called = False

    async def shutdown(self):
        self.shutdown_called = True


class FakeAsyncioServer:
    def __init__(self):
        self.closed = False
        self.waited = False

    def close(self):
        self.closed = True

    async def wait_closed(self):
        self.waited = True


# ----------------------------------------------------------------------
# TaskCancellationAction
# ----------------------------------------------------------------------
@pytest.mark.asyncio
async def test_cancels_given_tasks():
    task = asyncio.create_task(asyncio.sleep(10), name="poller")
    keep = asyncio.create_task(asyncio.sleep(10), name="keeper")

    await TaskCancellationAction([task])()

    assert task.cancelled()
    assert not keep.done()
    keep.cancel()


@pytest.mark.asyncio
async def test_excluded_tasks_keep_running():
    task = asyncio.create_task(asyncio.sleep(10))

    await TaskCancellationAction([task], exclude=[task])()

    assert not task.done()
    task.cancel()


@pytest.mark.asyncio
async def test_cancels_background_tasks_during_shutdown(coordinator, exit_recorder):
    background = asyncio.create_task(asyncio.sleep(10), name="background")
    coordinator.add_shutdown_action(TaskCancellationAction())

    code = await coordinator.shutdown(ShutdownTrigger(TriggerType.SIGTERM))

    assert code == 143
    assert background.cancelled()
    assert exit_recorder.codes == [143]


@pytest.mark.asyncio
async def test_scheduled_shutdown_task_is_not_cancelled(coordinator, exit_recorder):
    coordinator.add_shutdown_action(TaskCancellationAction())

    task = coordinator.trigger(ShutdownTrigger(TriggerType.SIGINT))

    assert await task == 130
    assert not task.cancelled()


@pytest.mark.asyncio
async def test_nothing_to_cancel():
    await TaskCancellationAction([])()


# ----------------------------------------------------------------------
# ServerShutdownAction
# ----------------------------------------------------------------------
@pytest.mark.asyncio
async def test_server_with_shutdown():
    server = FakeUvicornServer()

    await ServerShutdownAction(server, grace=0)()

    assert server.shutdown_called


@pytest.mark.asyncio
async def test_server_never_started_is_skipped():
    server = FakeUvicornServer(started=False)

    await ServerShutdownAction(server, grace=0)()

    assert not server.shutdown_called


@pytest.mark.asyncio
async def test_server_with_close_and_wait_closed():
    server = FakeAsyncioServer()

    await ServerShutdownAction(server, grace=0)()

    assert server.closed and server.waited


@pytest.mark.asyncio
async def test_real_asyncio_server_is_closed():
    server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)

    await ServerShutdownAction(server, grace=0)()

    assert not server.is_serving()


@pytest.mark.asyncio
async def test_unsupported_server_fails_the_action():
    with pytest.raises(TypeError):
        await ServerShutdownAction(object(), grace=0)()


def test_actions_satisfy_protocol():
    assert isinstance(TaskCancellationAction(), IShutdownAction)
    assert isinstance(ServerShutdownAction(FakeAsyncioServer()), IShutdownAction)


@pytest.mark.asyncio
async def test_sibling_actions_are_not_cancelled(coordinator, exit_recorder, recording_logger):
    """Cancelling background tasks leaves the other shutdown actions running."""
    flushed = []
    background = asyncio.create_task(asyncio.sleep(10), name="background")

    async def flush_metrics():
        await asyncio.sleep(0.05)
        flushed.append(True)

    coordinator.add_shutdown_action(flush_metrics)
    coordinator.add_shutdown_action(TaskCancellationAction())
    coordinator.add_final_shutdown_action(lambda: asyncio.sleep(0.01))

    code = await coordinator.shutdown(ShutdownTrigger(TriggerType.SIGTERM))

    assert code == 143
    assert flushed == [True]
    assert background.cancelled()
    assert exit_recorder.codes == [143]
    assert recording_logger.contains("Exiting without errors")
