"""
Invokes the actions of a chain and collects their pending results.
"""

import asyncio
import concurrent.futures
import inspect
from contextvars import ContextVar
from typing import Any, Callable, List, Optional, Set

from shutdown_manager.lifecycle.action_chain import ActionChain
from shutdown_manager.models.action import Action
from shutdown_manager.models.enums import ActionKind, HookResult, LogCategory
from shutdown_manager.models.events import ShutdownActionExceptionEvent
from shutdown_manager.models.trigger import format_error
from shutdown_manager.services.hook_emitter import HookEmitter
from shutdown_manager.utils.logger import get_logger

log = get_logger().for_category(LogCategory.SHUTDOWN)

PendingResult = asyncio.Future

# Results created for the running sequence; cleanup actions must not cancel them
sequence_results: ContextVar[Optional[Set[PendingResult]]] = ContextVar(
    "sequence_results", default=None
)


def to_pending(value: Any) -> Optional[PendingResult]:
    """
    Return a future for values representing asynchronous work, else None.

    Coroutines are scheduled as tasks right away so their work starts at
    invocation time, concurrently with the rest of the chain.
    """
    if isinstance(value, concurrent.futures.Future):
        return asyncio.wrap_future(value)
    if inspect.isawaitable(value):
        return asyncio.ensure_future(value)
    return None


class ActionExecutor:
    """
    Runs every action of a chain snapshot, one after another.

    A synchronous raise is contained: it is offered to the
    shutdownActionException hook and, unless an observer handles it, reported
    through ``report`` (the coordinator's prefixed log sink). The chain always
    continues with the next action.
    """

    def __init__(self, hooks: HookEmitter, report: Callable[[str], None]):
        """
        Args:
            hooks: Emitter offering the shutdownActionException hook
            report: Sink for user-facing log lines (already prefixed)
        """
        self._hooks = hooks
        self._report = report

    async def execute(self, chain: ActionChain) -> List[PendingResult]:
        """
        Invoke each action of the chain snapshot in order.

        Returns:
            Futures for every action that returned asynchronous work
        """
        pending: List[PendingResult] = []
        actions = chain.snapshot()
        log.debug(f"Executing {chain.name} chain", actions=len(actions))

        for action in actions:
            try:
                result = action()
            except asyncio.CancelledError:
                raise
            except BaseException as e:
                # SystemExit and KeyboardInterrupt included; the sequence owns the exit
                await self._on_action_exception(e, action)
                continue

            future = to_pending(result)
            if future is not None:
                pending.append(future)
                tracked = sequence_results.get()
                if tracked is not None:
                    tracked.add(future)
            elif action.kind is ActionKind.ASYNC:
                log.debug(f"Async action {action.name} returned no awaitable; treated as complete")

        return pending

    async def _on_action_exception(self, error: BaseException, action: Action) -> None:
        result = await self._hooks.emit(ShutdownActionExceptionEvent(error, action))
        if result is HookResult.HANDLED:
            return
        self._report("Ignoring Exception Caught from Callback: " + format_error(error))
