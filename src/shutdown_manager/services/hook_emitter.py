"""
Hook Emitter - Interception points for the shutdown sequence

Implements pub-sub with suppression:
- Observers: subscribe(hook_type, handler, priority)
- Coordinator: emit(event) -> HookResult
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Union

from shutdown_manager.models.enums import HookType, HookResult, LogCategory
from shutdown_manager.models.events import HookEvent
from shutdown_manager.utils.logger import get_logger

log = get_logger().for_category(LogCategory.HOOKS)

HookHandler = Callable[[HookEvent], Union[HookResult, None, Awaitable[Any]]]


@dataclass
class HookRegistration:
    """Hook handler registration"""
    handler: HookHandler
    priority: int


def _handler_name(handler: Any) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class HookEmitter:
    """
    Dispatches shutdown hook events to observers

    Semantics:
    - Priority-based handler execution (high priority first, FIFO on ties)
    - Every handler runs, even after one has returned HANDLED
    - The event counts as HANDLED when at least one handler returned
      HookResult.HANDLED; any other return value means NOT_HANDLED
    - Async/sync handlers are both supported
    - A handler that raises is logged and treated as NOT_HANDLED

    Example:
        hooks = HookEmitter()

        def quiet_exit(event):
            my_logger.info(f"exit code {event.exit_code}")
            return HookResult.HANDLED

        hooks.subscribe(HookType.SHUTDOWN_COMPLETE, quiet_exit)
        result = await hooks.emit(ShutdownCompleteEvent(None, 0))
    """

    def __init__(self):
        self._handlers: Dict[HookType, List[HookRegistration]] = {}

    def subscribe(
        self,
        hook_type: HookType,
        handler: HookHandler,
        priority: int = 0
    ) -> None:
        """
        Subscribe to a hook

        Args:
            hook_type: Which interception point to observe
            handler: Function receiving the event (can be async or sync)
            priority: Execution priority (higher = called first, default: 0)
        """
        registrations = self._handlers.setdefault(hook_type, [])
        registrations.append(HookRegistration(handler, priority))
        registrations.sort(key=lambda r: r.priority, reverse=True)

        log.debug(
            "Hook handler subscribed",
            hook=hook_type.value,
            handler=_handler_name(handler),
            priority=priority
        )

    def unsubscribe(self, hook_type: HookType, handler: HookHandler) -> bool:
        """Remove the first registration of handler; returns False if absent."""
        registrations = self._handlers.get(hook_type, [])
        for i, registration in enumerate(registrations):
            if registration.handler == handler:
                del registrations[i]
                return True
        return False

    def handler_count(self, hook_type: HookType) -> int:
        return len(self._handlers.get(hook_type, []))

    async def emit(self, event: HookEvent) -> HookResult:
        """
        Offer an event to all subscribers of its hook type

        Args:
            event: Hook event to dispatch

        Returns:
            HookResult.HANDLED if any handler handled it, else NOT_HANDLED
        """
        # Copy so handlers may (un)subscribe while dispatching
        registrations = list(self._handlers.get(event.type, []))
        if not registrations:
            return HookResult.NOT_HANDLED

        handled = False
        for registration in registrations:
            try:
                result = registration.handler(event)
                if inspect.isawaitable(result):
                    result = await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.error(
                    f"Hook handler failed: {_handler_name(registration.handler)} for {event.type.value}",
                    exception=repr(e)
                )
                continue

            if result is HookResult.HANDLED:
                handled = True

        return HookResult.HANDLED if handled else HookResult.NOT_HANDLED
