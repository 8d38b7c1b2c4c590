"""
Shutdown coordinator that orchestrates the two-phase shutdown sequence.

Receives triggers, guards against re-entry, runs the primary chain then the
final chain, resolves one exit code and terminates the process unless an
observer takes over.
"""

import asyncio
from contextvars import ContextVar
from typing import Any, Callable, Dict, Optional

from shutdown_manager.lifecycle.action_chain import ActionChain
from shutdown_manager.lifecycle.action_executor import ActionExecutor, sequence_results
from shutdown_manager.lifecycle.outcome_aggregator import OutcomeAggregator
from shutdown_manager.lifecycle.process_subscription import ProcessSubscription, terminate_process
from shutdown_manager.models.action import Action
from shutdown_manager.models.enums import (
    ActionKind,
    HookResult,
    HookType,
    LogCategory,
    ShutdownState,
)
from shutdown_manager.models.events import PreShutdownEvent, ShutdownCompleteEvent
from shutdown_manager.models.outcome import AggregateOutcome
from shutdown_manager.models.settings import DEFAULT_LOGGING_PREFIX, ShutdownSettings
from shutdown_manager.models.trigger import FAILURE_EXIT_CODE, ShutdownTrigger, format_error
from shutdown_manager.services.hook_emitter import HookEmitter, HookHandler
from shutdown_manager.utils.logger import get_logger

log = get_logger().for_category(LogCategory.SHUTDOWN)

# Task running the active sequence; action tasks inherit it through their context
current_shutdown_task: ContextVar[Optional[asyncio.Task]] = ContextVar(
    "current_shutdown_task", default=None
)


class ShutdownCoordinator:
    """
    Coordinates graceful shutdown through two action chains.

    State machine: IDLE -> RUNNING -> COMPLETED. The IDLE -> RUNNING
    transition happens once; any later trigger is ignored.

    Example:
        coordinator = ShutdownCoordinator(timeout_ms=5000)
        coordinator.add_shutdown_action(server_shutdown)
        coordinator.add_shutdown_action(flush_metrics)
        coordinator.add_final_shutdown_action(close_database)

        subscription = coordinator.install()
        await serve_forever()
    """

    def __init__(
        self,
        logger: Optional[Any] = None,
        logging_prefix: str = DEFAULT_LOGGING_PREFIX,
        timeout_ms: Optional[float] = None,
        exit_fn: Optional[Callable[[int], Any]] = None,
        hooks: Optional[HookEmitter] = None,
        bindings: Optional[Dict[str, bool]] = None,
    ):
        """
        Initialize shutdown coordinator.

        Args:
            logger: Sink exposing log(message); console logger when None
            logging_prefix: String prepended to every sink line
            timeout_ms: Bound for each phase in milliseconds, None waits forever
            exit_fn: Exit primitive taking the exit code; terminate_process when None
            hooks: Shared HookEmitter, a private one is created when None
            bindings: Default ProcessSubscription flags used by install()
        """
        self._logger = logger if logger is not None else get_logger().for_category(LogCategory.SHUTDOWN)
        self._logging_prefix = logging_prefix
        self._timeout_ms = timeout_ms if timeout_ms and timeout_ms > 0 else None
        self._exit_fn = exit_fn
        self._hooks = hooks if hooks is not None else HookEmitter()
        self._bindings = dict(bindings or {})

        self._state = ShutdownState.IDLE
        self._exit_code: Optional[int] = None
        self._actions = ActionChain("primary")
        self._final_actions = ActionChain("final")

        self._executor = ActionExecutor(self._hooks, self._log)
        self._aggregator = OutcomeAggregator()
        self._task: Optional[asyncio.Task] = None
        self._subscription: Optional[ProcessSubscription] = None

    # ----------------------------------------------------------------------
    # REGISTRATION
    # ----------------------------------------------------------------------
    def add_shutdown_action(
        self,
        action: Callable[[], Any],
        kind: Optional[ActionKind] = None
    ) -> None:
        """
        Add a callable to the primary chain.

        It may be synchronous or return an awaitable (coroutine, Task,
        Future, concurrent.futures.Future). Only actions added before the
        shutdown begins are guaranteed to run.
        """
        registered = self._actions.register(action, kind)
        self._note_registration(registered, self._actions)

    def add_final_shutdown_action(
        self,
        action: Callable[[], Any],
        kind: Optional[ActionKind] = None
    ) -> None:
        """Add a callable to the final chain, run after the primary chain succeeds."""
        registered = self._final_actions.register(action, kind)
        self._note_registration(registered, self._final_actions)

    def _note_registration(self, action: Action, chain: ActionChain) -> None:
        if self._state is ShutdownState.IDLE:
            log.debug(f"Registered {chain.name} shutdown action: {action.name} ({action.kind.name})")
        else:
            log.debug(
                f"Action {action.name} registered during shutdown; "
                f"it will not run in the current sequence",
                state=self._state.name
            )

    def on(self, hook_type: HookType, handler: HookHandler, priority: int = 0) -> None:
        """Observe a hook; returning HookResult.HANDLED suppresses the default behaviour."""
        self._hooks.subscribe(hook_type, handler, priority)

    def off(self, hook_type: HookType, handler: HookHandler) -> bool:
        return self._hooks.unsubscribe(hook_type, handler)

    # ----------------------------------------------------------------------
    # PROCESS BINDING
    # ----------------------------------------------------------------------
    def install(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        **flags: bool
    ) -> ProcessSubscription:
        """
        Attach to process-level triggers.

        Returns the subscription; call uninstall() (or use it as a context
        manager) to restore the previous handlers.
        """
        if self._subscription is not None and self._subscription.installed:
            return self._subscription
        options = {**self._bindings, **flags}
        self._subscription = ProcessSubscription(self, loop=loop, **options).install()
        return self._subscription

    @classmethod
    def from_settings(
        cls,
        settings: ShutdownSettings,
        logger: Optional[Any] = None,
        exit_fn: Optional[Callable[[int], Any]] = None,
        hooks: Optional[HookEmitter] = None,
    ) -> "ShutdownCoordinator":
        """Build a coordinator from validated settings (see ConfigManager)."""
        return cls(
            logger=logger,
            logging_prefix=settings.logging_prefix,
            timeout_ms=settings.timeout_ms,
            exit_fn=exit_fn,
            hooks=hooks,
            bindings={
                "signals": settings.install_signals,
                "uncaught_exceptions": settings.handle_uncaught_exceptions,
                "unhandled_rejections": settings.handle_unhandled_rejections,
                "natural_exit": settings.handle_natural_exit,
                "threads": settings.handle_thread_exceptions,
            },
        )

    def trigger(self, trigger: ShutdownTrigger) -> Optional[asyncio.Task]:
        """
        Deliver a trigger from synchronous code (signal or exception hooks).

        Inside a running loop the sequence is scheduled as a task and the
        task is returned. Without one it runs to completion here.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.shutdown(trigger))
            return None

        task = loop.create_task(self.shutdown(trigger), name=f"shutdown:{trigger.name}")
        if self._task is None:
            self._task = task
        return task

    # ----------------------------------------------------------------------
    # SHUTDOWN SEQUENCE
    # ----------------------------------------------------------------------
    async def shutdown(self, trigger: ShutdownTrigger) -> Optional[int]:
        """
        Run the shutdown sequence for a trigger.

        Returns:
            The exit code, or None when the trigger was ignored because a
            shutdown had already started (or the natural-exit code is
            passed through unchanged)
        """
        await self._announce(trigger)

        if self._state is not ShutdownState.IDLE:
            log.debug(f"Ignoring {trigger.name}: shutdown already {self._state.name}")
            return None
        self._state = ShutdownState.RUNNING
        current_shutdown_task.set(asyncio.current_task())
        sequence_results.set(set())
        primary, final = self._actions.frozen(), self._final_actions.frozen()

        exit_code = trigger.base_exit_code
        errors: Optional[Any] = None

        outcome = await self._run_phase(primary)
        if outcome.succeeded:
            outcome = await self._run_phase(final)
        if not outcome.succeeded:
            exit_code = FAILURE_EXIT_CODE
            errors = outcome.reason

        self._exit_code = exit_code
        self._state = ShutdownState.COMPLETED

        await self._exit(trigger, exit_code, errors)
        return exit_code

    async def _announce(self, trigger: ShutdownTrigger) -> None:
        result = await self._hooks.emit(PreShutdownEvent(trigger.name, trigger.payload))
        if result is HookResult.HANDLED:
            return
        self._log(trigger.message)
        if trigger.payload is not None:
            self._log("Exception: " + format_error(trigger.payload))

    async def _run_phase(self, chain: ActionChain) -> AggregateOutcome:
        pending = await self._executor.execute(chain)
        outcome = await self._aggregator.aggregate(pending, self._timeout_ms)
        log.debug(f"{chain.name.capitalize()} phase finished: {outcome.kind.name}")
        return outcome

    async def _exit(
        self,
        trigger: ShutdownTrigger,
        exit_code: Optional[int],
        errors: Optional[Any]
    ) -> None:
        result = await self._hooks.emit(ShutdownCompleteEvent(errors, exit_code))
        if result is HookResult.HANDLED:
            log.debug("Exit handled by observer")
            return

        if errors is not None:
            self._log(f"Exiting with Error(s): {str(errors) or repr(errors)}")
        else:
            self._log("Exiting without errors")

        if exit_code is None:
            # Natural exit: the interpreter keeps its own status
            return
        if self._exit_fn is not None:
            self._exit_fn(exit_code)
        else:
            terminate_process(exit_code, hard=trigger.hard_exit)

    def _log(self, message: str) -> None:
        self._logger.log(self._logging_prefix + message)

    # ----------------------------------------------------------------------
    # PROPERTIES
    # ----------------------------------------------------------------------
    @property
    def state(self) -> ShutdownState:
        return self._state

    @property
    def is_shutting_down(self) -> bool:
        return self._state is not ShutdownState.IDLE

    @property
    def exit_code(self) -> Optional[int]:
        """Exit code of the completed sequence, None before completion."""
        return self._exit_code

    @property
    def timeout_ms(self) -> Optional[float]:
        return self._timeout_ms

    @property
    def logging_prefix(self) -> str:
        return self._logging_prefix

    @property
    def hooks(self) -> HookEmitter:
        return self._hooks

    @property
    def actions(self) -> ActionChain:
        return self._actions

    @property
    def final_actions(self) -> ActionChain:
        return self._final_actions

    @property
    def task(self) -> Optional[asyncio.Task]:
        """Task of the first trigger scheduled through trigger()."""
        return self._task

    @property
    def subscription(self) -> Optional[ProcessSubscription]:
        return self._subscription
