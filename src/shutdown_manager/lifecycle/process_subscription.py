"""
Binding between a ShutdownCoordinator and process-level triggers.

Nothing is attached when a coordinator is created. ProcessSubscription
installs the signal handlers and exception hooks explicitly and restores the
previous ones on uninstall(), so a coordinator can live for less than the
whole process (tests, embedded use).
"""

from __future__ import annotations

import asyncio
import atexit
import contextlib
import os
import signal
import sys
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from shutdown_manager.models.enums import LogCategory, ShutdownState
from shutdown_manager.models.trigger import ShutdownTrigger
from shutdown_manager.utils.logger import get_logger

if TYPE_CHECKING:
    from shutdown_manager.lifecycle.shutdown_coordinator import ShutdownCoordinator

log = get_logger().for_category(LogCategory.SYSTEM)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def terminate_process(exit_code: int, hard: bool = False) -> None:
    """
    End the process with exit_code.

    Soft exits raise SystemExit, which unwinds out of asyncio.run() or the
    interrupted main-thread code. Hard exits use os._exit for contexts where
    the interpreter is already terminating (sys.excepthook, atexit) and
    SystemExit would no longer set the status.
    """
    for stream in (sys.stdout, sys.stderr):
        with contextlib.suppress(AttributeError, OSError, ValueError):
            stream.flush()
    if hard:
        os._exit(exit_code)
    raise SystemExit(exit_code)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class ProcessSubscription:
    """
    Installs and removes the process hooks that feed a coordinator.

    Bindings:
      - SIGINT / SIGTERM: loop.add_signal_handler when a loop is available,
        signal.signal otherwise
      - sys.excepthook: uncaught exceptions
      - threading.excepthook: uncaught exceptions in threads (opt-in)
      - loop exception handler: exceptions nobody retrieved (unhandled
        rejections)
      - atexit: natural exit, only if no shutdown has happened

    Example:
        with coordinator.install(loop) as subscription:
            await run_application()
    """

    def __init__(
        self,
        coordinator: "ShutdownCoordinator",
        loop: Optional[asyncio.AbstractEventLoop] = None,
        *,
        signals: bool = True,
        uncaught_exceptions: bool = True,
        unhandled_rejections: bool = True,
        natural_exit: bool = True,
        threads: bool = False,
    ):
        self._coordinator = coordinator
        self._loop = loop
        self._signals = signals
        self._uncaught_exceptions = uncaught_exceptions
        self._unhandled_rejections = unhandled_rejections
        self._natural_exit = natural_exit
        self._threads = threads

        self._installed = False
        self._loop_signals: List[signal.Signals] = []
        self._previous_signals: Dict[signal.Signals, Any] = {}
        self._previous_excepthook: Optional[Any] = None
        self._previous_threading_excepthook: Optional[Any] = None
        self._previous_loop_handler: Optional[Any] = None
        self._handler_loop: Optional[asyncio.AbstractEventLoop] = None

    # ----------------------------------------------------------------------
    # INSTALL / UNINSTALL
    # ----------------------------------------------------------------------
    def install(self) -> "ProcessSubscription":
        if self._installed:
            return self

        loop = self._loop or _running_loop()
        self._loop = loop

        if self._signals:
            self._install_signals(loop)

        if self._uncaught_exceptions:
            self._previous_excepthook = sys.excepthook
            sys.excepthook = self._on_uncaught_exception

        if self._threads:
            self._previous_threading_excepthook = threading.excepthook
            threading.excepthook = self._on_thread_exception

        if self._unhandled_rejections and loop is not None:
            self._previous_loop_handler = loop.get_exception_handler()
            loop.set_exception_handler(self._on_loop_exception)
            self._handler_loop = loop

        if self._natural_exit:
            atexit.register(self._on_exit)

        self._installed = True
        log.info(
            "Process bindings installed",
            signals=self._signals,
            uncaught_exceptions=self._uncaught_exceptions,
            unhandled_rejections=self._handler_loop is not None,
            natural_exit=self._natural_exit,
            threads=self._threads
        )
        return self

    def _install_signals(self, loop: Optional[asyncio.AbstractEventLoop]) -> None:
        for sig in SHUTDOWN_SIGNALS:
            if loop is not None:
                try:
                    loop.add_signal_handler(sig, self._on_signal, sig)
                    self._loop_signals.append(sig)
                    continue
                except NotImplementedError:
                    # Windows event loops
                    log.debug(f"Loop signal handlers unavailable, using signal.signal for {sig.name}")
            self._previous_signals[sig] = signal.signal(sig, self._on_os_signal)

    def uninstall(self) -> None:
        """Restore every handler replaced by install(). Safe to call twice."""
        if not self._installed:
            return

        loop_usable = self._loop is not None and not self._loop.is_closed()
        if loop_usable:
            for sig in self._loop_signals:
                self._loop.remove_signal_handler(sig)
        self._loop_signals.clear()

        for sig, previous in self._previous_signals.items():
            signal.signal(sig, previous)
        self._previous_signals.clear()

        if self._uncaught_exceptions and sys.excepthook == self._on_uncaught_exception:
            sys.excepthook = self._previous_excepthook or sys.__excepthook__

        if self._threads and threading.excepthook == self._on_thread_exception:
            threading.excepthook = self._previous_threading_excepthook or threading.__excepthook__

        if self._handler_loop is not None and not self._handler_loop.is_closed():
            self._handler_loop.set_exception_handler(self._previous_loop_handler)
        self._handler_loop = None

        if self._natural_exit:
            atexit.unregister(self._on_exit)

        self._installed = False
        log.debug("Process bindings removed")

    @property
    def installed(self) -> bool:
        return self._installed

    def __enter__(self) -> "ProcessSubscription":
        return self.install()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.uninstall()

    # ----------------------------------------------------------------------
    # HANDLERS
    # ----------------------------------------------------------------------
    def _on_signal(self, sig: signal.Signals) -> None:
        self._coordinator.trigger(ShutdownTrigger.from_signal(sig))

    def _on_os_signal(self, signum: int, frame: Any) -> None:
        self._coordinator.trigger(ShutdownTrigger.from_signal(signal.Signals(signum)))

    def _on_uncaught_exception(self, exc_type, exc, tb) -> None:
        if exc is None:
            exc = exc_type()
        if exc.__traceback__ is None and tb is not None:
            exc = exc.with_traceback(tb)
        self._coordinator.trigger(ShutdownTrigger.uncaught_exception(exc))

    def _on_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        exc = args.exc_value if args.exc_value is not None else args.exc_type()
        trigger = ShutdownTrigger.uncaught_exception(exc)
        loop = self._loop
        if loop is not None and loop.is_running():
            # Run the sequence on the application's loop, not in this thread
            loop.call_soon_threadsafe(self._coordinator.trigger, trigger)
        else:
            self._coordinator.trigger(trigger)

    def _on_loop_exception(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        error = context.get("exception")
        if error is None:
            # Plain diagnostics (no failure attached) keep their usual route
            if self._previous_loop_handler is not None:
                self._previous_loop_handler(loop, context)
            else:
                loop.default_exception_handler(context)
            return
        self._coordinator.trigger(ShutdownTrigger.unhandled_rejection(error))

    def _on_exit(self) -> None:
        if self._coordinator.state is not ShutdownState.IDLE:
            return
        self._coordinator.trigger(ShutdownTrigger.natural_exit())
