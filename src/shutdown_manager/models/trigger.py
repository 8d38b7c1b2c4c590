"""
Shutdown triggers and their exit-code mapping
"""

from __future__ import annotations

import signal
import traceback
from dataclasses import dataclass
from typing import Any, Optional

from shutdown_manager.models.enums import TriggerType

# POSIX convention: a process killed by signal N exits with 128 + N
SIGNAL_EXIT_OFFSET = 128
FAILURE_EXIT_CODE = 255

_SIGNAL_NUMBERS = {
    TriggerType.SIGINT: int(signal.SIGINT),     # 2
    TriggerType.SIGTERM: int(signal.SIGTERM),   # 15
}

_DEFAULT_MESSAGES = {
    TriggerType.SIGINT: "Received SIGINT, Beginning Shutdown Process",
    TriggerType.SIGTERM: "Received SIGTERM, Beginning Shutdown Process",
    TriggerType.UNCAUGHT_EXCEPTION: "Uncaught Exception Received, Beginning Shutdown Process",
    TriggerType.UNHANDLED_REJECTION: "Unhandled Rejected Promise Received, Beginning Shutdown Process",
    TriggerType.NATURAL_EXIT: "Application Exiting for Undefined Reason, Beginning Shutdown Process",
}


def format_error(error: Any) -> str:
    """Render an exception with its traceback, anything else with str()."""
    if isinstance(error, BaseException):
        return "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ).rstrip()
    return str(error)


@dataclass(frozen=True)
class ShutdownTrigger:
    """
    External event that starts the shutdown sequence.

    Attributes:
        type: Which trigger fired
        payload: Optional diagnostic (exception, loop context message)
        exit_code: Pass-through code, only used for NATURAL_EXIT
    """
    type: TriggerType
    payload: Optional[Any] = None
    exit_code: Optional[int] = None

    # === Constructors used by the process bindings ===
    @classmethod
    def from_signal(cls, sig: signal.Signals) -> "ShutdownTrigger":
        if sig == signal.SIGINT:
            return cls(TriggerType.SIGINT)
        if sig == signal.SIGTERM:
            return cls(TriggerType.SIGTERM)
        raise ValueError(f"Unsupported shutdown signal: {sig!r}")

    @classmethod
    def uncaught_exception(cls, error: BaseException) -> "ShutdownTrigger":
        return cls(TriggerType.UNCAUGHT_EXCEPTION, payload=error)

    @classmethod
    def unhandled_rejection(cls, reason: Any) -> "ShutdownTrigger":
        return cls(TriggerType.UNHANDLED_REJECTION, payload=reason)

    @classmethod
    def natural_exit(cls, exit_code: Optional[int] = None) -> "ShutdownTrigger":
        return cls(TriggerType.NATURAL_EXIT, exit_code=exit_code)

    # === Derived properties ===
    @property
    def name(self) -> str:
        return self.type.name

    @property
    def message(self) -> str:
        """Default log line for this trigger."""
        return _DEFAULT_MESSAGES[self.type]

    @property
    def base_exit_code(self) -> Optional[int]:
        """Exit code before any action failure is taken into account."""
        if self.type in _SIGNAL_NUMBERS:
            return SIGNAL_EXIT_OFFSET + _SIGNAL_NUMBERS[self.type]
        if self.type is TriggerType.NATURAL_EXIT:
            return self.exit_code
        return FAILURE_EXIT_CODE

    @property
    def hard_exit(self) -> bool:
        """
        True when the interpreter is already terminating.

        sys.excepthook and atexit run during teardown where SystemExit no
        longer changes the exit status, so os._exit must be used.
        """
        return self.type in (TriggerType.UNCAUGHT_EXCEPTION, TriggerType.NATURAL_EXIT)
