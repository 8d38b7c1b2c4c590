"""Events offered to observers during the shutdown sequence"""

from dataclasses import dataclass
from typing import Any, Optional

from shutdown_manager.models.action import Action
from shutdown_manager.models.enums import HookType
from shutdown_manager.models.events.base import HookEvent


@dataclass(init=False)
class PreShutdownEvent(HookEvent):
    """A trigger arrived; handling it suppresses the default log line"""
    trigger_name: str
    payload: Optional[Any]

    def __init__(self, trigger_name: str, payload: Optional[Any] = None):
        """
        Args:
            trigger_name: TriggerType name (SIGINT, UNCAUGHT_EXCEPTION, ...)
            payload: Exception or message carried by the trigger, if any
        """
        super().__init__(type=HookType.PRE_SHUTDOWN)
        self.trigger_name = trigger_name
        self.payload = payload


@dataclass(init=False)
class ShutdownActionExceptionEvent(HookEvent):
    """An action raised synchronously; handling it suppresses the log line"""
    error: BaseException
    action: Action

    def __init__(self, error: BaseException, action: Action):
        super().__init__(type=HookType.SHUTDOWN_ACTION_EXCEPTION)
        self.error = error
        self.action = action


@dataclass(init=False)
class ShutdownCompleteEvent(HookEvent):
    """
    Sequence finished; handling it skips the default log and exit call,
    leaving process termination to the observer.
    """
    errors: Optional[Any]
    exit_code: Optional[int]

    def __init__(self, errors: Optional[Any], exit_code: Optional[int]):
        super().__init__(type=HookType.SHUTDOWN_COMPLETE)
        self.errors = errors
        self.exit_code = exit_code
