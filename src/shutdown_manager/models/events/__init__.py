from .base import HookEvent
from .hooks import PreShutdownEvent, ShutdownActionExceptionEvent, ShutdownCompleteEvent

__all__ = [
    "HookEvent",
    "PreShutdownEvent",
    "ShutdownActionExceptionEvent",
    "ShutdownCompleteEvent",
]
