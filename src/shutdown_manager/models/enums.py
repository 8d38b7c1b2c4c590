"""
Enums for the shutdown state machine
"""

from enum import Enum, auto


class ShutdownState(Enum):
    """
    Coordinator lifecycle

    IDLE: No shutdown has started, triggers are accepted
    RUNNING: Shutdown sequence in progress, further triggers are ignored
    COMPLETED: Exit code computed (terminal)
    """
    IDLE = auto()
    RUNNING = auto()
    COMPLETED = auto()


class TriggerType(Enum):
    """External events that start the shutdown sequence"""
    SIGINT = auto()
    SIGTERM = auto()
    UNCAUGHT_EXCEPTION = auto()
    UNHANDLED_REJECTION = auto()   # Exception reported to the event loop handler
    NATURAL_EXIT = auto()          # Interpreter exiting without a prior trigger


class ActionKind(Enum):
    """How a registered action completes"""
    SYNC = auto()    # Done when the call returns
    ASYNC = auto()   # Returns an awaitable that settles later


class OutcomeKind(Enum):
    """Result of waiting for one phase of pending results"""
    ALL_SUCCEEDED = auto()
    ANY_FAILED = auto()
    TIMED_OUT = auto()


class HookType(Enum):
    """Interception points offered to observers"""
    PRE_SHUTDOWN = "preShutdown"
    SHUTDOWN_ACTION_EXCEPTION = "shutdownActionException"
    SHUTDOWN_COMPLETE = "shutdownComplete"


class HookResult(Enum):
    """Return value of a hook handler"""
    HANDLED = auto()        # Skip the default behaviour for this event
    NOT_HANDLED = auto()


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    SYSTEM = auto()      # Process bindings, exit
    SHUTDOWN = auto()    # Shutdown sequence and action chains
    HOOKS = auto()       # Hook subscription and dispatch
    TASK = auto()        # asyncio task cancellation

    GENERAL = auto()     # Default general category
