from .server_shutdown_action import ServerShutdownAction
from .task_cancellation_action import TaskCancellationAction

__all__ = [
    "ServerShutdownAction",
    "TaskCancellationAction",
]
