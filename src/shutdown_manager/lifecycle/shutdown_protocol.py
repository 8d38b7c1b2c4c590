"""
Shutdown action protocol.

Any zero-argument callable can be registered as a shutdown action. Classes
that bundle cleanup state implement IShutdownAction so they can be passed
to add_shutdown_action() directly.
"""

from typing import Any, Awaitable, Optional, Protocol, runtime_checkable


@runtime_checkable
class IShutdownAction(Protocol):
    """
    Protocol for objects that take part in the shutdown sequence.

    Example:
        class FlushQueueAction:
            def __init__(self, queue):
                self.queue = queue

            async def __call__(self) -> None:
                await self.queue.join()

        coordinator.add_shutdown_action(FlushQueueAction(queue))
    """

    def __call__(self) -> Optional[Awaitable[Any]]:
        """
        Called once during coordinated shutdown.

        Return None when the work is done synchronously, or an awaitable
        that settles when the cleanup finishes.
        """
        ...
