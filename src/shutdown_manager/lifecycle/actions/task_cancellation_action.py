from __future__ import annotations

import asyncio
from typing import Iterable, List, Optional

from shutdown_manager.lifecycle.action_executor import sequence_results
from shutdown_manager.lifecycle.shutdown_coordinator import current_shutdown_task
from shutdown_manager.lifecycle.shutdown_protocol import IShutdownAction
from shutdown_manager.models.enums import LogCategory
from shutdown_manager.utils.logger import get_logger

log = get_logger().for_category(LogCategory.TASK)


class TaskCancellationAction(IShutdownAction):
    """
    Shutdown action for asyncio tasks.

    Cancels and awaits the given tasks. Without an explicit list it cancels
    every task of the running loop except the one executing the shutdown,
    the results of the other shutdown actions and any excluded tasks.
    """

    def __init__(
        self,
        tasks: Optional[Iterable[asyncio.Task]] = None,
        exclude: Optional[Iterable[asyncio.Task]] = None
    ):
        """
        Args:
            tasks: Tasks to cancel; all tasks of the loop when None
            exclude: Tasks that must keep running
        """
        self.tasks: Optional[List[asyncio.Task]] = list(tasks) if tasks is not None else None
        self.exclude: List[asyncio.Task] = list(exclude or [])

    def _collect(self) -> List[asyncio.Task]:
        candidates = self.tasks if self.tasks is not None else list(asyncio.all_tasks())
        excluded = set(self.exclude)
        # The shutdown sequence waits on this action; cancelling it would abort the exit
        for task in (asyncio.current_task(), current_shutdown_task.get()):
            if task is not None:
                excluded.add(task)
        excluded.update(sequence_results.get() or ())
        return [t for t in candidates if t not in excluded]

    async def __call__(self) -> None:
        tasks = self._collect()
        if not tasks:
            log.debug("No tasks to cancel")
            return

        log.info(f"Cancelling {len(tasks)} background task{'s' if len(tasks) != 1 else ''}...")

        for task in tasks:
            if not task.done():
                task.cancel(msg="shutdown")
                log.debug(f"Cancelled task: {task.get_name()}")

        # Either completes or raises CancelledError per task
        await asyncio.gather(*tasks, return_exceptions=True)

        log.debug("All tasks cancelled")
