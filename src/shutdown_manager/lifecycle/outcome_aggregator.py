"""
Combines pending action results into a single phase outcome.
"""

import asyncio
from typing import Any, Iterable, List, Optional

from shutdown_manager.models.enums import LogCategory
from shutdown_manager.models.outcome import AggregateOutcome
from shutdown_manager.utils.logger import get_logger

log = get_logger().for_category(LogCategory.SHUTDOWN)


class OutcomeAggregator:
    """
    Waits for every pending result to settle, optionally bounded by a timer.

    - Never fails fast: a failure is recorded and the rest are still awaited.
    - The first failure in settlement order becomes the ANY_FAILED reason.
    - When the timer wins, results still pending are abandoned, not cancelled.
      Their work may continue in the background; the library does not roll
      back side effects.
    """

    async def aggregate(
        self,
        results: Iterable[asyncio.Future],
        timeout_ms: Optional[float] = None
    ) -> AggregateOutcome:
        """
        Args:
            results: Futures returned by ActionExecutor.execute()
            timeout_ms: Positive bound in milliseconds, None waits forever

        Returns:
            AggregateOutcome for the phase
        """
        futures = list(results)
        if not futures:
            return AggregateOutcome.all_succeeded()

        failures: List[Any] = []

        def _observe(future: asyncio.Future) -> None:
            # Also retrieves the exception of abandoned futures
            if future.cancelled():
                failures.append(asyncio.CancelledError())
                return
            error = future.exception()
            if error is not None:
                failures.append(error)

        for future in futures:
            future.add_done_callback(_observe)

        timeout = timeout_ms / 1000.0 if timeout_ms and timeout_ms > 0 else None
        done, pending = await asyncio.wait(futures, timeout=timeout)

        if pending:
            log.warn(
                f"Shutdown phase timed out with {len(pending)} of {len(futures)} results pending",
                timeout_ms=timeout_ms
            )
            return AggregateOutcome.timed_out(timeout_ms)

        if not failures:
            # Done callbacks normally ran before wait() resumed us
            for future in futures:
                _observe(future)

        if failures:
            return AggregateOutcome.any_failed(failures[0])
        return AggregateOutcome.all_succeeded()
