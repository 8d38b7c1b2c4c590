"""
Aggregated result of one shutdown phase
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from shutdown_manager.errors import AggregationTimeoutError
from shutdown_manager.models.enums import OutcomeKind


@dataclass(frozen=True)
class AggregateOutcome:
    """
    ALL_SUCCEEDED, ANY_FAILED(reason) or TIMED_OUT(reason).

    For ANY_FAILED the reason is the first failure observed in settlement
    order. For TIMED_OUT it is an AggregationTimeoutError.
    """
    kind: OutcomeKind
    reason: Optional[Any] = None

    @classmethod
    def all_succeeded(cls) -> "AggregateOutcome":
        return cls(OutcomeKind.ALL_SUCCEEDED)

    @classmethod
    def any_failed(cls, reason: Any) -> "AggregateOutcome":
        return cls(OutcomeKind.ANY_FAILED, reason)

    @classmethod
    def timed_out(cls, timeout_ms: float) -> "AggregateOutcome":
        return cls(OutcomeKind.TIMED_OUT, AggregationTimeoutError(timeout_ms))

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.ALL_SUCCEEDED
