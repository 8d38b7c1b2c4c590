"""
Lifecycle subsystem
-------------------

Exports the public API for:
- the two-phase shutdown sequence
- process signal / exception bindings
- ready-made shutdown actions

External code should import from:
    from shutdown_manager.lifecycle import ShutdownCoordinator
    from shutdown_manager.lifecycle.actions import TaskCancellationAction
"""

from .action_chain import ActionChain
from .action_executor import ActionExecutor, PendingResult, sequence_results
from .outcome_aggregator import OutcomeAggregator
from .process_subscription import ProcessSubscription, terminate_process
from .shutdown_coordinator import ShutdownCoordinator, current_shutdown_task
from .shutdown_protocol import IShutdownAction
from . import actions

__all__ = [
    "ActionChain",
    "ActionExecutor",
    "PendingResult",
    "sequence_results",
    "OutcomeAggregator",
    "ProcessSubscription",
    "terminate_process",
    "ShutdownCoordinator",
    "current_shutdown_task",
    "IShutdownAction",
    "actions",
]
