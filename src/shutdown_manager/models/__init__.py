"""
Models package - Data models for the shutdown sequence
"""

from .enums import (
    ShutdownState,
    TriggerType,
    ActionKind,
    OutcomeKind,
    HookType,
    HookResult,
    LogLevel,
    LogCategory,
)
from .action import Action, detect_action_kind
from .trigger import ShutdownTrigger, SIGNAL_EXIT_OFFSET, FAILURE_EXIT_CODE
from .outcome import AggregateOutcome

__all__ = [
    'ShutdownState',
    'TriggerType',
    'ActionKind',
    'OutcomeKind',
    'HookType',
    'HookResult',
    'LogLevel',
    'LogCategory',
    'Action',
    'detect_action_kind',
    'ShutdownTrigger',
    'SIGNAL_EXIT_OFFSET',
    'FAILURE_EXIT_CODE',
    'AggregateOutcome',
]
