"""
Registered shutdown action
"""

from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from shutdown_manager.models.enums import ActionKind


def detect_action_kind(callback: Callable[[], Any]) -> ActionKind:
    """
    Infer the action kind from the callable itself.

    Coroutine functions, partials wrapping them and objects with an
    ``async def __call__`` are ASYNC. Everything else is SYNC; a SYNC action
    may still return an awaitable, which the executor honours.
    """
    target = callback
    while isinstance(target, functools.partial):
        target = target.func

    if inspect.iscoroutinefunction(target):
        return ActionKind.ASYNC
    call = getattr(target, "__call__", None)
    if call is not None and inspect.iscoroutinefunction(call):
        return ActionKind.ASYNC
    return ActionKind.SYNC


def _describe(callback: Callable[[], Any]) -> str:
    name = getattr(callback, "__qualname__", None) or getattr(callback, "__name__", None)
    if name:
        return name
    if isinstance(callback, functools.partial):
        return f"partial({_describe(callback.func)})"
    return callback.__class__.__name__


@dataclass(frozen=True, eq=False)
class Action:
    """
    Zero-argument cleanup callable tagged with its completion kind.

    Equality is identity: registering the same function twice yields two
    independent actions.
    """
    callback: Callable[[], Any]
    kind: ActionKind
    name: str = field(default="")

    @classmethod
    def of(cls, callback: Callable[[], Any], kind: Optional[ActionKind] = None) -> "Action":
        if isinstance(callback, Action):
            return callback
        return cls(
            callback=callback,
            kind=kind or detect_action_kind(callback),
            name=_describe(callback),
        )

    def __call__(self) -> Any:
        return self.callback()
