"""
Ordered collection of shutdown actions.
"""

from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple

from shutdown_manager.models.action import Action
from shutdown_manager.models.enums import ActionKind


class ActionChain:
    """
    Actions in registration order, no deduplication.

    Snapshot policy: when a shutdown sequence starts, the coordinator freezes
    both chains with ``frozen()``. Actions registered afterwards stay in the
    live chain but are never invoked by that sequence, even if their phase
    has not begun yet.
    """

    def __init__(self, name: str = "primary", actions: Iterable[Action] = ()):
        self.name = name
        self._actions: List[Action] = list(actions)

    def register(
        self,
        callback: Callable[[], Any],
        kind: Optional[ActionKind] = None
    ) -> Action:
        """Append a callable (or a prebuilt Action) to the end of the chain."""
        action = Action.of(callback, kind)
        self._actions.append(action)
        return action

    def snapshot(self) -> Tuple[Action, ...]:
        return tuple(self._actions)

    def frozen(self) -> "ActionChain":
        """Independent copy holding the current actions."""
        return ActionChain(self.name, self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"ActionChain(name={self.name!r}, actions={len(self._actions)})"
