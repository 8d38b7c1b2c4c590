from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict

from shutdown_manager.models.enums import HookType


@dataclass(init=False)
class HookEvent:
    """
    Base hook event.

    - type: HookType
    - timestamp: auto
    """

    type: HookType
    timestamp: float = field(default_factory=time.time)

    def __init__(self, *, type: HookType):
        self.type = type
        self.timestamp = time.time()

    def to_data(self) -> Dict[str, Any]:
        """Payload without metadata, for logging."""
        return {
            k: v for k, v in self.__dict__.items()
            if k not in ("type", "timestamp")
        }
