from __future__ import annotations

import asyncio
import inspect
from typing import Any

from shutdown_manager.lifecycle.shutdown_protocol import IShutdownAction
from shutdown_manager.models.enums import LogCategory
from shutdown_manager.utils.logger import get_logger

log = get_logger().for_category(LogCategory.SHUTDOWN)


class ServerShutdownAction(IShutdownAction):
    """
    Shutdown action for network servers.

    Works with any object exposing ``shutdown()`` (uvicorn.Server) or
    ``close()`` plus ``wait_closed()`` (asyncio.Server). Errors propagate so
    the phase records the failure.
    """

    def __init__(self, server: Any, grace: float = 0.1):
        """
        Args:
            server: Server instance to stop
            grace: Seconds to wait afterwards so the port is released
        """
        self.server = server
        self.grace = grace

    async def __call__(self) -> None:
        name = self.server.__class__.__name__
        log.info(f"Stopping {name}...")

        if hasattr(self.server, "shutdown"):
            if getattr(self.server, "started", True) is False:
                log.debug(f"{name} never started; nothing to stop")
                return
            result = self.server.shutdown()
            if inspect.isawaitable(result):
                await result
        elif hasattr(self.server, "close"):
            self.server.close()
            wait_closed = getattr(self.server, "wait_closed", None)
            if wait_closed is not None:
                await wait_closed()
        else:
            raise TypeError(f"{name} has neither shutdown() nor close()")

        if self.grace > 0:
            await asyncio.sleep(self.grace)
        log.debug(f"{name} stopped")
