"""
Error types raised or reported by the shutdown subsystem.
"""

from typing import Optional


class ShutdownError(Exception):
    """Base class for shutdown manager errors."""


class AggregationTimeoutError(ShutdownError):
    """A phase did not settle within the configured bound."""

    def __init__(self, timeout_ms: float):
        self.timeout_ms = timeout_ms
        super().__init__(f"Timed out after {timeout_ms:g} ms")


class ConfigurationError(ShutdownError):
    """Configuration file or values could not be used."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = f"{message} ({source})"
        super().__init__(message)
