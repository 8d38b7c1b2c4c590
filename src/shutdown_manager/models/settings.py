"""
Pydantic model for shutdown manager configuration.

Values come from YAML (see ConfigManager) or from keyword arguments passed to
create_shutdown_manager().
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shutdown_manager.models.enums import LogLevel

DEFAULT_LOGGING_PREFIX = "[ShutdownManager]: "


class ShutdownSettings(BaseModel):
    """Validated shutdown manager settings."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    logging_prefix: str = Field(
        DEFAULT_LOGGING_PREFIX,
        description="String prepended to every log line"
    )
    timeout_ms: Optional[float] = Field(
        None,
        description="Bound for each aggregation phase in milliseconds; unset or non-positive waits forever"
    )
    log_level: LogLevel = Field(
        LogLevel.INFO,
        description="Minimum level of the default console logger"
    )
    use_colors: bool = Field(True, description="ANSI colours in console output")

    install_signals: bool = True
    handle_uncaught_exceptions: bool = True
    handle_unhandled_rejections: bool = True
    handle_natural_exit: bool = True
    handle_thread_exceptions: bool = False

    @field_validator("timeout_ms")
    @classmethod
    def _normalize_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is None or value <= 0:
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _parse_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return LogLevel[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown log level: {value}")
        return value
