"""
shutdown_manager
----------------

Coordinated two-phase shutdown for asyncio processes.

    from shutdown_manager import create_shutdown_manager

    manager = create_shutdown_manager({"timeout_ms": 5000})
    manager.add_shutdown_action(server.shutdown)
    manager.add_final_shutdown_action(db.close)
    manager.install()
"""

from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from .errors import AggregationTimeoutError, ConfigurationError, ShutdownError
from .lifecycle import ProcessSubscription, ShutdownCoordinator
from .managers import ConfigManager
from .models import (
    ActionKind,
    AggregateOutcome,
    HookResult,
    HookType,
    OutcomeKind,
    ShutdownState,
    ShutdownTrigger,
    TriggerType,
)
from .models.settings import DEFAULT_LOGGING_PREFIX, ShutdownSettings
from .services import HookEmitter

_RUNTIME_PARAMS = ("logger", "exit_fn", "hooks")


def create_shutdown_manager(
    params: Optional[Union[Mapping[str, Any], ShutdownSettings]] = None,
    **overrides: Any
) -> ShutdownCoordinator:
    """
    Create a shutdown manager instance.

    Args:
        params: Mapping or ShutdownSettings. Besides the settings fields
            (logging_prefix, timeout_ms, binding flags) a mapping may carry:
              * logger - object exposing log(message); console when absent
              * exit_fn - exit primitive taking the exit code
              * hooks - shared HookEmitter
        **overrides: Same keys, applied over params

    Process bindings are not installed; call install() on the result.

    Raises:
        ConfigurationError: A setting failed validation
    """
    if isinstance(params, ShutdownSettings):
        values = params.model_dump()
    else:
        values = dict(params or {})
    values.update(overrides)

    runtime = {key: values.pop(key, None) for key in _RUNTIME_PARAMS}
    try:
        settings = ShutdownSettings(**values)
    except ValidationError as ex:
        raise ConfigurationError(f"Invalid shutdown manager parameters: {ex}") from ex

    return ShutdownCoordinator.from_settings(settings, **runtime)


__all__ = [
    "create_shutdown_manager",
    "ShutdownCoordinator",
    "ProcessSubscription",
    "ConfigManager",
    "HookEmitter",
    "ShutdownSettings",
    "ShutdownTrigger",
    "AggregateOutcome",
    "ActionKind",
    "HookResult",
    "HookType",
    "OutcomeKind",
    "ShutdownState",
    "TriggerType",
    "ShutdownError",
    "AggregationTimeoutError",
    "ConfigurationError",
    "DEFAULT_LOGGING_PREFIX",
]
