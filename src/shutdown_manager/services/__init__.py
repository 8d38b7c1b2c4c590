from .hook_emitter import HookEmitter, HookHandler, HookRegistration

__all__ = [
    "HookEmitter",
    "HookHandler",
    "HookRegistration",
]
