#!/usr/bin/env python3
"""
Shutdown manager demo

Registers a few shutdown actions, then lets an exception escape after five
seconds. Press Ctrl+C earlier to see the SIGINT path (exit code 130) instead
of the uncaught exception path (exit code 255).

    python samples/shutdown_demo.py; echo "exit code: $?"
"""

import asyncio
import time
from datetime import datetime

from shutdown_manager import HookResult, HookType, create_shutdown_manager


class DemoLogger:
    """Any object with log(message) can replace the console logger."""

    def log(self, message):
        print(f"{datetime.now():%H:%M:%S.%f} {message}", flush=True)


def wait_then_report(seconds):
    async def _action():
        await asyncio.sleep(seconds)
        print(f"  async action finished after {seconds}s", flush=True)
    return _action


def flush_buffers():
    time.sleep(0.2)
    print("  sync action finished", flush=True)


def close_database():
    print("  final action: database closed", flush=True)


def report_exit(event):
    print(f"  shutdown complete, exit code {event.exit_code}", flush=True)
    return HookResult.NOT_HANDLED


async def main():
    manager = create_shutdown_manager({
        "logger": DemoLogger(),
        "logging_prefix": "[demo]: ",
        "timeout_ms": 10_000,
    })

    manager.add_shutdown_action(wait_then_report(1))
    manager.add_shutdown_action(wait_then_report(3))
    manager.add_shutdown_action(flush_buffers)
    manager.add_final_shutdown_action(close_database)
    manager.on(HookType.SHUTDOWN_COMPLETE, report_exit)

    manager.install()

    print("Running; an error will escape in 5 seconds (Ctrl+C to stop earlier)", flush=True)
    await asyncio.sleep(5)
    raise RuntimeError("demo failure")


if __name__ == "__main__":
    asyncio.run(main())
