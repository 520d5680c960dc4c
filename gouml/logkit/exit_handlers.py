"""Handlers run before the process terminates on a fatal log entry."""

from __future__ import annotations

import sys
from typing import Callable, NoReturn

__all__ = ["register_exit_handler", "run_exit_handlers", "terminate"]

_handlers: list[Callable[[], object]] = []


def register_exit_handler(handler: Callable[[], object]) -> None:
    """Add a handler that runs when the process terminates through ``terminate``."""
    _handlers.append(handler)


def run_exit_handlers() -> None:
    """Run every registered handler; a failing handler does not stop the rest."""
    for handler in list(_handlers):
        try:
            handler()
        except Exception as exc:  # noqa: BLE001 - every handler must get its turn
            print("Error: exit handler error:", exc, file=sys.stderr)


def terminate(code: int) -> NoReturn:
    """Run all exit handlers and then exit with ``code``."""
    run_exit_handlers()
    sys.exit(code)