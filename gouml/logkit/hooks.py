"""Hooks fired for log entries of chosen levels."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable

from gouml.logkit.levels import Level

__all__ = ["Hook", "LevelHooks"]


class Hook(ABC):
    """Something to run whenever an entry is logged at one of ``levels()``."""

    @abstractmethod
    def levels(self) -> Iterable[Level]:
        """Return the levels this hook wants to see."""

    @abstractmethod
    def fire(self, entry: Any) -> None:
        """Handle ``entry``; raising stops the remaining hooks."""


class LevelHooks(dict):
    """Hooks keyed by the level they fire for."""

    def add(self, hook: Hook) -> None:
        """Register ``hook`` under every level it asks for."""
        for level in hook.levels():
            self.setdefault(level, []).append(hook)

    def fire(self, level: Level, entry: Any) -> None:
        """Fire every hook registered for ``level`` in order."""
        for hook in self.get(level, ()):
            hook.fire(entry)