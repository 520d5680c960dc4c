"""A logger: output stream, formatter, hooks and a minimum level."""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass, field
from typing import Any

from gouml.logkit.entry import Entry, LogWriter
from gouml.logkit.exit_handlers import terminate
from gouml.logkit.formatters import TextFormatter
from gouml.logkit.hooks import LevelHooks
from gouml.logkit.levels import Level

__all__ = ["Logger"]


class _MutexWrap:
    """A lock that can be switched off."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.disabled = False

    def __enter__(self) -> "_MutexWrap":
        if not self.disabled:
            self._lock.acquire()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if not self.disabled and self._lock.locked():
            self._lock.release()


@dataclass
class Logger:
    """Writes formatted entries to ``out`` when their level is enabled."""

    out: Any = field(default_factory=lambda: sys.stderr)
    hooks: LevelHooks = field(default_factory=LevelHooks)
    formatter: Any = field(default_factory=TextFormatter)
    level: Level = Level.INFO
    _mutex: _MutexWrap = field(
        default_factory=_MutexWrap, init=False, repr=False, compare=False
    )

    def _entry(self) -> Entry:
        return Entry(self)

    def with_field(self, key: str, value: Any) -> Entry:
        """Return an entry carrying one field."""
        return self._entry().with_field(key, value)

    def with_fields(self, fields: dict[str, Any]) -> Entry:
        """Return an entry carrying these fields."""
        return self._entry().with_fields(fields)

    def with_error(self, err: BaseException) -> Entry:
        """Return an entry carrying ``err`` under the error key."""
        return self._entry().with_error(err)

    def _enabled(self, level: Level) -> bool:
        return self.level >= level

    def debug(self, *args: Any) -> None:
        if self._enabled(Level.DEBUG):
            self._entry().debug(*args)

    def info(self, *args: Any) -> None:
        if self._enabled(Level.INFO):
            self._entry().info(*args)

    def print(self, *args: Any) -> None:
        self._entry().info(*args)

    def warn(self, *args: Any) -> None:
        if self._enabled(Level.WARN):
            self._entry().warn(*args)

    def warning(self, *args: Any) -> None:
        self.warn(*args)

    def error(self, *args: Any) -> None:
        if self._enabled(Level.ERROR):
            self._entry().error(*args)

    def fatal(self, *args: Any) -> None:
        if self._enabled(Level.FATAL):
            self._entry().fatal(*args)
        terminate(1)

    def panic(self, *args: Any) -> None:
        if self._enabled(Level.PANIC):
            self._entry().panic(*args)

    def debugf(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.DEBUG):
            self._entry().debugf(fmt, *args)

    def infof(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.INFO):
            self._entry().infof(fmt, *args)

    def printf(self, fmt: str, *args: Any) -> None:
        self._entry().printf(fmt, *args)

    def warnf(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.WARN):
            self._entry().warnf(fmt, *args)

    def warningf(self, fmt: str, *args: Any) -> None:
        self.warnf(fmt, *args)

    def errorf(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.ERROR):
            self._entry().errorf(fmt, *args)

    def fatalf(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.FATAL):
            self._entry().fatalf(fmt, *args)
        terminate(1)

    def panicf(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.PANIC):
            self._entry().panicf(fmt, *args)

    def debugln(self, *args: Any) -> None:
        if self._enabled(Level.DEBUG):
            self._entry().debugln(*args)

    def infoln(self, *args: Any) -> None:
        if self._enabled(Level.INFO):
            self._entry().infoln(*args)

    def println(self, *args: Any) -> None:
        self._entry().println(*args)

    def warnln(self, *args: Any) -> None:
        if self._enabled(Level.WARN):
            self._entry().warnln(*args)

    def warningln(self, *args: Any) -> None:
        self.warnln(*args)

    def errorln(self, *args: Any) -> None:
        if self._enabled(Level.ERROR):
            self._entry().errorln(*args)

    def fatalln(self, *args: Any) -> None:
        if self._enabled(Level.FATAL):
            self._entry().fatalln(*args)
        terminate(1)

    def panicln(self, *args: Any) -> None:
        if self._enabled(Level.PANIC):
            self._entry().panicln(*args)

    def set_no_lock(self) -> None:
        """Stop serialising writes, for outputs that are safe to share."""
        self._mutex.disabled = True

    def writer(self, level: Level = Level.INFO) -> LogWriter:
        """Return a writer whose every line is logged at ``level``."""
        return self._entry().writer(level)