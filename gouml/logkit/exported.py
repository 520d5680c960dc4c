"""A shared standard logger and module-level shortcuts to it.

Typical use::

    from gouml.logkit import exported as log

    log.with_fields({"animal": "walrus", "size": 10}).info("A walrus appears")
"""

from __future__ import annotations

from typing import Any

from gouml.logkit.entry import ERROR_KEY, Entry
from gouml.logkit.hooks import Hook
from gouml.logkit.levels import Level
from gouml.logkit.logger import Logger

__all__ = [
    "standard_logger",
    "set_output",
    "set_formatter",
    "set_level",
    "get_level",
    "add_hook",
    "with_error",
    "with_field",
    "with_fields",
    "debug",
    "info",
    "warn",
    "warning",
    "error",
    "fatal",
    "panic",
    "debugf",
    "infof",
    "printf",
    "warnf",
    "warningf",
    "errorf",
    "fatalf",
    "panicf",
]

_std = Logger()


def standard_logger() -> Logger:
    """Return the shared standard logger."""
    return _std


def set_output(stream: Any) -> None:
    """Send the standard logger's output to ``stream``."""
    with _std._mutex:
        _std.out = stream


def set_formatter(formatter: Any) -> None:
    """Set the standard logger's formatter."""
    with _std._mutex:
        _std.formatter = formatter


def set_level(level: Level) -> None:
    """Set the standard logger's level."""
    with _std._mutex:
        _std.level = Level(level)


def get_level() -> Level:
    """Return the standard logger's level."""
    with _std._mutex:
        return _std.level


def add_hook(hook: Hook) -> None:
    """Add a hook to the standard logger."""
    with _std._mutex:
        _std.hooks.add(hook)


def with_error(err: BaseException) -> Entry:
    return _std.with_field(ERROR_KEY, err)


def with_field(key: str, value: Any) -> Entry:
    return _std.with_field(key, value)


def with_fields(fields: dict[str, Any]) -> Entry:
    return _std.with_fields(fields)


def debug(*args: Any) -> None:
    _std.debug(*args)


def info(*args: Any) -> None:
    _std.info(*args)


def warn(*args: Any) -> None:
    _std.warn(*args)


def warning(*args: Any) -> None:
    _std.warning(*args)


def error(*args: Any) -> None:
    _std.error(*args)


def fatal(*args: Any) -> None:
    _std.fatal(*args)


def panic(*args: Any) -> None:
    _std.panic(*args)


def debugf(fmt: str, *args: Any) -> None:
    _std.debugf(fmt, *args)


def infof(fmt: str, *args: Any) -> None:
    _std.infof(fmt, *args)


def printf(fmt: str, *args: Any) -> None:
    _std.printf(fmt, *args)


def warnf(fmt: str, *args: Any) -> None:
    _std.warnf(fmt, *args)


def warningf(fmt: str, *args: Any) -> None:
    _std.warningf(fmt, *args)


def errorf(fmt: str, *args: Any) -> None:
    _std.errorf(fmt, *args)


def fatalf(fmt: str, *args: Any) -> None:
    _std.fatalf(fmt, *args)


def panicf(fmt: str, *args: Any) -> None:
    _std.panicf(fmt, *args)