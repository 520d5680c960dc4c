"""Log severity levels."""

from __future__ import annotations

from enum import IntEnum

__all__ = ["Level", "ALL_LEVELS", "parse_level"]


class Level(IntEnum):
    """Severity of a log entry; a lower value is more severe."""

    PANIC = 0
    FATAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5

    def __str__(self) -> str:
        return _NAMES[self]

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_NAMES = {
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warning",
    Level.ERROR: "error",
    Level.FATAL: "fatal",
    Level.PANIC: "panic",
}

_BY_NAME = {
    "panic": Level.PANIC,
    "fatal": Level.FATAL,
    "error": Level.ERROR,
    "warn": Level.WARN,
    "warning": Level.WARN,
    "info": Level.INFO,
    "debug": Level.DEBUG,
}

ALL_LEVELS: tuple[Level, ...] = (
    Level.PANIC,
    Level.FATAL,
    Level.ERROR,
    Level.WARN,
    Level.INFO,
    Level.DEBUG,
)


def parse_level(name: str) -> Level:
    """Return the level named by ``name``, ignoring case."""
    try:
        return _BY_NAME[name.lower()]
    except KeyError:
        raise ValueError(f'not a valid log level: "{name}"') from None