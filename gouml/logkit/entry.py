"""Log entries: a set of fields bound to a logger, logged at a chosen level."""

from __future__ import annotations

import contextlib
import json
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from gouml.logkit.exit_handlers import terminate
from gouml.logkit.levels import Level

__all__ = ["ERROR_KEY", "PanicError", "Entry", "LogWriter"]

ERROR_KEY = "error"

_VERB = re.compile(r"%([-+# 0]*\d*(?:\.\d+)?)([a-zA-Z%])")


class PanicError(Exception):
    """Raised after an entry is logged at panic level."""

    def __init__(self, message: str, entry: "Entry | None" = None) -> None:
        super().__init__(message)
        self.entry = entry


def _text(value: Any) -> str:
    if value is None:
        return "<nil>"
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def _sprint(args: tuple[Any, ...]) -> str:
    """Join operands, with a space between two that are both not strings."""
    parts: list[str] = []
    previous: Any = ""
    for position, arg in enumerate(args):
        if position and not isinstance(arg, str) and not isinstance(previous, str):
            parts.append(" ")
        parts.append(_text(arg))
        previous = arg
    return "".join(parts)


def _sprintln(args: tuple[Any, ...]) -> str:
    """Join operands with single spaces, without a trailing newline."""
    return " ".join(_text(arg) for arg in args)


def _sprintf(fmt: str, args: tuple[Any, ...]) -> str:
    """Expand printf-style verbs such as %s, %v, %d, %q and %f."""
    remaining = list(args)

    def expand(match: re.Match[str]) -> str:
        flags, verb = match.group(1), match.group(2)
        if verb == "%":
            return "%"
        if not remaining:
            return f"%!{verb}(MISSING)"
        value = remaining.pop(0)
        if verb in "vst":
            return ("%" + flags + "s") % _text(value)
        if verb == "q":
            return ("%" + flags + "s") % json.dumps(_text(value), ensure_ascii=False)
        try:
            return ("%" + flags + verb) % value
        except (TypeError, ValueError):
            return f"%!{verb}({type(value).__name__}={_text(value)})"

    result = _VERB.sub(expand, fmt)
    if remaining:
        extra = ", ".join(f"{type(v).__name__}={_text(v)}" for v in remaining)
        result += f"%!(EXTRA {extra})"
    return result


def _logger_lock(logger: Any) -> Any:
    lock = getattr(logger, "_mutex", None)
    return lock if lock is not None else contextlib.nullcontext()


@dataclass
class Entry:
    """Fields bound to a logger; logged when one of the level methods is called."""

    logger: Any
    data: dict[str, Any] = field(default_factory=dict)
    time: datetime | None = None
    level: Level = Level.PANIC
    message: str = ""

    def __str__(self) -> str:
        return self.logger.formatter.format(self)

    def with_error(self, err: BaseException) -> "Entry":
        """Return a new entry with ``err`` under the error key."""
        return self.with_field(ERROR_KEY, err)

    def with_field(self, key: str, value: Any) -> "Entry":
        """Return a new entry with one more field."""
        return self.with_fields({key: value})

    def with_fields(self, fields: dict[str, Any]) -> "Entry":
        """Return a new entry holding these fields as well as the current ones."""
        return Entry(logger=self.logger, data={**self.data, **fields})

    def _enabled(self, level: Level) -> bool:
        return self.logger.level >= level

    def _log(self, level: Level, message: str) -> None:
        entry = Entry(
            logger=self.logger,
            data=self.data,
            time=datetime.now().astimezone(),
            level=level,
            message=message,
        )
        logger = self.logger
        try:
            logger.hooks.fire(level, entry)
        except Exception as exc:  # noqa: BLE001 - a hook failure must not stop logging
            with _logger_lock(logger):
                print(f"Failed to fire hook: {exc}", file=sys.stderr)

        try:
            serialized = logger.formatter.format(entry)
        except Exception as exc:  # noqa: BLE001
            with _logger_lock(logger):
                print(f"Failed to obtain reader, {exc}", file=sys.stderr)
        else:
            with _logger_lock(logger):
                try:
                    logger.out.write(serialized)
                except (OSError, ValueError) as exc:
                    print(f"Failed to write to log, {exc}", file=sys.stderr)

        if level <= Level.PANIC:
            raise PanicError(message, entry)

    def debug(self, *args: Any) -> None:
        if self._enabled(Level.DEBUG):
            self._log(Level.DEBUG, _sprint(args))

    def info(self, *args: Any) -> None:
        if self._enabled(Level.INFO):
            self._log(Level.INFO, _sprint(args))

    def print(self, *args: Any) -> None:
        self.info(*args)

    def warn(self, *args: Any) -> None:
        if self._enabled(Level.WARN):
            self._log(Level.WARN, _sprint(args))

    def warning(self, *args: Any) -> None:
        self.warn(*args)

    def error(self, *args: Any) -> None:
        if self._enabled(Level.ERROR):
            self._log(Level.ERROR, _sprint(args))

    def fatal(self, *args: Any) -> None:
        if self._enabled(Level.FATAL):
            self._log(Level.FATAL, _sprint(args))
        terminate(1)

    def panic(self, *args: Any) -> None:
        message = _sprint(args)
        if self._enabled(Level.PANIC):
            self._log(Level.PANIC, message)
        raise PanicError(message)

    def debugf(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.DEBUG):
            self.debug(_sprintf(fmt, args))

    def infof(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.INFO):
            self.info(_sprintf(fmt, args))

    def printf(self, fmt: str, *args: Any) -> None:
        self.infof(fmt, *args)

    def warnf(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.WARN):
            self.warn(_sprintf(fmt, args))

    def warningf(self, fmt: str, *args: Any) -> None:
        self.warnf(fmt, *args)

    def errorf(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.ERROR):
            self.error(_sprintf(fmt, args))

    def fatalf(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.FATAL):
            self.fatal(_sprintf(fmt, args))
        terminate(1)

    def panicf(self, fmt: str, *args: Any) -> None:
        if self._enabled(Level.PANIC):
            self.panic(_sprintf(fmt, args))

    def debugln(self, *args: Any) -> None:
        if self._enabled(Level.DEBUG):
            self.debug(_sprintln(args))

    def infoln(self, *args: Any) -> None:
        if self._enabled(Level.INFO):
            self.info(_sprintln(args))

    def println(self, *args: Any) -> None:
        self.infoln(*args)

    def warnln(self, *args: Any) -> None:
        if self._enabled(Level.WARN):
            self.warn(_sprintln(args))

    def warningln(self, *args: Any) -> None:
        self.warnln(*args)

    def errorln(self, *args: Any) -> None:
        if self._enabled(Level.ERROR):
            self.error(_sprintln(args))

    def fatalln(self, *args: Any) -> None:
        if self._enabled(Level.FATAL):
            self.fatal(_sprintln(args))
        terminate(1)

    def panicln(self, *args: Any) -> None:
        if self._enabled(Level.PANIC):
            self.panic(_sprintln(args))

    def writer(self, level: Level = Level.INFO) -> "LogWriter":
        """Return a writer whose every line is logged at ``level``."""
        emitters: dict[Level, Callable[..., None]] = {
            Level.DEBUG: self.debug,
            Level.INFO: self.info,
            Level.WARN: self.warn,
            Level.ERROR: self.error,
            Level.FATAL: self.fatal,
            Level.PANIC: self.panic,
        }
        return LogWriter(emitters.get(level, self.print))


class LogWriter:
    """A text stream that logs each line written to it."""

    def __init__(self, emit: Callable[[str], None]) -> None:
        self._emit = emit
        self._pending = ""
        self.closed = False

    def write(self, text: str | bytes) -> int:
        """Log every complete line in ``text``; keep a partial line for later."""
        if self.closed:
            raise ValueError("write to closed log writer")
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8", errors="replace")
        self._pending += text
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self._emit(line.removesuffix("\r"))
        return len(text)

    def close(self) -> None:
        """Log any unfinished line and stop accepting writes."""
        if self.closed:
            return
        self.closed = True
        pending, self._pending = self._pending, ""
        if pending:
            self._emit(pending.removesuffix("\r"))

    def __enter__(self) -> "LogWriter":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()