"""Text and JSON formatters for log entries."""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, MutableMapping

from gouml.logkit.levels import Level
from gouml.logkit.terminal import is_terminal

__all__ = [
    "FIELD_KEY_MSG",
    "FIELD_KEY_LEVEL",
    "FIELD_KEY_TIME",
    "TextFormatter",
    "JSONFormatter",
    "prefix_field_clashes",
]

FIELD_KEY_MSG = "msg"
FIELD_KEY_LEVEL = "level"
FIELD_KEY_TIME = "time"

_NO_COLOR = 0
_RED = 31
_GREEN = 32
_YELLOW = 33
_BLUE = 34
_GRAY = 37

_BASE_TIMESTAMP = time.time()

_PLAIN_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-."
)


def prefix_field_clashes(data: MutableMapping[str, Any]) -> None:
    """Copy user fields named time, msg or level to ``fields.<name>``."""
    for key in (FIELD_KEY_TIME, FIELD_KEY_MSG, FIELD_KEY_LEVEL):
        if key in data:
            data[f"fields.{key}"] = data[key]


def _format_time(moment: datetime, fmt: str | None) -> str:
    if fmt:
        return moment.strftime(fmt)
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def _plain(value: Any) -> str:
    if value is None:
        return "<nil>"
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def _level_color(level: Level) -> int:
    if level == Level.DEBUG:
        return _GRAY
    if level == Level.WARN:
        return _YELLOW
    if level in (Level.ERROR, Level.FATAL, Level.PANIC):
        return _RED
    return _BLUE


@dataclass
class TextFormatter:
    """Formats entries as ``key=value`` pairs, coloured when on a terminal."""

    force_colors: bool = False
    disable_colors: bool = False
    disable_timestamp: bool = False
    full_timestamp: bool = False
    timestamp_format: str | None = None
    disable_sorting: bool = False
    quote_empty_fields: bool = False
    quote_character: str = '"'
    _is_terminal: bool = field(default=False, init=False, repr=False, compare=False)
    _initialised: bool = field(default=False, init=False, repr=False, compare=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def _init(self, entry: Any) -> None:
        if not self.quote_character:
            self.quote_character = '"'
        logger = getattr(entry, "logger", None)
        if logger is not None:
            self._is_terminal = is_terminal(getattr(logger, "out", None))

    def format(self, entry: Any) -> str:
        """Render ``entry`` as one line ending in a newline."""
        keys = list(entry.data)
        if not self.disable_sorting:
            keys.sort()

        prefix_field_clashes(entry.data)

        with self._lock:
            if not self._initialised:
                self._init(entry)
                self._initialised = True

        colored = (self.force_colors or self._is_terminal) and not self.disable_colors
        parts: list[str] = []

        if colored:
            self._print_colored(parts, entry, keys)
        else:
            if not self.disable_timestamp:
                self._append_key_value(
                    parts, FIELD_KEY_TIME, _format_time(entry.time, self.timestamp_format)
                )
            self._append_key_value(parts, FIELD_KEY_LEVEL, str(entry.level))
            if entry.message:
                self._append_key_value(parts, FIELD_KEY_MSG, entry.message)
            for key in keys:
                self._append_key_value(parts, key, entry.data[key])

        parts.append("\n")
        return "".join(parts)

    def _print_colored(self, parts: list[str], entry: Any, keys: list[str]) -> None:
        color = _level_color(entry.level)
        level_text = str(entry.level).upper()[:4]
        prefix = f"\x1b[{color}m{level_text}\x1b[0m"
        message = entry.message

        if self.disable_timestamp:
            parts.append(f"{prefix} {message:<44} ")
        elif not self.full_timestamp:
            elapsed = int(entry.time.timestamp() - _BASE_TIMESTAMP)
            parts.append(f"{prefix}[{elapsed:04d}] {message:<44} ")
        else:
            stamp = _format_time(entry.time, self.timestamp_format)
            parts.append(f"{prefix}[{stamp}] {message:<44} ")

        for key in keys:
            parts.append(f" \x1b[{color}m{key}\x1b[0m=")
            self._append_value(parts, entry.data[key])

    def _needs_quoting(self, text: str) -> bool:
        if self.quote_empty_fields and not text:
            return True
        return any(ch not in _PLAIN_CHARS for ch in text)

    def _append_key_value(self, parts: list[str], key: str, value: Any) -> None:
        parts.append(f"{key}=")
        self._append_value(parts, value)
        parts.append(" ")

    def _append_value(self, parts: list[str], value: Any) -> None:
        if isinstance(value, BaseException):
            value = str(value)
        if isinstance(value, str):
            if self._needs_quoting(value):
                q = self.quote_character
                parts.append(f"{q}{value}{q}")
            else:
                parts.append(value)
        else:
            parts.append(_plain(value))


_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


@dataclass
class JSONFormatter:
    """Formats entries as one JSON object per line."""

    timestamp_format: str | None = None
    disable_timestamp: bool = False
    field_map: dict[str, str] = field(default_factory=dict)

    def _resolve(self, key: str) -> str:
        return self.field_map.get(key, key)

    def format(self, entry: Any) -> str:
        """Render ``entry`` as a JSON object followed by a newline."""
        data: dict[str, Any] = {
            key: str(value) if isinstance(value, BaseException) else value
            for key, value in entry.data.items()
        }
        prefix_field_clashes(data)

        if not self.disable_timestamp:
            data[self._resolve(FIELD_KEY_TIME)] = _format_time(
                entry.time, self.timestamp_format
            )
        data[self._resolve(FIELD_KEY_MSG)] = entry.message
        data[self._resolve(FIELD_KEY_LEVEL)] = str(entry.level)

        try:
            serialized = json.dumps(
                data, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Failed to marshal fields to JSON, {exc}") from exc

        for char, escape in _HTML_ESCAPES.items():
            serialized = serialized.replace(char, escape)
        return serialized + "\n"