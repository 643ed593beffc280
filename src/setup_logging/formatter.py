"""Line formatting for the console and file sinks.

Formats records to personal preferences:

- Messages with line breaks are indented so continuation lines align with the
  message column.
- Timestamps are only printed if they changed since the previous line;
  otherwise the timestamp is blanked out with spaces.
- If the logging level is Debug or Trace the logger name is printed.

Console only:

- A message starting with ``"\\r"`` overwrites the previous console line.
- Severity labels are colour coded.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Optional, TextIO

import regex
from rich.color import ColorSystem
from rich.style import Style

from .config import Level

TIMESTAMP_FORMAT = "[%Y-%m-%dT%H:%M:%S]"
OVERWRITE_MARKER = "\r"
# Width reserved for " LEVEL " after the timestamp and module tag
LEVEL_FIELD_WIDTH = 7

_FIRST_GRAPHEME = regex.compile(r"\X")

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


_CONSOLE_COLOURS: Dict[Level, Style] = {
    Level.ERROR: Style(color="bright_red"),
    Level.WARN: Style(color="bright_yellow"),
    Level.INFO: Style(color="green"),
    Level.DEBUG: Style(color="white"),
    Level.TRACE: Style(color="white"),
}


class Output(Enum):
    CONSOLE = "console"
    FILE = "file"

    @property
    def colours(self) -> Optional[Dict[Level, Style]]:
        return _CONSOLE_COLOURS if self is Output.CONSOLE else None

    @property
    def overwrites(self) -> bool:
        # files have no cursor, so "\r" never merges lines there
        return self is Output.CONSOLE


@dataclass
class FormatterState:
    line_previous_len: int = 0
    # timestamp in effect for the previous new line; kept across overwrites
    line_previous_timestamp: str = ""
    # timestamp computed for the previous record, printed or not
    timestamp_previous: str = ""


def split_overwrite_marker(message: str) -> tuple[bool, str]:
    """Strip a leading ``"\\r"`` grapheme. Returns (had_marker, remaining message).

    Works on extended grapheme clusters, so ``"\\r\\n"`` is not a marker and
    combining sequences after the marker stay intact.
    """
    first = _FIRST_GRAPHEME.match(message)
    if first is None or first.group() != OVERWRITE_MARKER:
        return False, message
    return True, message[first.end():]


class LineFormatter(logging.Formatter):
    """Stateful formatter for one sink.

    One instance per sink; ``render`` serializes on the instance lock so the
    state always reflects the most recently rendered record. For the console
    the erase sequence of an overwrite is written straight to ``stream`` before
    the line itself is returned.
    """

    def __init__(
        self,
        logging_level: Level,
        output: Output,
        stream: Optional[TextIO] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__()
        if output.overwrites and stream is None:
            raise ValueError("console formatter needs the stream it erases lines on")
        self.logging_level = logging_level
        self.output = output
        self.state = FormatterState()
        self._stream = stream
        self._clock = clock or utcnow
        self._lock = threading.Lock()

    def format(self, record: logging.LogRecord) -> str:
        return self.render(record)

    def render(self, record: logging.LogRecord) -> str:
        content = self._message_content(record)
        with self._lock:
            return self._render(record, content)

    def _message_content(self, record: logging.LogRecord) -> str:
        parts = [record.getMessage()]
        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            parts.append(record.exc_text)
        if record.stack_info:
            parts.append(self.formatStack(record.stack_info))
        return "\n".join(parts)

    def _render(self, record: logging.LogRecord, content: str) -> str:
        state = self.state
        timestamp_current = self._clock().strftime(TIMESTAMP_FORMAT)

        overwrite_line = False
        marked, content = split_overwrite_marker(content)
        if marked and self.output.overwrites:
            overwrite_line = True
            # cursor up one line, blank it, back to line start
            self._stream.write(f"\x1b[A{' ' * state.line_previous_len}\r")

        if not overwrite_line:
            state.line_previous_timestamp = state.timestamp_previous
        if state.line_previous_timestamp == timestamp_current:
            timestamp = " " * len(state.line_previous_timestamp)
        else:
            timestamp = timestamp_current

        line = timestamp
        if self.logging_level <= Level.DEBUG:
            line += f" [{record.name}]"

        content = content.replace("\n", "\n" + " " * (len(line) + LEVEL_FIELD_WIDTH))

        line += " " + self._level_field(Level.from_levelno(record.levelno))
        line += " " + content

        if self.output is Output.CONSOLE:
            state.line_previous_len = len(line)
        state.timestamp_previous = timestamp_current
        return line

    def _level_field(self, level: Level) -> str:
        label = f"{level.label:<5}"
        colours = self.output.colours
        if colours is None:
            return label
        return colours[level].render(label, color_system=ColorSystem.STANDARD)


__all__ = [
    "Clock",
    "FormatterState",
    "LEVEL_FIELD_WIDTH",
    "LineFormatter",
    "OVERWRITE_MARKER",
    "Output",
    "TIMESTAMP_FORMAT",
    "split_overwrite_marker",
    "utcnow",
]
