"""Console and file sinks.

Each sink is a stdlib ``logging.Handler`` wired to its own ``LineFormatter``.
The file sink appends to a path resolved from a strftime pattern on every
record; write failures are reported on stderr instead of being raised into
the code that logged.
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol, TextIO, runtime_checkable

from ..formatter import TIMESTAMP_FORMAT, Clock, utcnow


@runtime_checkable
class LineRenderer(Protocol):  # pragma: no cover - simple protocol
    def render(self, record: logging.LogRecord) -> str: ...  # noqa: E701


class ConsoleSink(logging.StreamHandler):
    """Writes rendered lines to the console stream (stderr by default)."""

    def __init__(self, renderer: LineRenderer, stream: Optional[TextIO] = None) -> None:
        super().__init__(stream if stream is not None else sys.stderr)
        self.renderer = renderer

    def format(self, record: logging.LogRecord) -> str:
        return self.renderer.render(record)


def write_record_to_file(line: str, filepath_format: str, now: Optional[datetime] = None) -> Path:
    """Append ``line`` to the file named by ``filepath_format``.

    The pattern is formatted with the current UTC time, missing parent
    directories are created, and the file is created if absent. Raises
    ``OSError`` on failure. Returns the path written to.
    """
    path = Path((now or utcnow()).strftime(filepath_format))
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8", newline="\n") as fh:
        fh.write(line + "\n")
    return path


class FileSink(logging.Handler):
    def __init__(
        self,
        filepath_format: str,
        renderer: LineRenderer,
        clock: Optional[Clock] = None,
        fallback: Optional[TextIO] = None,
    ) -> None:
        super().__init__()
        self.filepath_format = filepath_format
        self.renderer = renderer
        self._clock = clock or utcnow
        self._fallback = fallback

    def format(self, record: logging.LogRecord) -> str:
        return self.renderer.render(record)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
        except Exception:  # noqa: BLE001 - stdlib handler convention
            self.handleError(record)
            return
        try:
            write_record_to_file(line, self.filepath_format, self._clock())
        except OSError as exc:
            self.report_unlogged(line, exc)

    def report_unlogged(self, line: str, exc: OSError) -> None:
        stream = self._fallback if self._fallback is not None else sys.stderr
        stream.write(
            f"{self._clock().strftime(TIMESTAMP_FORMAT)} ERROR Writing previous logging message to log file "
            f'failed with "{exc}". Unlogged message:\n"""\n{line}\n"""\n'
        )
        stream.flush()


__all__ = ["ConsoleSink", "FileSink", "LineRenderer", "write_record_to_file"]
