"""Builds the console and file pipelines and registers them with ``logging``."""
from __future__ import annotations

import logging
import sys
from typing import Dict, List, Mapping, Optional, TextIO

from .config import DEFAULT_FILEPATH_FORMAT, ConfigurationError, Level, LevelLike, LoggingConfig
from .formatter import Clock, LineFormatter, Output
from .logutil import get_logger
from .sinks import ConsoleSink, FileSink, LineRenderer


class ModuleLevelFilter(logging.Filter):
    """Minimum level per logger name, falling back to a global minimum.

    An override for ``"app.db"`` also covers ``"app.db.pool"``; the longest
    matching name wins.
    """

    def __init__(self, logging_level: Level, module_levels: Optional[Mapping[str, Level]] = None) -> None:
        super().__init__()
        self.logging_level = logging_level
        self.module_levels: Dict[str, Level] = dict(module_levels or {})

    def threshold(self, name: str) -> Level:
        best: Optional[str] = None
        for module in self.module_levels:
            if name == module or name.startswith(module + "."):
                if best is None or len(module) > len(best):
                    best = module
        return self.module_levels[best] if best is not None else self.logging_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.threshold(record.name)


def _registered_on() -> List[logging.Logger]:
    """Loggers anywhere in the process that already carry a dispatch sink."""
    loggers = [logging.getLogger()]
    loggers += [lg for lg in list(logging.Logger.manager.loggerDict.values()) if isinstance(lg, logging.Logger)]
    return [lg for lg in loggers if any(isinstance(h, (ConsoleSink, FileSink)) for h in lg.handlers)]


def setup_logging(
    logging_level: LevelLike,
    module_levels: Optional[Mapping[str, LevelLike]] = None,
    filepath_format: str = DEFAULT_FILEPATH_FORMAT,
    *,
    logger: Optional[logging.Logger] = None,
    stream: Optional[TextIO] = None,
    clock: Optional[Clock] = None,
) -> None:
    """Register a console sink and a file sink on ``logger`` (the root logger by default).

    - ``logging_level``: minimum level for both sinks; Debug or Trace also
      prints the logger name on every line
    - ``module_levels``: minimum level for specific loggers and their children
    - ``filepath_format``: path of the log file, formatted with the current UTC
      time on every write

    Registration happens once per process: ``ConfigurationError`` is raised if
    the configuration is invalid or if any logger already carries these sinks.
    """
    cfg = LoggingConfig.from_values(logging_level, module_levels, filepath_format)
    target = logger if logger is not None else logging.getLogger()
    registered = _registered_on()
    if registered:
        names = ", ".join(repr(lg.name) for lg in registered)
        raise ConfigurationError(f"logging dispatch already registered on {names}")

    console_stream = stream if stream is not None else sys.stderr
    console_renderer: LineRenderer = LineFormatter(cfg.logging_level, Output.CONSOLE, stream=console_stream, clock=clock)
    console = ConsoleSink(console_renderer, console_stream)
    console.addFilter(ModuleLevelFilter(cfg.logging_level, cfg.module_levels))

    file_renderer: LineRenderer = LineFormatter(cfg.logging_level, Output.FILE, clock=clock)
    file_sink = FileSink(cfg.filepath_format, file_renderer, clock=clock)
    file_sink.addFilter(ModuleLevelFilter(cfg.logging_level, cfg.module_levels))

    # let everything any filter could accept reach the handlers
    target.setLevel(min([cfg.logging_level, *cfg.module_levels.values()]))
    target.addHandler(console)
    target.addHandler(file_sink)

    get_logger().debug(
        "logging configured: level=%s module_levels=%s file=%s",
        cfg.logging_level.label,
        {name: level.label for name, level in cfg.module_levels.items()},
        cfg.filepath_format,
    )


__all__ = ["ConfigurationError", "ModuleLevelFilter", "setup_logging"]
