import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, Mapping, Optional, Union


class ConfigurationError(RuntimeError):
    """Raised when the logging dispatch cannot be set up as requested."""


class Level(IntEnum):
    # Values follow the stdlib numbering; lower means more verbose.
    ERROR = logging.ERROR
    WARN = logging.WARNING
    INFO = logging.INFO
    DEBUG = logging.DEBUG
    TRACE = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_levelno(cls, levelno: int) -> "Level":
        """Map any stdlib numeric level onto the closest severity at or below it."""
        for level in (cls.ERROR, cls.WARN, cls.INFO, cls.DEBUG):
            if levelno >= level:
                return level
        return cls.TRACE


logging.addLevelName(Level.TRACE, "TRACE")

LevelLike = Union[Level, int, str]

# Accepted spellings besides the enumeration names
_ALIASES = {
    "WARNING": Level.WARN,
    "CRITICAL": Level.ERROR,
    "FATAL": Level.ERROR,
}

DEFAULT_FILEPATH_FORMAT = "./log/%Y-%m-%d.log"


def parse_level(value: LevelLike) -> Level:
    if isinstance(value, Level):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Level.from_levelno(value)
    if isinstance(value, str):
        key = value.strip().upper()
        if key in Level.__members__:
            return Level[key]
        if key in _ALIASES:
            return _ALIASES[key]
    raise ConfigurationError(f"unknown logging level: {value!r}")


def parse_module_levels(specs: Optional[Iterable[str]]) -> Dict[str, Level]:
    """Parse ``name=level`` pairs (as given on the command line) into a mapping."""
    module_levels: Dict[str, Level] = {}
    for spec in specs or []:
        name, sep, level = spec.partition("=")
        if not sep or not name.strip():
            raise ConfigurationError(f"module level must look like NAME=LEVEL, got {spec!r}")
        module_levels[name.strip()] = parse_level(level)
    return module_levels


@dataclass
class LoggingConfig:
    # Minimum level for every sink; Debug or Trace also turns on the module tag
    logging_level: Level = Level.INFO
    # Per-module minimum levels, keyed by logger name
    module_levels: Dict[str, Level] = field(default_factory=dict)
    # strftime pattern for the log file, resolved with UTC time on every write
    filepath_format: str = DEFAULT_FILEPATH_FORMAT

    @classmethod
    def from_values(
        cls,
        logging_level: LevelLike = Level.INFO,
        module_levels: Optional[Mapping[str, LevelLike]] = None,
        filepath_format: str = DEFAULT_FILEPATH_FORMAT,
    ) -> "LoggingConfig":
        if not filepath_format:
            raise ConfigurationError("filepath_format must not be empty")
        return cls(
            logging_level=parse_level(logging_level),
            module_levels={name: parse_level(level) for name, level in (module_levels or {}).items()},
            filepath_format=filepath_format,
        )

    def apply(self, **kwargs) -> None:
        from .dispatch import setup_logging

        setup_logging(self.logging_level, self.module_levels, self.filepath_format, **kwargs)


__all__ = [
    "ConfigurationError",
    "DEFAULT_FILEPATH_FORMAT",
    "Level",
    "LevelLike",
    "LoggingConfig",
    "parse_level",
    "parse_module_levels",
]
