import logging

import pytest

from setup_logging.config import ConfigurationError, Level, LoggingConfig, parse_level, parse_module_levels


def test_levels_are_ordered_by_verbosity():
    assert Level.ERROR > Level.WARN > Level.INFO > Level.DEBUG > Level.TRACE
    assert [lvl.label for lvl in Level] == ["Error", "Warn", "Info", "Debug", "Trace"]
    assert logging.getLevelName(Level.TRACE) == "TRACE"


def test_parse_level_accepts_names_numbers_and_members():
    assert parse_level("debug") == Level.DEBUG
    assert parse_level(" Trace ") == Level.TRACE
    assert parse_level("WARNING") == Level.WARN
    assert parse_level("critical") == Level.ERROR
    assert parse_level(logging.INFO) == Level.INFO
    assert parse_level(15) == Level.DEBUG
    assert parse_level(1) == Level.TRACE
    assert parse_level(Level.ERROR) is Level.ERROR


@pytest.mark.parametrize("bad", ["verbose", "", None, True, 2.5])
def test_parse_level_rejects_garbage(bad):
    with pytest.raises(ConfigurationError):
        parse_level(bad)


def test_parse_module_levels():
    assert parse_module_levels(["app.db=debug", " urllib3 = warn"]) == {"app.db": Level.DEBUG, "urllib3": Level.WARN}
    assert parse_module_levels(None) == {}
    with pytest.raises(ConfigurationError):
        parse_module_levels(["app.db"])
    with pytest.raises(ConfigurationError):
        parse_module_levels(["=debug"])


def test_config_defaults():
    cfg = LoggingConfig()
    assert cfg.logging_level == Level.INFO
    assert cfg.module_levels == {}
    assert cfg.filepath_format == "./log/%Y-%m-%d.log"
