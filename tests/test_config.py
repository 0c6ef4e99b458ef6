"""Tests for engine configuration and logging setup."""

import logging

import pytest

from pg_jsonschema import EngineConfig
from pg_jsonschema.exceptions import ConfigurationError
from pg_jsonschema.models.dialect import Dialect


def test_defaults():
    config = EngineConfig()
    assert config.dialect is Dialect.DRAFT2020_12
    assert config.strict_keywords is False
    assert config.validate_formats is True
    assert config.check_meta_schema is False
    assert config.max_depth == 128
    assert config.cache_enabled is True
    assert config.max_cache_size == 128


def test_from_env(monkeypatch):
    monkeypatch.setenv("PG_JSONSCHEMA_DEFAULT_DIALECT", "draft7")
    monkeypatch.setenv("PG_JSONSCHEMA_STRICT_KEYWORDS", "yes")
    monkeypatch.setenv("PG_JSONSCHEMA_VALIDATE_FORMATS", "off")
    monkeypatch.setenv("PG_JSONSCHEMA_MAX_DEPTH", "64")
    monkeypatch.setenv("PG_JSONSCHEMA_LOG_LEVEL", "DEBUG")
    config = EngineConfig.from_env()
    assert config.dialect is Dialect.DRAFT7
    assert config.strict_keywords is True
    assert config.validate_formats is False
    assert config.max_depth == 64
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name, value",
    [
        ("PG_JSONSCHEMA_STRICT_KEYWORDS", "maybe"),
        ("PG_JSONSCHEMA_MAX_DEPTH", "deep"),
        ("PG_JSONSCHEMA_MAX_CACHE_SIZE", "0"),
        ("PG_JSONSCHEMA_DEFAULT_DIALECT", "draft-99"),
    ],
)
def test_invalid_env_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        EngineConfig.from_env()


def test_with_overrides_validates():
    config = EngineConfig().with_overrides(strict_keywords=True)
    assert config.strict_keywords is True
    with pytest.raises(ConfigurationError):
        config.with_overrides(max_depth=0)
    with pytest.raises(ConfigurationError):
        config.with_overrides(default_dialect="latest")


def test_set_logging_splits_streams():
    logger = EngineConfig(log_level="DEBUG", print_level="WARNING").set_logging()
    assert logger.name == "pg_jsonschema"
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    stdout_handler, stderr_handler = logger.handlers
    assert stderr_handler.level == logging.WARNING
    info = logging.LogRecord("pg_jsonschema", logging.INFO, __file__, 1, "m", None, None)
    warning = logging.LogRecord("pg_jsonschema", logging.WARNING, __file__, 1, "m", None, None)
    assert stdout_handler.filter(info)
    assert not stdout_handler.filter(warning)


def test_set_logging_is_idempotent():
    config = EngineConfig()
    config.set_logging()
    logger = config.set_logging()
    assert len(logger.handlers) == 2
