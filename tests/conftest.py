"""Shared fixtures for the pg_jsonschema test suite."""

import logging

import pytest

from pg_jsonschema import EngineConfig, compile_schema


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo EngineConfig.set_logging() so caplog keeps working across tests."""
    logger = logging.getLogger("pg_jsonschema")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def compile_plan(config):
    """Compile with a known configuration, independent of PG_JSONSCHEMA_* variables."""
    def _compile(schema, **kwargs):
        kwargs.setdefault("config", config)
        return compile_schema(schema, **kwargs)
    return _compile
