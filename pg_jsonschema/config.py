# Copyright 2025 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration management for the pg_jsonschema engine."""

import os
import logging
from dataclasses import dataclass, replace
from typing import Any

from .exceptions import ConfigurationError
from .models.dialect import Dialect, parse_dialect
from .utils.logging_utils import configure_split_stream_logging

_ENV_PREFIX = "PG_JSONSCHEMA_"
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(_ENV_PREFIX + name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{_ENV_PREFIX}{name} must be a boolean, got '{raw}'")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(_ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{_ENV_PREFIX}{name} must be an integer, got '{raw}'") from exc


@dataclass(frozen=True)
class EngineConfig:
    """Configuration class for schema compilation and validation."""
    default_dialect: str = Dialect.DRAFT2020_12.value
    strict_keywords: bool = False
    validate_formats: bool = True
    check_meta_schema: bool = False
    max_depth: int = 128

    # plan cache
    cache_enabled: bool = True
    max_cache_size: int = 128

    # logging
    log_level: str = "INFO"
    print_level: str = "ERROR"

    def __post_init__(self) -> None:
        parse_dialect(self.default_dialect)
        if self.max_depth < 1:
            raise ConfigurationError(f"max_depth must be positive, got {self.max_depth}")
        if self.max_cache_size < 1:
            raise ConfigurationError(f"max_cache_size must be positive, got {self.max_cache_size}")

    @property
    def dialect(self) -> Dialect:
        return parse_dialect(self.default_dialect)

    @classmethod
    def from_env(cls) -> 'EngineConfig':
        """Create configuration from environment variables."""
        return cls(
            default_dialect=os.getenv(_ENV_PREFIX + 'DEFAULT_DIALECT', Dialect.DRAFT2020_12.value),
            strict_keywords=_env_bool('STRICT_KEYWORDS', False),
            validate_formats=_env_bool('VALIDATE_FORMATS', True),
            check_meta_schema=_env_bool('CHECK_META_SCHEMA', False),
            max_depth=_env_int('MAX_DEPTH', 128),
            cache_enabled=_env_bool('CACHE_ENABLED', True),
            max_cache_size=_env_int('MAX_CACHE_SIZE', 128),
            log_level=os.getenv(_ENV_PREFIX + 'LOG_LEVEL', 'INFO'),
            print_level=os.getenv(_ENV_PREFIX + 'PRINT_LEVEL', 'ERROR'),
        )

    def with_overrides(self, **changes: Any) -> 'EngineConfig':
        return replace(self, **changes)

    def set_logging(self) -> logging.Logger:
        """Setup logging based on configuration."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        stderr_level = getattr(logging, self.print_level.upper(), logging.ERROR)

        formatter = logging.Formatter('%(name)s - %(levelname)s - %(message)s')
        return configure_split_stream_logging(
            'pg_jsonschema', level=level, stderr_level=stderr_level, formatter=formatter
        )


# Environment-derived defaults
engine_config = EngineConfig.from_env()
