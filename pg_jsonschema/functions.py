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

"""Host-facing functions shaped like the database extension surface.

``json_*`` functions take the instance as JSON text; ``jsonb_*`` functions
take an already parsed instance. In both, the schema may be JSON text or a
parsed schema object/boolean.

Example:
    >>> json_matches_schema('{"maxLength": 5}', '"foo"')
    True
    >>> validate_jsonb_schema('{"type": "object"}', 1)
    ['type: expected object, got integer at <root>']
"""

import logging
from typing import Any, List, Optional, Union

from .compiler import compile_schema
from .config import EngineConfig, engine_config
from .engine import is_valid, validate_detailed
from .engine.cache import PlanCache
from .exceptions import CompileError
from .models.document import JsonValue, parse_json
from .models.schema_node import ValidatorPlan

logger = logging.getLogger(__name__)

JsonText = Union[str, bytes, bytearray]


def _schema_document(schema: Union[JsonText, JsonValue]) -> JsonValue:
    # a schema is an object or a boolean, so a str here is always JSON text
    if isinstance(schema, (str, bytes, bytearray)):
        return parse_json(schema)
    return schema


def _plan_for(schema: Union[JsonText, JsonValue], cache: Optional[PlanCache], config: Optional[EngineConfig]) -> ValidatorPlan:
    document = _schema_document(schema)
    if cache is not None:
        return cache.get_or_compile(document)
    return compile_schema(document, config=config)


def _messages(schema, instance: JsonValue, cache: Optional[PlanCache], config: Optional[EngineConfig]) -> List[str]:
    try:
        plan = _plan_for(schema, cache, config)
    except CompileError as exc:
        logger.debug(f"Schema failed to compile: {exc}")
        return [str(exc)]
    return [error.message for error in validate_detailed(plan, instance)]


def json_matches_schema(schema: Union[JsonText, JsonValue], instance: JsonText, *, cache: Optional[PlanCache] = None) -> bool:
    """Return True if the JSON text *instance* satisfies *schema*.

    Raises:
        CompileError: If the schema cannot be compiled.
        DocumentError: If either argument is not valid JSON text.
    """
    return is_valid(_plan_for(schema, cache, None), parse_json(instance))


def jsonb_matches_schema(schema: Union[JsonText, JsonValue], instance: JsonValue, *, cache: Optional[PlanCache] = None) -> bool:
    """Return True if the parsed *instance* satisfies *schema*.

    Raises:
        CompileError: If the schema cannot be compiled.
    """
    return is_valid(_plan_for(schema, cache, None), instance)


def validate_json_schema(schema: Union[JsonText, JsonValue], instance: JsonText, *, cache: Optional[PlanCache] = None) -> List[str]:
    """Return the error messages for the JSON text *instance*; empty if valid.

    A schema that fails to compile yields its compile error as the only
    message.
    """
    return _messages(schema, parse_json(instance), cache, None)


def validate_jsonb_schema(schema: Union[JsonText, JsonValue], instance: JsonValue, *, cache: Optional[PlanCache] = None) -> List[str]:
    """Return the error messages for the parsed *instance*; empty if valid."""
    return _messages(schema, instance, cache, None)


class SchemaFunctions:
    """The four schema functions bound to one configuration and plan cache.

    Repeated calls with the same schema reuse its compiled plan unless
    caching is disabled in the configuration.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config if config is not None else engine_config
        self.cache: Optional[PlanCache] = PlanCache(config=self.config) if self.config.cache_enabled else None

    def plan(self, schema: Union[JsonText, JsonValue]) -> ValidatorPlan:
        return _plan_for(schema, self.cache, self.config)

    def json_matches_schema(self, schema: Union[JsonText, JsonValue], instance: JsonText) -> bool:
        return is_valid(self.plan(schema), parse_json(instance))

    def jsonb_matches_schema(self, schema: Union[JsonText, JsonValue], instance: JsonValue) -> bool:
        return is_valid(self.plan(schema), instance)

    def validate_json_schema(self, schema: Union[JsonText, JsonValue], instance: JsonText) -> List[str]:
        return _messages(schema, parse_json(instance), self.cache, self.config)

    def validate_jsonb_schema(self, schema: Union[JsonText, JsonValue], instance: JsonValue) -> List[str]:
        return _messages(schema, instance, self.cache, self.config)
