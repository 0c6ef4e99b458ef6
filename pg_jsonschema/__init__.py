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

"""JSON Schema validation engine.

Compile a schema once into a :class:`ValidatorPlan`, then check any number
of instances against it::

    plan = compile_schema({"type": "string", "maxLength": 5})
    is_valid(plan, "foo")              # True
    validate_detailed(plan, "foobar")  # [ValidationError(...)]
"""

__version__ = "0.1.0"

from .engine import is_valid, validate_detailed
from .compiler import compile_schema
from .config import EngineConfig, engine_config
from .engine.cache import PlanCache
from .functions import (
    SchemaFunctions,
    json_matches_schema,
    jsonb_matches_schema,
    validate_json_schema,
    validate_jsonb_schema,
)
from .exceptions import (
    CompileError,
    ConfigurationError,
    DocumentError,
    InvalidSchemaShape,
    JsonSchemaError,
    UnresolvedReference,
    UnsupportedDraftFeature,
    ValidationExecutionError,
)
from .models import Dialect, SchemaNode, ValidationError, ValidatorPlan, parse_json

__all__ = [
    "__version__",
    "compile_schema",
    "is_valid",
    "validate_detailed",
    "EngineConfig",
    "engine_config",
    "PlanCache",
    "SchemaFunctions",
    "json_matches_schema",
    "jsonb_matches_schema",
    "validate_json_schema",
    "validate_jsonb_schema",
    "Dialect",
    "SchemaNode",
    "ValidatorPlan",
    "ValidationError",
    "parse_json",
    "JsonSchemaError",
    "CompileError",
    "InvalidSchemaShape",
    "UnresolvedReference",
    "UnsupportedDraftFeature",
    "ValidationExecutionError",
    "DocumentError",
    "ConfigurationError",
]
