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

"""Document model, dialects, compiled plans and validation results."""

from .dialect import Dialect, detect_dialect, parse_dialect
from .document import JsonValue, json_equal, json_type_of, parse_json
from .schema_node import SchemaNode, ValidatorPlan
from .validation_error import ValidationError

__all__ = [
    "Dialect",
    "detect_dialect",
    "parse_dialect",
    "JsonValue",
    "json_equal",
    "json_type_of",
    "parse_json",
    "SchemaNode",
    "ValidatorPlan",
    "ValidationError",
]
