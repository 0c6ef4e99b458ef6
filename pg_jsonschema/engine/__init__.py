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

"""Validator executor, format checks and error collection.

The plan cache lives in :mod:`pg_jsonschema.engine.cache`.
"""

from .collector import collect
from .executor import is_valid, iter_errors, validate_detailed
from .formats import check_format, is_known_format

__all__ = [
    "check_format",
    "collect",
    "is_known_format",
    "is_valid",
    "iter_errors",
    "validate_detailed",
]
