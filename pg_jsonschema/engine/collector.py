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

"""Error collector: normalizes the raw error stream of one validation."""

from typing import Dict, Iterable, List, Set, Tuple

from ..models.validation_error import ValidationError
from ..utils.json_pointer import PathToken


def collect(failures: Iterable[ValidationError]) -> List[ValidationError]:
    """Deduplicate and order failures.

    Failures with the same (instance path, schema path, message) triple are
    reported once. The result is grouped by instance location, locations
    ordered by first appearance; within a location the evaluation order is
    kept.
    """
    seen: Set[Tuple[Tuple[PathToken, ...], Tuple[PathToken, ...], str]] = set()
    first_seen: Dict[Tuple[PathToken, ...], int] = {}
    unique: List[ValidationError] = []

    for failure in failures:
        key = (failure.instance_path, failure.schema_path, failure.message)
        if key in seen:
            continue
        seen.add(key)
        first_seen.setdefault(failure.instance_path, len(first_seen))
        unique.append(failure)

    unique.sort(key=lambda failure: first_seen[failure.instance_path])
    return unique
