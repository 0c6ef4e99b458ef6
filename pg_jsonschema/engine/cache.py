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

"""Caller-owned LRU cache of compiled plans keyed by schema content."""

import hashlib
import logging
import threading
from collections import OrderedDict
from typing import Any, Mapping, Optional

from ..compiler import compile_schema
from ..config import EngineConfig, engine_config
from ..models.document import dump_json
from ..models.schema_node import ValidatorPlan

logger = logging.getLogger(__name__)


def schema_key(schema: Any, base_uri: str = "", resources: Optional[Mapping[str, Any]] = None) -> str:
    """Content hash of a schema and everything that affects its compilation."""
    digest = hashlib.sha256()
    digest.update(base_uri.encode("utf-8"))
    digest.update(b"\0")
    digest.update(dump_json(schema, sort_keys=True).encode("utf-8"))
    if resources:
        digest.update(b"\0")
        digest.update(dump_json(dict(resources), sort_keys=True).encode("utf-8"))
    return digest.hexdigest()


class PlanCache:
    """Bounded cache of :class:`ValidatorPlan` objects.

    Plans are immutable, so one cached plan may be used from any number of
    threads. Compilation failures are never cached.
    """

    def __init__(self, max_size: Optional[int] = None, config: Optional[EngineConfig] = None):
        self.config = config if config is not None else engine_config
        self.max_size = max_size if max_size is not None else self.config.max_cache_size
        if self.max_size < 1:
            raise ValueError(f"max_size must be positive, got {self.max_size}")
        self._plans: "OrderedDict[str, ValidatorPlan]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._plans)

    def get_or_compile(
        self,
        schema: Any,
        *,
        resources: Optional[Mapping[str, Any]] = None,
        base_uri: str = "",
    ) -> ValidatorPlan:
        """Return the cached plan for *schema*, compiling it on a miss.

        Raises:
            CompileError: If the schema cannot be compiled.
        """
        key = schema_key(schema, base_uri, resources)
        with self._lock:
            plan = self._plans.get(key)
            if plan is not None:
                self._plans.move_to_end(key)
                self.hits += 1
                return plan
            self.misses += 1

        # Compile outside the lock; a concurrent miss on the same schema
        # compiles twice and keeps the later plan.
        plan = compile_schema(schema, config=self.config, resources=resources, base_uri=base_uri)

        with self._lock:
            self._plans[key] = plan
            self._plans.move_to_end(key)
            while len(self._plans) > self.max_size:
                evicted, _ = self._plans.popitem(last=False)
                logger.debug(f"Evicted plan {evicted[:12]} from cache")
        return plan

    def clear(self) -> None:
        """Drop every cached plan. Counters are kept."""
        with self._lock:
            self._plans.clear()
