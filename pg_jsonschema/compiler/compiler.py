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

"""Schema compiler: turns a schema document into a :class:`ValidatorPlan`."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urldefrag

import jsonschema
from jsonschema.exceptions import SchemaError

from ..config import EngineConfig, engine_config
from ..exceptions import InvalidSchemaShape, UnresolvedReference
from ..models.dialect import Dialect, detect_dialect
from ..models.schema_node import ReferenceKey, SchemaNode, ValidatorPlan
from ..utils.json_pointer import split_pointer
from .keywords import compile_definitions, compile_keywords
from .location import Location, normalize_uri, resolve_uri

logger = logging.getLogger(__name__)

_ANCHOR_RE = re.compile(r"^[A-Za-z_][-A-Za-z0-9._]*$")


def _bundled_meta_schemas() -> Dict[str, Any]:
    """Meta-schemas shipped with the jsonschema library, keyed by URI.

    Only drafts whose meta-schemas this engine can compile are offered.
    """
    bundled = {}
    for validator_cls in (jsonschema.Draft4Validator, jsonschema.Draft6Validator, jsonschema.Draft7Validator):
        meta_schema = validator_cls.META_SCHEMA
        uri = meta_schema.get("$id", meta_schema.get("id"))
        bundled[normalize_uri(uri)] = meta_schema
    return bundled


class SchemaCompiler:
    """Compiles one schema document into a reusable validation plan.

    A compiler instance holds per-compilation state; create one per
    :meth:`compile` call (as :func:`compile_schema` does) when compiling
    from several threads.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        resources: Optional[Mapping[str, Any]] = None,
    ):
        """Initialize the compiler.

        Args:
            config: Engine configuration. If None, uses the global config.
            resources: Locally provided schema documents keyed by URI, used
                to resolve references to other resources.
        """
        self.config = config if config is not None else engine_config
        self._external: Dict[str, Any] = _bundled_meta_schemas()
        for uri, document in (resources or {}).items():
            self._external[normalize_uri(uri)] = document
        self._reset()

    def _reset(self) -> None:
        self._resources: Dict[str, Tuple[Any, Location]] = {}
        self._table: Dict[ReferenceKey, SchemaNode] = {}
        self._pending: Dict[ReferenceKey, str] = {}
        self._node_count = 0

    def compile(self, schema: Any, base_uri: str = "") -> ValidatorPlan:
        """Compile a schema document.

        Args:
            schema: The schema document (object or boolean).
            base_uri: Retrieval URI of the document, used to resolve
                relative ``$id``/``$ref`` values.

        Returns:
            A plan that can be validated against any number of instances.

        Raises:
            CompileError: If the schema is malformed, uses unsupported
                features, or contains unresolvable references.
        """
        self._reset()
        dialect = detect_dialect(schema, self.config.dialect)
        if self.config.check_meta_schema:
            self._check_meta_schema(schema, dialect)

        root_uri = normalize_uri(base_uri)
        location = Location.for_resource(root_uri, dialect)
        self._resources[root_uri] = (schema, location)

        root = self._compile_node(schema, location, "")
        self._resolve_pending()

        logger.debug(
            f"Compiled schema '{root_uri or '<anonymous>'}' ({dialect.value}) into "
            f"{self._node_count} nodes, {len(self._table)} identifiers"
        )
        return ValidatorPlan(
            root=root,
            table=MappingProxyType(dict(self._table)),
            dialect=dialect,
            base_uri=root_uri,
            validate_formats=self.config.validate_formats,
            max_depth=self.config.max_depth,
            node_count=self._node_count,
        )

    # ---- used by keyword compilers -----------------------------------------

    def compile_subschema(self, schema: Any, location: Location, keyword: str) -> SchemaNode:
        return self._compile_node(schema, location, keyword)

    def defer_reference(self, target: ReferenceKey, reference: str) -> None:
        """Record a reference to be checked once the whole document is compiled."""
        if target not in self._table:
            self._pending.setdefault(target, reference)

    # ---- internals ---------------------------------------------------------

    def _check_meta_schema(self, schema: Any, dialect: Dialect) -> None:
        validator_cls = jsonschema.validators.validator_for(
            {"$schema": dialect.meta_schema_uri}, default=jsonschema.Draft202012Validator
        )
        try:
            validator_cls.check_schema(schema)
        except SchemaError as exc:
            raise InvalidSchemaShape(
                "$schema", f"schema does not conform to the {dialect.value} meta-schema: {exc.message}"
            ) from exc

    def _compile_node(self, schema: Any, location: Location, keyword: str) -> SchemaNode:
        if location.depth > self.config.max_depth:
            raise InvalidSchemaShape(
                keyword or "schema", f"schema nesting exceeds the maximum depth of {self.config.max_depth}"
            )

        if isinstance(schema, bool):
            node = SchemaNode(location=location.uri, verdict=schema)
            self._register(node, location, [])
            return node

        if not isinstance(schema, Mapping):
            raise InvalidSchemaShape(
                keyword or "schema", f"expected a schema object or boolean, got {type(schema).__name__}"
            )

        location = self._enter_id(schema, location)
        anchors = self._anchors(schema, location)
        compile_definitions(self, schema, location)
        node = SchemaNode(location=location.uri, keywords=compile_keywords(self, schema, location))
        self._register(node, location, anchors)
        return node

    def _enter_id(self, schema: Mapping, location: Location) -> Location:
        dialect = location.dialect
        id_keyword = dialect.id_keyword
        if id_keyword not in schema:
            return location
        if dialect.ref_overrides_siblings and "$ref" in schema:
            return location

        raw = schema[id_keyword]
        if not isinstance(raw, str):
            raise InvalidSchemaShape(id_keyword, f"expected a URI string, got {type(raw).__name__}")
        if raw.startswith("#"):
            # plain-name fragment: an anchor, not a new resource
            return location

        uri, fragment = urldefrag(resolve_uri(location.base_uri, raw))
        if fragment and dialect.at_least(Dialect.DRAFT2019_09):
            raise InvalidSchemaShape(id_keyword, f"'{raw}' must not contain a non-empty fragment")

        new_location = location.enter_resource(uri, detect_dialect(schema, dialect))
        self._resources.setdefault(uri, (schema, new_location))
        return new_location

    def _anchors(self, schema: Mapping, location: Location) -> List[str]:
        dialect = location.dialect
        names = []
        if dialect.at_least(Dialect.DRAFT2019_09):
            for keyword in ("$anchor", "$dynamicAnchor"):
                if keyword not in schema:
                    continue
                name = schema[keyword]
                if not isinstance(name, str) or not _ANCHOR_RE.match(name):
                    raise InvalidSchemaShape(keyword, f"invalid anchor name {name!r}")
                names.append(name)
        else:
            raw = schema.get(dialect.id_keyword)
            if isinstance(raw, str) and "#" in raw and not ("$ref" in schema and dialect.ref_overrides_siblings):
                fragment = raw.split("#", 1)[1]
                if fragment and not fragment.startswith("/"):
                    names.append(fragment)
        return names

    def _register(self, node: SchemaNode, location: Location, anchors: List[str]) -> None:
        self._node_count += 1
        for scope in location.scopes:
            self._table.setdefault(scope, node)
        for name in anchors:
            key = (location.base_uri, name)
            existing = self._table.get(key)
            if existing is not None and existing is not node:
                raise InvalidSchemaShape("$anchor", f"duplicate anchor '{name}' in '{location.base_uri}'")
            self._table[key] = node

    def _resolve_pending(self) -> None:
        while self._pending:
            target, reference = self._pending.popitem()
            if target in self._table:
                continue

            resource, fragment = target
            if resource not in self._resources:
                self._load_external(resource, reference)
                if target in self._table:
                    continue

            if fragment == "" or fragment.startswith("/"):
                located = self._locate(resource, fragment)
                if located is None:
                    raise UnresolvedReference(reference)
                subschema, location = located
                logger.debug(f"Compiling deferred reference target '{resource}#{fragment}'")
                self._compile_node(subschema, location, "$ref")

            if target not in self._table:
                raise UnresolvedReference(reference)

    def _load_external(self, resource: str, reference: str) -> None:
        document = self._external.get(resource)
        if document is None:
            raise UnresolvedReference(reference)
        logger.debug(f"Compiling local resource '{resource}'")
        location = Location.for_resource(resource, detect_dialect(document, self.config.dialect))
        self._resources[resource] = (document, location)
        self._compile_node(document, location, "$ref")

    def _locate(self, resource: str, pointer: str) -> Optional[Tuple[Any, Location]]:
        """Walk a JSON pointer inside a known resource document."""
        document, location = self._resources[resource]
        try:
            tokens = split_pointer(pointer)
        except ValueError:
            return None

        current = document
        for index, token in enumerate(tokens):
            if index > 0 and isinstance(current, Mapping):
                location = self._enter_id(current, location)
            if isinstance(current, Mapping):
                if token not in current:
                    return None
                current = current[token]
            elif isinstance(current, (list, tuple)):
                if not token.isdigit() or int(token) >= len(current):
                    return None
                current = current[int(token)]
            else:
                return None
            location = location.child(token)
        return current, location


def compile_schema(
    schema: Any,
    *,
    config: Optional[EngineConfig] = None,
    resources: Optional[Mapping[str, Any]] = None,
    base_uri: str = "",
) -> ValidatorPlan:
    """Compile a schema document into a :class:`ValidatorPlan`.

    Raises:
        CompileError: If the schema cannot be compiled.
    """
    return SchemaCompiler(config=config, resources=resources).compile(schema, base_uri=base_uri)
