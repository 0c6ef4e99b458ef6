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

"""Per-keyword compilers.

Each entry in :data:`KEYWORDS` turns the keyword (or keyword group) of one
schema object into zero or more constraint objects from
:mod:`pg_jsonschema.models.schema_node`. Keywords that only make sense
together (``properties``/``patternProperties``/``additionalProperties``,
``prefixItems``/``items``/``additionalItems``, ``if``/``then``/``else``,
``contains``/``minContains``/``maxContains``) share one group and compile
once per schema object.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Pattern, Tuple

from ..engine.formats import is_known_format
from ..exceptions import InvalidSchemaShape, UnsupportedDraftFeature
from ..models.dialect import Dialect
from ..models.document import JSON_TYPE_NAMES
from ..models.schema_node import (
    AllOfKeyword,
    AnyOfKeyword,
    ConditionalKeyword,
    ConstKeyword,
    ContainsKeyword,
    DependentRequiredKeyword,
    DependentSchemasKeyword,
    EnumKeyword,
    FormatKeyword,
    ItemsKeyword,
    Keyword,
    MultipleOfKeyword,
    NotKeyword,
    NumericBound,
    OneOfKeyword,
    PatternKeyword,
    PropertiesKeyword,
    PropertyNamesKeyword,
    RefKeyword,
    RequiredKeyword,
    SchemaNode,
    SizeBound,
    TypeKeyword,
    UniqueItemsKeyword,
)
from ..utils.numbers import coerce_non_negative_int, is_number, to_decimal
from .location import Location, split_reference

if TYPE_CHECKING:
    from .compiler import SchemaCompiler

KeywordCompiler = Callable[["SchemaCompiler", Mapping, Location], Iterable[Keyword]]

# Evaluation phases: assertions on the value itself, then in-place
# applicators, then applicators that descend into children.
ASSERTION = 0
IN_PLACE = 1
CHILDREN = 2


@dataclass(frozen=True)
class KeywordSpec:
    compile: KeywordCompiler
    group: str
    phase: int = ASSERTION
    since: Dialect = Dialect.DRAFT4
    until: Dialect = Dialect.DRAFT2020_12

    def applies_to(self, dialect: Dialect) -> bool:
        return dialect.at_least(self.since) and dialect.at_most(self.until)


# ---- shape helpers ---------------------------------------------------------


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _number(keyword: str, value: Any) -> Decimal:
    if not is_number(value):
        raise InvalidSchemaShape(keyword, f"expected a number, got {_kind(value)}")
    dec = to_decimal(value)
    if not dec.is_finite():
        raise InvalidSchemaShape(keyword, f"expected a finite number, got {value}")
    return dec


def _non_negative_int(keyword: str, value: Any) -> int:
    number = coerce_non_negative_int(value)
    if number is None:
        raise InvalidSchemaShape(keyword, f"expected a non-negative integer, got {value!r}")
    return number


def _string(keyword: str, value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidSchemaShape(keyword, f"expected a string, got {_kind(value)}")
    return value


def _string_array(keyword: str, value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise InvalidSchemaShape(keyword, f"expected an array of strings, got {_kind(value)}")
    if len(set(value)) != len(value):
        raise InvalidSchemaShape(keyword, "array items must be unique")
    return tuple(value)


def _mapping(keyword: str, value: Any) -> Mapping:
    if not isinstance(value, Mapping):
        raise InvalidSchemaShape(keyword, f"expected an object, got {_kind(value)}")
    return value


def _ecma_anchors(source: str) -> str:
    """Make an unescaped ``$`` outside a character class match only at the end of input."""
    out = []
    escaped = in_class = False
    for char in source:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif in_class:
            in_class = char != "]"
        elif char == "[":
            in_class = True
        elif char == "$":
            out.append(r"\Z")
            continue
        out.append(char)
    return "".join(out)


def compile_regex(keyword: str, source: str) -> Pattern[str]:
    """Compile an ECMA-262 style pattern: ASCII ``\\d``/``\\w`` and end-of-input ``$``."""
    try:
        return re.compile(_ecma_anchors(source), re.ASCII)
    except re.error as exc:
        raise InvalidSchemaShape(keyword, f"invalid regular expression {source!r}: {exc}") from exc


def _subschema(compiler: "SchemaCompiler", schema: Mapping, location: Location, keyword: str) -> SchemaNode:
    return compiler.compile_subschema(schema[keyword], location.child(keyword), keyword)


def _schema_array(
    compiler: "SchemaCompiler",
    keyword: str,
    value: Any,
    location: Location,
    allow_empty: bool = False,
) -> Tuple[SchemaNode, ...]:
    if not isinstance(value, (list, tuple)):
        raise InvalidSchemaShape(keyword, f"expected an array of schemas, got {_kind(value)}")
    if not value and not allow_empty:
        raise InvalidSchemaShape(keyword, "expected a non-empty array of schemas")
    return tuple(
        compiler.compile_subschema(item, location.child(keyword, index), keyword)
        for index, item in enumerate(value)
    )


# ---- assertions ------------------------------------------------------------


def _compile_type(compiler, schema, location):
    raw = schema["type"]
    names = [raw] if isinstance(raw, str) else raw
    if not isinstance(names, (list, tuple)) or not names or not all(isinstance(n, str) for n in names):
        raise InvalidSchemaShape("type", f"expected a type name or a non-empty array of type names, got {_kind(raw)}")
    unknown = [n for n in names if n not in JSON_TYPE_NAMES]
    if unknown:
        raise InvalidSchemaShape("type", f"unknown type name(s) {unknown}. Valid types: {list(JSON_TYPE_NAMES)}")
    if len(set(names)) != len(names):
        raise InvalidSchemaShape("type", "type names must be unique")
    yield TypeKeyword(tuple(names))


def _compile_enum(compiler, schema, location):
    values = schema["enum"]
    if not isinstance(values, (list, tuple)):
        raise InvalidSchemaShape("enum", f"expected an array, got {_kind(values)}")
    yield EnumKeyword(tuple(values))


def _compile_const(compiler, schema, location):
    yield ConstKeyword(schema["const"])


def _draft4_exclusive_flag(schema: Mapping, keyword: str) -> bool:
    flag = schema.get(keyword, False)
    if not isinstance(flag, bool):
        raise InvalidSchemaShape(keyword, f"expected a boolean in {Dialect.DRAFT4.value}, got {_kind(flag)}")
    return flag


def _bound_compiler(keyword: str, exclusive_keyword: str, lower: bool) -> KeywordCompiler:
    def _compile(compiler, schema, location):
        limit = _number(keyword, schema[keyword])
        exclusive = False
        if location.dialect is Dialect.DRAFT4:
            exclusive = _draft4_exclusive_flag(schema, exclusive_keyword)
        yield NumericBound(exclusive_keyword if exclusive else keyword, limit, lower=lower, exclusive=exclusive)

    return _compile


def _exclusive_bound_compiler(keyword: str, lower: bool) -> KeywordCompiler:
    def _compile(compiler, schema, location):
        if location.dialect is Dialect.DRAFT4:
            # modifier of minimum/maximum, compiled with them
            _draft4_exclusive_flag(schema, keyword)
            return
        yield NumericBound(keyword, _number(keyword, schema[keyword]), lower=lower, exclusive=True)

    return _compile


def _compile_multiple_of(compiler, schema, location):
    divisor = _number("multipleOf", schema["multipleOf"])
    if divisor <= 0:
        raise InvalidSchemaShape("multipleOf", f"expected a number greater than 0, got {divisor}")
    yield MultipleOfKeyword(divisor)


def _size_compiler(keyword: str, lower: bool) -> KeywordCompiler:
    def _compile(compiler, schema, location):
        yield SizeBound(keyword, _non_negative_int(keyword, schema[keyword]), lower=lower)

    return _compile


def _compile_pattern(compiler, schema, location):
    source = _string("pattern", schema["pattern"])
    yield PatternKeyword(source, compile_regex("pattern", source))


def _compile_format(compiler, schema, location):
    name = _string("format", schema["format"])
    if compiler.config.validate_formats and is_known_format(name):
        yield FormatKeyword(name)


def _compile_unique_items(compiler, schema, location):
    flag = schema["uniqueItems"]
    if not isinstance(flag, bool):
        raise InvalidSchemaShape("uniqueItems", f"expected a boolean, got {_kind(flag)}")
    if flag:
        yield UniqueItemsKeyword()


def _compile_required(compiler, schema, location):
    names = _string_array("required", schema["required"])
    if names:
        yield RequiredKeyword(names)


def _compile_dependent_required(compiler, schema, location):
    raw = _mapping("dependentRequired", schema["dependentRequired"])
    dependencies = tuple((name, _string_array("dependentRequired", value)) for name, value in raw.items())
    if dependencies:
        yield DependentRequiredKeyword("dependentRequired", dependencies)


def _compile_dependencies(compiler, schema, location):
    raw = _mapping("dependencies", schema["dependencies"])
    required: List[Tuple[str, Tuple[str, ...]]] = []
    schemas: List[Tuple[str, SchemaNode]] = []
    for name, value in raw.items():
        if isinstance(value, (list, tuple)):
            required.append((name, _string_array("dependencies", value)))
        else:
            node = compiler.compile_subschema(value, location.child("dependencies", name), "dependencies")
            schemas.append((name, node))
    if required:
        yield DependentRequiredKeyword("dependencies", tuple(required))
    if schemas:
        yield DependentSchemasKeyword("dependencies", tuple(schemas))


# ---- applicators -----------------------------------------------------------


def _compile_dependent_schemas(compiler, schema, location):
    raw = _mapping("dependentSchemas", schema["dependentSchemas"])
    schemas = tuple(
        (name, compiler.compile_subschema(value, location.child("dependentSchemas", name), "dependentSchemas"))
        for name, value in raw.items()
    )
    if schemas:
        yield DependentSchemasKeyword("dependentSchemas", schemas)


def _combinator_compiler(keyword: str, factory: Callable[[Tuple[SchemaNode, ...]], Keyword]) -> KeywordCompiler:
    def _compile(compiler, schema, location):
        yield factory(_schema_array(compiler, keyword, schema[keyword], location))

    return _compile


def _compile_not(compiler, schema, location):
    yield NotKeyword(_subschema(compiler, schema, location, "not"))


def _compile_conditional(compiler, schema, location):
    if_schema = _subschema(compiler, schema, location, "if")
    then_schema = _subschema(compiler, schema, location, "then") if "then" in schema else None
    else_schema = _subschema(compiler, schema, location, "else") if "else" in schema else None
    if then_schema is None and else_schema is None:
        return
    yield ConditionalKeyword(if_schema, then_schema, else_schema)


def _compile_ref(compiler, schema, location):
    reference = _string("$ref", schema["$ref"])
    target = split_reference(location.base_uri, reference)
    compiler.defer_reference(target, reference)
    yield RefKeyword(reference, target)


def _compile_properties(compiler, schema, location):
    properties: Dict[str, SchemaNode] = {}
    for name, value in _mapping("properties", schema.get("properties", {})).items():
        properties[name] = compiler.compile_subschema(value, location.child("properties", name), "properties")

    patterns = []
    for source, value in _mapping("patternProperties", schema.get("patternProperties", {})).items():
        regex = compile_regex("patternProperties", source)
        node = compiler.compile_subschema(value, location.child("patternProperties", source), "patternProperties")
        patterns.append((source, regex, node))

    additional = None
    if "additionalProperties" in schema:
        additional = _subschema(compiler, schema, location, "additionalProperties")

    yield PropertiesKeyword(MappingProxyType(properties), tuple(patterns), additional)


def _compile_property_names(compiler, schema, location):
    yield PropertyNamesKeyword(_subschema(compiler, schema, location, "propertyNames"))


def _compile_items(compiler, schema, location):
    prefix: Tuple[SchemaNode, ...] = ()
    prefix_keyword = "prefixItems"
    rest = None
    rest_keyword = "items"
    items = schema.get("items")

    if location.dialect.at_least(Dialect.DRAFT2020_12) and "prefixItems" in schema:
        prefix = _schema_array(compiler, "prefixItems", schema["prefixItems"], location, allow_empty=True)
        if "items" in schema:
            if isinstance(items, (list, tuple)):
                raise InvalidSchemaShape("items", "expected a schema when prefixItems is present")
            rest = _subschema(compiler, schema, location, "items")
    elif isinstance(items, (list, tuple)):
        prefix = _schema_array(compiler, "items", items, location, allow_empty=True)
        prefix_keyword = "items"
        if "additionalItems" in schema and location.dialect.at_most(Dialect.DRAFT2019_09):
            rest = _subschema(compiler, schema, location, "additionalItems")
            rest_keyword = "additionalItems"
    elif "items" in schema:
        rest = _subschema(compiler, schema, location, "items")

    if not prefix and rest is None:
        return
    yield ItemsKeyword(prefix, prefix_keyword, rest, rest_keyword)


def _compile_contains(compiler, schema, location):
    node = _subschema(compiler, schema, location, "contains")
    min_contains = 1
    max_contains = None
    if location.dialect.at_least(Dialect.DRAFT2019_09):
        if "minContains" in schema:
            min_contains = _non_negative_int("minContains", schema["minContains"])
        if "maxContains" in schema:
            max_contains = _non_negative_int("maxContains", schema["maxContains"])
    yield ContainsKeyword(node, min_contains, max_contains)


# ---- registry --------------------------------------------------------------

_D6 = Dialect.DRAFT6
_D7 = Dialect.DRAFT7
_D2019 = Dialect.DRAFT2019_09
_D2020 = Dialect.DRAFT2020_12

KEYWORDS: Dict[str, KeywordSpec] = {
    "type": KeywordSpec(_compile_type, "type"),
    "enum": KeywordSpec(_compile_enum, "enum"),
    "const": KeywordSpec(_compile_const, "const", since=_D6),
    "minimum": KeywordSpec(_bound_compiler("minimum", "exclusiveMinimum", lower=True), "minimum"),
    "maximum": KeywordSpec(_bound_compiler("maximum", "exclusiveMaximum", lower=False), "maximum"),
    "exclusiveMinimum": KeywordSpec(_exclusive_bound_compiler("exclusiveMinimum", lower=True), "exclusiveMinimum"),
    "exclusiveMaximum": KeywordSpec(_exclusive_bound_compiler("exclusiveMaximum", lower=False), "exclusiveMaximum"),
    "multipleOf": KeywordSpec(_compile_multiple_of, "multipleOf"),
    "minLength": KeywordSpec(_size_compiler("minLength", lower=True), "minLength"),
    "maxLength": KeywordSpec(_size_compiler("maxLength", lower=False), "maxLength"),
    "pattern": KeywordSpec(_compile_pattern, "pattern"),
    "format": KeywordSpec(_compile_format, "format"),
    "minItems": KeywordSpec(_size_compiler("minItems", lower=True), "minItems"),
    "maxItems": KeywordSpec(_size_compiler("maxItems", lower=False), "maxItems"),
    "uniqueItems": KeywordSpec(_compile_unique_items, "uniqueItems"),
    "minProperties": KeywordSpec(_size_compiler("minProperties", lower=True), "minProperties"),
    "maxProperties": KeywordSpec(_size_compiler("maxProperties", lower=False), "maxProperties"),
    "required": KeywordSpec(_compile_required, "required"),
    "dependentRequired": KeywordSpec(_compile_dependent_required, "dependentRequired", since=_D2019),
    "dependencies": KeywordSpec(_compile_dependencies, "dependencies", IN_PLACE, until=_D7),
    "dependentSchemas": KeywordSpec(_compile_dependent_schemas, "dependentSchemas", IN_PLACE, since=_D2019),
    "allOf": KeywordSpec(_combinator_compiler("allOf", AllOfKeyword), "allOf", IN_PLACE),
    "anyOf": KeywordSpec(_combinator_compiler("anyOf", AnyOfKeyword), "anyOf", IN_PLACE),
    "oneOf": KeywordSpec(_combinator_compiler("oneOf", OneOfKeyword), "oneOf", IN_PLACE),
    "not": KeywordSpec(_compile_not, "not", IN_PLACE),
    "if": KeywordSpec(_compile_conditional, "if", IN_PLACE, since=_D7),
    "$ref": KeywordSpec(_compile_ref, "$ref", IN_PLACE),
    "properties": KeywordSpec(_compile_properties, "properties", CHILDREN),
    "patternProperties": KeywordSpec(_compile_properties, "properties", CHILDREN),
    "additionalProperties": KeywordSpec(_compile_properties, "properties", CHILDREN),
    "propertyNames": KeywordSpec(_compile_property_names, "propertyNames", CHILDREN, since=_D6),
    "prefixItems": KeywordSpec(_compile_items, "items", CHILDREN, since=_D2020),
    "items": KeywordSpec(_compile_items, "items", CHILDREN),
    "additionalItems": KeywordSpec(_compile_items, "items", CHILDREN, until=_D2019),
    "contains": KeywordSpec(_compile_contains, "contains", CHILDREN, since=_D6),
}

# Subschema containers compiled only so their locations, ids and anchors
# are registered.
DEFINITION_KEYWORDS = ("$defs", "definitions")

# Accepted keywords that never produce a constraint on their own.
NON_ASSERTIONS = frozenset({
    "$schema", "$id", "id", "$anchor", "$dynamicAnchor", "$recursiveAnchor",
    "$comment", "$vocabulary", "$defs", "definitions",
    "title", "description", "default", "examples", "readOnly", "writeOnly",
    "deprecated", "contentMediaType", "contentEncoding", "contentSchema",
    "then", "else", "minContains", "maxContains",
})

UNSUPPORTED: Dict[str, Dialect] = {
    "unevaluatedProperties": _D2019,
    "unevaluatedItems": _D2019,
    "$recursiveRef": _D2019,
    "$dynamicRef": _D2020,
}


def compile_keywords(compiler: "SchemaCompiler", schema: Mapping, location: Location) -> Tuple[Keyword, ...]:
    """Compile every keyword of one schema object, ordered by phase."""
    dialect = location.dialect
    names = list(schema)
    if dialect.ref_overrides_siblings and "$ref" in schema:
        names = ["$ref"]

    fired = set()
    compiled: List[Tuple[int, Keyword]] = []
    for name in names:
        spec = KEYWORDS.get(name)
        if spec is not None and spec.applies_to(dialect):
            if spec.group in fired:
                continue
            fired.add(spec.group)
            compiled.extend((spec.phase, keyword) for keyword in spec.compile(compiler, schema, location))
        elif name in UNSUPPORTED and dialect.at_least(UNSUPPORTED[name]):
            raise UnsupportedDraftFeature(name, f"'{name}' is not supported by this engine")
        elif name in NON_ASSERTIONS:
            continue
        elif compiler.config.strict_keywords:
            raise InvalidSchemaShape(name, f"unknown keyword for dialect {dialect.value}")

    compiled.sort(key=lambda entry: entry[0])
    return tuple(keyword for _, keyword in compiled)


def compile_definitions(compiler: "SchemaCompiler", schema: Mapping, location: Location) -> None:
    for keyword in DEFINITION_KEYWORDS:
        if keyword not in schema:
            continue
        for name, value in _mapping(keyword, schema[keyword]).items():
            compiler.compile_subschema(value, location.child(keyword, name), keyword)
