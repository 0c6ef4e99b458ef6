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

"""Validator executor: walks a :class:`ValidatorPlan` against an instance.

Both public entry points share one traversal, :meth:`_Evaluation.iter_errors`,
which lazily yields errors. :func:`is_valid` stops at the first yielded
error; :func:`validate_detailed` drains the stream and hands it to the
error collector.

Failed ``anyOf``/``oneOf`` combinators produce a single aggregate error;
the per-branch errors are attached to its ``context`` and do not appear in
the flat result.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, List, Set, Tuple

from ..exceptions import ValidationExecutionError
from ..models.document import canonical_key, describe_value, json_equal, json_type_of, matches_type
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
    ValidatorPlan,
)
from ..models.validation_error import ValidationError, make_error
from ..utils.json_pointer import PathToken, display_pointer
from ..utils.numbers import is_multiple_of, is_number, to_decimal
from .collector import collect
from .formats import check_format

Path = Tuple[PathToken, ...]
ErrorStream = Iterator[ValidationError]


class _Evaluation:
    """Working state of one validation call; never shared between calls."""

    def __init__(self, plan: ValidatorPlan, *, collect: bool):
        self.plan = plan
        self.collect = collect
        self._active: Set[Tuple[SchemaNode, int, int]] = set()
        # schema nodes active at each instance depth
        self._in_place: Dict[int, int] = {}

    def iter_errors(self, node: SchemaNode, instance: Any, path: Path, schema_path: Path) -> ErrorStream:
        if node.verdict is not None:
            if not node.verdict:
                yield make_error(
                    "false", f"{describe_value(instance)} is not allowed by a false schema", path, schema_path
                )
            return

        depth = len(path)
        # The same node re-entered on the same instance value inside its own
        # evaluation can never terminate.
        key = (node, depth, id(instance))
        if key in self._active:
            raise ValidationExecutionError(
                f"Reference cycle through '{node.location}' does not consume the instance "
                f"at {display_pointer(path)}"
            )
        if depth > self.plan.max_depth:
            raise ValidationExecutionError(
                f"Evaluation exceeded the maximum depth of {self.plan.max_depth} at {display_pointer(path)}"
            )
        hops = self._in_place.get(depth, 0) + 1
        if hops > self.plan.max_depth:
            raise ValidationExecutionError(
                f"Evaluation exceeded the maximum depth of {self.plan.max_depth} nested schemas "
                f"at {display_pointer(path)}"
            )

        self._active.add(key)
        self._in_place[depth] = hops
        try:
            for keyword in node.keywords:
                yield from _HANDLERS[type(keyword)](self, keyword, instance, path, schema_path)
        finally:
            self._in_place[depth] = hops - 1
            self._active.discard(key)

    def is_valid(self, node: SchemaNode, instance: Any, path: Path, schema_path: Path) -> bool:
        errors = self.iter_errors(node, instance, path, schema_path)
        try:
            return next(errors, None) is None
        finally:
            errors.close()

    def branch_errors(self, node: SchemaNode, instance: Any, path: Path, schema_path: Path) -> Tuple[ValidationError, ...]:
        """All errors of a branch when collecting, otherwise at most the first."""
        if self.collect:
            return tuple(self.iter_errors(node, instance, path, schema_path))
        errors = self.iter_errors(node, instance, path, schema_path)
        try:
            first = next(errors, None)
        finally:
            errors.close()
        return () if first is None else (first,)


# ---- assertions ------------------------------------------------------------


def _check_type(ev, keyword: TypeKeyword, instance, path, schema_path) -> ErrorStream:
    if not any(matches_type(instance, name) for name in keyword.types):
        expected = " or ".join(keyword.types)
        yield make_error(
            "type", f"expected {expected}, got {json_type_of(instance)}", path, schema_path + ("type",)
        )


def _check_enum(ev, keyword: EnumKeyword, instance, path, schema_path) -> ErrorStream:
    if not any(json_equal(instance, value) for value in keyword.values):
        yield make_error(
            "enum",
            f"{describe_value(instance)} is not one of {describe_value(list(keyword.values))}",
            path,
            schema_path + ("enum",),
        )


def _check_const(ev, keyword: ConstKeyword, instance, path, schema_path) -> ErrorStream:
    if not json_equal(instance, keyword.value):
        yield make_error(
            "const",
            f"expected {describe_value(keyword.value)}, got {describe_value(instance)}",
            path,
            schema_path + ("const",),
        )


_BOUND_WORDING = {
    (True, False): "less than the minimum of",
    (True, True): "less than or equal to the exclusive minimum of",
    (False, False): "greater than the maximum of",
    (False, True): "greater than or equal to the exclusive maximum of",
}


def _check_bound(ev, keyword: NumericBound, instance, path, schema_path) -> ErrorStream:
    if not is_number(instance):
        return
    value = to_decimal(instance)
    if value.is_nan():
        return
    limit = keyword.limit
    if keyword.lower:
        failed = value <= limit if keyword.exclusive else value < limit
    else:
        failed = value >= limit if keyword.exclusive else value > limit
    if failed:
        wording = _BOUND_WORDING[(keyword.lower, keyword.exclusive)]
        yield make_error(
            keyword.keyword, f"{describe_value(instance)} is {wording} {limit}", path, schema_path + (keyword.keyword,)
        )


def _check_multiple_of(ev, keyword: MultipleOfKeyword, instance, path, schema_path) -> ErrorStream:
    if is_number(instance) and not is_multiple_of(instance, keyword.divisor):
        yield make_error(
            "multipleOf",
            f"{describe_value(instance)} is not a multiple of {keyword.divisor}",
            path,
            schema_path + ("multipleOf",),
        )


# keyword -> (applies to, unit)
_SIZES: Dict[str, Tuple[Callable[[Any], bool], str]] = {
    "minLength": (lambda value: isinstance(value, str), "characters"),
    "maxLength": (lambda value: isinstance(value, str), "characters"),
    "minItems": (lambda value: isinstance(value, (list, tuple)), "items"),
    "maxItems": (lambda value: isinstance(value, (list, tuple)), "items"),
    "minProperties": (lambda value: isinstance(value, Mapping), "properties"),
    "maxProperties": (lambda value: isinstance(value, Mapping), "properties"),
}


def _check_size(ev, keyword: SizeBound, instance, path, schema_path) -> ErrorStream:
    applies, noun = _SIZES[keyword.keyword]
    if not applies(instance):
        return
    # len() of a str counts code points
    size = len(instance)
    failed = size < keyword.limit if keyword.lower else size > keyword.limit
    if not failed:
        return
    if isinstance(instance, str):
        comparison = "shorter" if keyword.lower else "longer"
        detail = f"{describe_value(instance)} is {comparison} than {keyword.limit} {noun}"
    else:
        comparison = "fewer" if keyword.lower else "more"
        detail = f"{json_type_of(instance)} has {comparison} than {keyword.limit} {noun}"
    yield make_error(keyword.keyword, detail, path, schema_path + (keyword.keyword,))


def _check_pattern(ev, keyword: PatternKeyword, instance, path, schema_path) -> ErrorStream:
    if isinstance(instance, str) and keyword.regex.search(instance) is None:
        yield make_error(
            "pattern",
            f"{describe_value(instance)} does not match pattern '{keyword.source}'",
            path,
            schema_path + ("pattern",),
        )


def _check_format(ev, keyword: FormatKeyword, instance, path, schema_path) -> ErrorStream:
    if isinstance(instance, str) and not check_format(keyword.name, instance):
        yield make_error(
            "format",
            f"{describe_value(instance)} is not a valid '{keyword.name}'",
            path,
            schema_path + ("format",),
        )


def _check_unique_items(ev, keyword: UniqueItemsKeyword, instance, path, schema_path) -> ErrorStream:
    if not isinstance(instance, (list, tuple)):
        return
    seen: Dict[Any, int] = {}
    for index, item in enumerate(instance):
        marker = canonical_key(item)
        if marker in seen:
            yield make_error(
                "uniqueItems",
                f"array has non-unique items at indices {seen[marker]} and {index}",
                path,
                schema_path + ("uniqueItems",),
            )
            return
        seen[marker] = index


def _check_required(ev, keyword: RequiredKeyword, instance, path, schema_path) -> ErrorStream:
    if not isinstance(instance, Mapping):
        return
    for name in keyword.names:
        if name not in instance:
            yield make_error("required", f"missing required property '{name}'", path, schema_path + ("required",))


def _check_dependent_required(ev, keyword: DependentRequiredKeyword, instance, path, schema_path) -> ErrorStream:
    if not isinstance(instance, Mapping):
        return
    for name, dependencies in keyword.dependencies:
        if name not in instance:
            continue
        for dependency in dependencies:
            if dependency not in instance:
                yield make_error(
                    keyword.keyword,
                    f"property '{dependency}' is required when '{name}' is present",
                    path,
                    schema_path + (keyword.keyword, name),
                )


# ---- applicators -----------------------------------------------------------


def _apply_dependent_schemas(ev, keyword: DependentSchemasKeyword, instance, path, schema_path) -> ErrorStream:
    if not isinstance(instance, Mapping):
        return
    for name, node in keyword.schemas:
        if name in instance:
            yield from ev.iter_errors(node, instance, path, schema_path + (keyword.keyword, name))


def _apply_all_of(ev, keyword: AllOfKeyword, instance, path, schema_path) -> ErrorStream:
    for index, node in enumerate(keyword.schemas):
        yield from ev.iter_errors(node, instance, path, schema_path + ("allOf", index))


def _apply_any_of(ev, keyword: AnyOfKeyword, instance, path, schema_path) -> ErrorStream:
    context: List[ValidationError] = []
    for index, node in enumerate(keyword.schemas):
        errors = ev.branch_errors(node, instance, path, schema_path + ("anyOf", index))
        if not errors:
            return
        context.extend(errors)
    yield make_error(
        "anyOf",
        f"{describe_value(instance)} does not match any of the {len(keyword.schemas)} anyOf schemas",
        path,
        schema_path + ("anyOf",),
        context=tuple(context),
    )


def _apply_one_of(ev, keyword: OneOfKeyword, instance, path, schema_path) -> ErrorStream:
    matches: List[int] = []
    context: List[ValidationError] = []
    for index, node in enumerate(keyword.schemas):
        errors = ev.branch_errors(node, instance, path, schema_path + ("oneOf", index))
        if errors:
            context.extend(errors)
        else:
            matches.append(index)
            if len(matches) > 1 and not ev.collect:
                break

    if not matches:
        yield make_error(
            "oneOf",
            f"{describe_value(instance)} does not match any of the {len(keyword.schemas)} oneOf schemas",
            path,
            schema_path + ("oneOf",),
            context=tuple(context),
        )
    elif len(matches) > 1:
        indices = ", ".join(str(index) for index in matches)
        yield make_error(
            "oneOf",
            f"{describe_value(instance)} matches {len(matches)} oneOf schemas (indices {indices}), expected exactly one",
            path,
            schema_path + ("oneOf",),
        )


def _apply_not(ev, keyword: NotKeyword, instance, path, schema_path) -> ErrorStream:
    if ev.is_valid(keyword.schema, instance, path, schema_path + ("not",)):
        yield make_error(
            "not", f"{describe_value(instance)} must not match the 'not' schema", path, schema_path + ("not",)
        )


def _apply_conditional(ev, keyword: ConditionalKeyword, instance, path, schema_path) -> ErrorStream:
    # errors of "if" itself are never reported
    if ev.is_valid(keyword.if_schema, instance, path, schema_path + ("if",)):
        if keyword.then_schema is not None:
            yield from ev.iter_errors(keyword.then_schema, instance, path, schema_path + ("then",))
    elif keyword.else_schema is not None:
        yield from ev.iter_errors(keyword.else_schema, instance, path, schema_path + ("else",))


def _apply_ref(ev, keyword: RefKeyword, instance, path, schema_path) -> ErrorStream:
    node = ev.plan.resolve(keyword.target)
    yield from ev.iter_errors(node, instance, path, schema_path + ("$ref",))


def _apply_properties(ev, keyword: PropertiesKeyword, instance, path, schema_path) -> ErrorStream:
    if not isinstance(instance, Mapping):
        return
    for name, value in instance.items():
        child_path = path + (name,)
        matched = False

        node = keyword.properties.get(name)
        if node is not None:
            matched = True
            yield from ev.iter_errors(node, value, child_path, schema_path + ("properties", name))

        for source, regex, pattern_node in keyword.patterns:
            if regex.search(name) is not None:
                matched = True
                yield from ev.iter_errors(pattern_node, value, child_path, schema_path + ("patternProperties", source))

        if matched or keyword.additional is None:
            continue
        if keyword.additional.verdict is False:
            yield make_error(
                "additionalProperties",
                f"additional property '{name}' is not allowed",
                child_path,
                schema_path + ("additionalProperties",),
            )
        else:
            yield from ev.iter_errors(keyword.additional, value, child_path, schema_path + ("additionalProperties",))


def _apply_property_names(ev, keyword: PropertyNamesKeyword, instance, path, schema_path) -> ErrorStream:
    if not isinstance(instance, Mapping):
        return
    for name in instance:
        yield from ev.iter_errors(keyword.schema, name, path, schema_path + ("propertyNames",))


def _apply_items(ev, keyword: ItemsKeyword, instance, path, schema_path) -> ErrorStream:
    if not isinstance(instance, (list, tuple)):
        return
    for index, item in enumerate(instance):
        if index < len(keyword.prefix):
            node = keyword.prefix[index]
            item_schema_path = schema_path + (keyword.prefix_keyword, index)
        elif keyword.rest is not None:
            node = keyword.rest
            item_schema_path = schema_path + (keyword.rest_keyword,)
            if node.verdict is False:
                yield make_error(
                    keyword.rest_keyword,
                    f"array has {len(instance)} items, at most {len(keyword.prefix)} allowed",
                    path,
                    item_schema_path,
                )
                return
        else:
            return
        yield from ev.iter_errors(node, item, path + (index,), item_schema_path)


def _apply_contains(ev, keyword: ContainsKeyword, instance, path, schema_path) -> ErrorStream:
    if not isinstance(instance, (list, tuple)):
        return
    count = 0
    for index, item in enumerate(instance):
        if ev.is_valid(keyword.schema, item, path + (index,), schema_path + ("contains",)):
            count += 1

    if count < keyword.min_contains:
        if keyword.min_contains == 1:
            yield make_error(
                "contains",
                "array does not contain any item matching the contains schema",
                path,
                schema_path + ("contains",),
            )
        else:
            yield make_error(
                "minContains",
                f"array contains {count} matching items, fewer than {keyword.min_contains}",
                path,
                schema_path + ("minContains",),
            )
    if keyword.max_contains is not None and count > keyword.max_contains:
        yield make_error(
            "maxContains",
            f"array contains {count} matching items, more than {keyword.max_contains}",
            path,
            schema_path + ("maxContains",),
        )


_HANDLERS: Dict[type, Callable[..., ErrorStream]] = {
    TypeKeyword: _check_type,
    EnumKeyword: _check_enum,
    ConstKeyword: _check_const,
    NumericBound: _check_bound,
    MultipleOfKeyword: _check_multiple_of,
    SizeBound: _check_size,
    PatternKeyword: _check_pattern,
    FormatKeyword: _check_format,
    UniqueItemsKeyword: _check_unique_items,
    RequiredKeyword: _check_required,
    DependentRequiredKeyword: _check_dependent_required,
    DependentSchemasKeyword: _apply_dependent_schemas,
    AllOfKeyword: _apply_all_of,
    AnyOfKeyword: _apply_any_of,
    OneOfKeyword: _apply_one_of,
    NotKeyword: _apply_not,
    ConditionalKeyword: _apply_conditional,
    RefKeyword: _apply_ref,
    PropertiesKeyword: _apply_properties,
    PropertyNamesKeyword: _apply_property_names,
    ItemsKeyword: _apply_items,
    ContainsKeyword: _apply_contains,
}


def is_valid(plan: ValidatorPlan, instance: Any) -> bool:
    """Return True if *instance* satisfies the plan; stops at the first failure.

    Raises:
        ValidationExecutionError: If the plan cannot be executed.
    """
    try:
        return _Evaluation(plan, collect=False).is_valid(plan.root, instance, (), ())
    except RecursionError as exc:
        raise ValidationExecutionError("Evaluation exceeded the interpreter recursion limit") from exc


def iter_errors(plan: ValidatorPlan, instance: Any) -> ErrorStream:
    """Lazily yield raw errors in evaluation order, before collection."""
    return _Evaluation(plan, collect=True).iter_errors(plan.root, instance, (), ())


def validate_detailed(plan: ValidatorPlan, instance: Any) -> List[ValidationError]:
    """Return every validation error; an empty list means the instance is valid.

    Raises:
        ValidationExecutionError: If the plan cannot be executed.
    """
    try:
        return collect(iter_errors(plan, instance))
    except RecursionError as exc:
        raise ValidationExecutionError("Evaluation exceeded the interpreter recursion limit") from exc
