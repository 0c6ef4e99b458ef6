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

"""Compiled schema representation.

A schema object compiles to one :class:`SchemaNode` holding a tuple of
keyword constraints. The constraint kinds form a closed union
(:data:`Keyword`); the executor dispatches on the concrete class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional, Pattern, Tuple, Union

from ..exceptions import ValidationExecutionError
from .dialect import Dialect

# (resource URI, fragment); fragment is a JSON pointer or an anchor name
ReferenceKey = Tuple[str, str]


@dataclass(frozen=True)
class TypeKeyword:
    types: Tuple[str, ...]


@dataclass(frozen=True)
class EnumKeyword:
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class ConstKeyword:
    value: Any


@dataclass(frozen=True)
class NumericBound:
    keyword: str
    limit: Decimal
    lower: bool
    exclusive: bool = False


@dataclass(frozen=True)
class MultipleOfKeyword:
    divisor: Decimal


@dataclass(frozen=True)
class SizeBound:
    """minLength/maxLength, minItems/maxItems and minProperties/maxProperties."""

    keyword: str
    limit: int
    lower: bool


@dataclass(frozen=True)
class PatternKeyword:
    source: str
    regex: Pattern[str]


@dataclass(frozen=True)
class FormatKeyword:
    name: str


@dataclass(frozen=True)
class UniqueItemsKeyword:
    pass


@dataclass(frozen=True)
class RequiredKeyword:
    names: Tuple[str, ...]


@dataclass(frozen=True)
class DependentRequiredKeyword:
    keyword: str
    dependencies: Tuple[Tuple[str, Tuple[str, ...]], ...]


@dataclass(frozen=True)
class DependentSchemasKeyword:
    keyword: str
    schemas: Tuple[Tuple[str, "SchemaNode"], ...]


@dataclass(frozen=True)
class PropertiesKeyword:
    """properties, patternProperties and additionalProperties evaluated together."""

    properties: Mapping[str, "SchemaNode"]
    patterns: Tuple[Tuple[str, Pattern[str], "SchemaNode"], ...] = ()
    additional: Optional["SchemaNode"] = None


@dataclass(frozen=True)
class PropertyNamesKeyword:
    schema: "SchemaNode"


@dataclass(frozen=True)
class ItemsKeyword:
    """Positional (tuple) item schemas followed by a schema for the rest."""

    prefix: Tuple["SchemaNode", ...] = ()
    prefix_keyword: str = "prefixItems"
    rest: Optional["SchemaNode"] = None
    rest_keyword: str = "items"


@dataclass(frozen=True)
class ContainsKeyword:
    schema: "SchemaNode"
    min_contains: int = 1
    max_contains: Optional[int] = None


@dataclass(frozen=True)
class AllOfKeyword:
    schemas: Tuple["SchemaNode", ...]


@dataclass(frozen=True)
class AnyOfKeyword:
    schemas: Tuple["SchemaNode", ...]


@dataclass(frozen=True)
class OneOfKeyword:
    schemas: Tuple["SchemaNode", ...]


@dataclass(frozen=True)
class NotKeyword:
    schema: "SchemaNode"


@dataclass(frozen=True)
class ConditionalKeyword:
    if_schema: "SchemaNode"
    then_schema: Optional["SchemaNode"] = None
    else_schema: Optional["SchemaNode"] = None


@dataclass(frozen=True)
class RefKeyword:
    reference: str
    target: ReferenceKey


Keyword = Union[
    TypeKeyword,
    EnumKeyword,
    ConstKeyword,
    NumericBound,
    MultipleOfKeyword,
    SizeBound,
    PatternKeyword,
    FormatKeyword,
    UniqueItemsKeyword,
    RequiredKeyword,
    DependentRequiredKeyword,
    DependentSchemasKeyword,
    PropertiesKeyword,
    PropertyNamesKeyword,
    ItemsKeyword,
    ContainsKeyword,
    AllOfKeyword,
    AnyOfKeyword,
    OneOfKeyword,
    NotKeyword,
    ConditionalKeyword,
    RefKeyword,
]


@dataclass(frozen=True, eq=False)
class SchemaNode:
    """One compiled schema object or boolean schema.

    Nodes compare and hash by identity; the executor relies on that to
    detect reference cycles.
    """

    location: str
    keywords: Tuple[Keyword, ...] = ()
    verdict: Optional[bool] = None


@dataclass(frozen=True)
class ValidatorPlan:
    """A compiled schema, reusable across any number of validations."""

    root: SchemaNode
    table: Mapping[ReferenceKey, SchemaNode]
    dialect: Dialect
    base_uri: str = ""
    validate_formats: bool = True
    max_depth: int = 128
    node_count: int = field(default=0, compare=False)

    def resolve(self, target: ReferenceKey) -> SchemaNode:
        """Look up a reference target.

        Raises:
            ValidationExecutionError: If the target is not in the table.
        """
        node = self.table.get(target)
        if node is None:
            resource, fragment = target
            raise ValidationExecutionError(
                f"Dangling reference to '{resource}#{fragment}' in compiled plan"
            )
        return node
