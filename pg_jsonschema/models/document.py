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

"""In-memory JSON document model.

Documents are the plain Python trees produced by :mod:`json`: ``None``,
``bool``, ``int``, ``float``/``Decimal``, ``str``, ``list`` (tuples are
accepted as arrays) and ``dict`` with string keys.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Hashable, Union

from ..exceptions import DocumentError
from ..utils.numbers import is_integral, is_number, to_decimal

JsonValue = Any

JSON_TYPE_NAMES = ("null", "boolean", "object", "array", "number", "integer", "string")


def _reject_constant(name: str) -> Any:
    raise DocumentError(f"Invalid JSON document: '{name}' is not a JSON value")


def parse_json(text: Union[str, bytes, bytearray]) -> JsonValue:
    """Parse JSON text into a document, keeping non-integral numbers as Decimal.

    Duplicate object keys keep the last occurrence.

    Raises:
        DocumentError: If the text is not valid JSON.
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DocumentError(f"Invalid JSON document: {exc}") from exc
    try:
        return json.loads(text, parse_float=Decimal, parse_constant=_reject_constant)
    except ValueError as exc:
        # JSONDecodeError, or an integer literal over the int digit limit
        raise DocumentError(f"Invalid JSON document: {exc}") from exc


def json_type_of(value: JsonValue) -> str:
    """Name the JSON type of a value; integral floats still report ``number``."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, (float, Decimal)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    raise DocumentError(f"Unsupported value of type {type(value).__name__} in JSON document")


def matches_type(value: JsonValue, type_name: str) -> bool:
    if type_name == "integer":
        return is_integral(value)
    if type_name == "number":
        return is_number(value)
    if type_name == "null":
        return value is None
    if type_name == "boolean":
        return isinstance(value, bool)
    if type_name == "string":
        return isinstance(value, str)
    if type_name == "array":
        return isinstance(value, (list, tuple))
    if type_name == "object":
        return isinstance(value, Mapping)
    return False


def json_equal(left: JsonValue, right: JsonValue) -> bool:
    """Structural JSON equality: ``1 == 1.0``, ``true != 1``, key order ignored."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) or is_number(right):
        return is_number(left) and is_number(right) and to_decimal(left) == to_decimal(right)
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(json_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if left.keys() != right.keys():
            return False
        return all(json_equal(left[key], right[key]) for key in left)
    return False


def canonical_key(value: JsonValue) -> Hashable:
    """Hashable key such that equal keys mean :func:`json_equal` values."""
    if value is None:
        return ("null",)
    if isinstance(value, bool):
        return ("boolean", value)
    if is_number(value):
        return ("number", to_decimal(value))
    if isinstance(value, str):
        return ("string", value)
    if isinstance(value, (list, tuple)):
        return ("array", tuple(canonical_key(item) for item in value))
    if isinstance(value, Mapping):
        return ("object", frozenset((key, canonical_key(item)) for key, item in value.items()))
    raise DocumentError(f"Unsupported value of type {type(value).__name__} in JSON document")


def dump_json(value: JsonValue, *, sort_keys: bool = False) -> str:
    """Compact JSON text for a document, rendering Decimals as numbers."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(dump_json(item, sort_keys=sort_keys) for item in value) + "]"
    if isinstance(value, Mapping):
        items = sorted(value.items()) if sort_keys else value.items()
        return "{" + ",".join(
            f"{json.dumps(key)}:{dump_json(item, sort_keys=sort_keys)}" for key, item in items
        ) + "}"
    return json.dumps(value)


def describe_value(value: JsonValue, limit: int = 60) -> str:
    text = dump_json(value)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text
