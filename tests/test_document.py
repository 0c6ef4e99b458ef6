"""Tests for the JSON document model and its helpers."""

import sys
from decimal import Decimal

import pytest

from pg_jsonschema.exceptions import DocumentError
from pg_jsonschema.models.document import (
    canonical_key,
    describe_value,
    dump_json,
    json_equal,
    json_type_of,
    matches_type,
    parse_json,
)
from pg_jsonschema.utils.json_pointer import display_pointer, format_pointer, split_pointer
from pg_jsonschema.utils.numbers import coerce_non_negative_int, is_integral, is_multiple_of, to_decimal


class TestParseJson:
    def test_keeps_decimal_text_exactly(self):
        data = parse_json('{"a": 0.1, "b": 10, "c": 1e400}')
        assert data["a"] == Decimal("0.1")
        assert isinstance(data["b"], int)
        assert data["c"] == Decimal("1e400")

    def test_duplicate_keys_last_one_wins(self):
        assert parse_json('{"a": 1, "a": 2}') == {"a": 2}

    @pytest.mark.parametrize("text", ["NaN", "[Infinity]", "-Infinity"])
    def test_rejects_non_json_constants(self, text):
        with pytest.raises(DocumentError, match="not a JSON value"):
            parse_json(text)

    def test_invalid_text(self):
        with pytest.raises(DocumentError, match="Invalid JSON document"):
            parse_json("{not json")

    @pytest.mark.skipif(not getattr(sys, "get_int_max_str_digits", lambda: 0)(), reason="no int digit limit")
    def test_oversized_integer_literal(self):
        with pytest.raises(DocumentError, match="Invalid JSON document"):
            parse_json("1" * (sys.get_int_max_str_digits() + 1))

    def test_bytes_input(self):
        assert parse_json(b'["x"]') == ["x"]

    def test_invalid_utf8(self):
        with pytest.raises(DocumentError):
            parse_json(b"\xff\xfe")


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "null"),
        (True, "boolean"),
        (3, "integer"),
        (3.5, "number"),
        (Decimal("1.0"), "number"),
        ("s", "string"),
        ([], "array"),
        ((1, 2), "array"),
        ({}, "object"),
    ],
)
def test_json_type_of(value, expected):
    assert json_type_of(value) == expected


def test_json_type_of_rejects_python_objects():
    with pytest.raises(DocumentError, match="Unsupported value of type set"):
        json_type_of({1, 2})


def test_integer_type_accepts_integral_numbers():
    assert matches_type(1.0, "integer")
    assert matches_type(Decimal("2.000"), "integer")
    assert not matches_type(1.5, "integer")
    assert not matches_type(True, "integer")
    assert not matches_type(True, "number")
    assert matches_type(7, "number")


def test_integer_detection_beyond_float_precision():
    # 2**53 + 1 is not representable as a float
    assert is_integral(parse_json("9007199254740993"))
    assert not is_integral(parse_json("9007199254740993.5"))


class TestJsonEqual:
    def test_numbers_compare_by_value(self):
        assert json_equal(1, 1.0)
        assert json_equal(Decimal("0.10"), 0.1)

    def test_booleans_are_not_numbers(self):
        assert not json_equal(True, 1)
        assert not json_equal(0, False)

    def test_objects_ignore_key_order(self):
        assert json_equal({"a": 1, "b": [1, 2]}, {"b": [1, 2], "a": 1})
        assert not json_equal({"a": 1}, {"a": 1, "b": 2})

    def test_arrays_are_ordered(self):
        assert not json_equal([1, 2], [2, 1])
        assert json_equal([1, 2], (1, 2))

    def test_canonical_key_agrees_with_equality(self):
        assert canonical_key({"a": 1, "b": 2.0}) == canonical_key({"b": 2, "a": 1})
        assert canonical_key([True]) != canonical_key([1])


def test_dump_json_renders_decimals_as_numbers():
    assert dump_json({"b": Decimal("1.50"), "a": [None, True]}, sort_keys=True) == '{"a":[null,true],"b":1.50}'


def test_describe_value_truncates():
    text = describe_value("x" * 100, limit=20)
    assert len(text) == 20
    assert text.endswith("...")


class TestJsonPointer:
    def test_format_escapes_tokens(self):
        assert format_pointer(["a/b", "c~d", 0]) == "/a~1b/c~0d/0"

    def test_split_unescapes_tokens(self):
        assert split_pointer("/a~1b/c~0d/0") == ["a/b", "c~d", "0"]
        assert split_pointer("") == []

    def test_split_rejects_relative_pointer(self):
        with pytest.raises(ValueError):
            split_pointer("a/b")

    def test_root_is_displayed_by_name(self):
        assert display_pointer(()) == "<root>"
        assert display_pointer(("a", 1)) == "/a/1"


class TestNumbers:
    def test_floats_convert_through_repr(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_booleans_are_rejected(self):
        with pytest.raises(ValueError):
            to_decimal(True)

    @pytest.mark.parametrize(
        "value, divisor, expected",
        [
            (0.3, "0.1", True),
            (10, "2", True),
            (7, "2", False),
            (Decimal("4.5"), "1.5", True),
            (1e308, "0.123", False),
        ],
    )
    def test_is_multiple_of(self, value, divisor, expected):
        assert is_multiple_of(value, Decimal(divisor)) is expected

    def test_coerce_non_negative_int(self):
        assert coerce_non_negative_int(3.0) == 3
        assert coerce_non_negative_int(-1) is None
        assert coerce_non_negative_int(1.5) is None
        assert coerce_non_negative_int(True) is None
