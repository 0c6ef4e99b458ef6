"""Keyword-level behaviour of the validator executor."""

from decimal import Decimal

import pytest

from pg_jsonschema import EngineConfig, compile_schema, is_valid, validate_detailed
from pg_jsonschema.models.document import parse_json

DRAFT4 = "http://json-schema.org/draft-04/schema#"
DRAFT7 = "http://json-schema.org/draft-07/schema#"
DRAFT2019 = "https://json-schema.org/draft/2019-09/schema"


def messages(plan, instance):
    return [error.message for error in validate_detailed(plan, instance)]


CASES = [
    # type
    ({"type": "integer"}, 1.0, True),
    ({"type": "integer"}, Decimal("3.00"), True),
    ({"type": "integer"}, 1.5, False),
    ({"type": "number"}, True, False),
    ({"type": ["string", "null"]}, None, True),
    ({"type": "object"}, [], False),
    # enum / const
    ({"enum": [1, "a", {"k": [1]}]}, 1.0, True),
    ({"enum": [1, "a", {"k": [1]}]}, {"k": [1]}, True),
    ({"enum": [1]}, True, False),
    ({"const": {"a": [1, 2]}}, {"a": [1, 2]}, True),
    ({"const": False}, 0, False),
    # numeric bounds
    ({"minimum": 3}, 3, True),
    ({"exclusiveMinimum": 3}, 3, False),
    ({"maximum": 2.5}, 2.5, True),
    ({"exclusiveMaximum": 2.5}, 2.4, True),
    ({"minimum": 3}, "not a number", True),
    ({"$schema": DRAFT4, "minimum": 3, "exclusiveMinimum": True}, 3, False),
    ({"$schema": DRAFT4, "maximum": 3, "exclusiveMaximum": False}, 3, True),
    ({"multipleOf": 0.1}, 0.3, True),
    ({"multipleOf": 0.01}, parse_json("19.99"), True),
    ({"multipleOf": 2}, 7, False),
    # strings
    ({"minLength": 2}, "ab", True),
    ({"maxLength": 1}, "\U0001F600", True),
    ({"pattern": "b"}, "abc", True),
    ({"pattern": "^b"}, "abc", False),
    ({"pattern": "^b"}, 12, True),
    ({"pattern": "^[a-z]+$"}, "abc\n", False),
    ({"pattern": "^[a-z]+$"}, "abc", True),
    ({"pattern": "^[$a]+$"}, "a$", True),
    ({"pattern": "^\\d+$"}, "\u0663", False),
    ({"pattern": "^\\d+$"}, "42", True),
    ({"patternProperties": {"^x$": {"type": "string"}}}, {"x\n": 1}, True),
    # arrays
    ({"minItems": 1}, [], False),
    ({"maxItems": 1}, [1], True),
    ({"uniqueItems": True}, [1, True, "1"], True),
    ({"uniqueItems": True}, [{"a": 1, "b": 2}, {"b": 2, "a": 1.0}], False),
    ({"uniqueItems": False}, [1, 1], True),
    ({"items": {"type": "string"}}, ["a", "b"], True),
    ({"items": {"type": "string"}}, "not an array", True),
    ({"prefixItems": [{"type": "integer"}], "items": False}, [1], True),
    ({"items": [{"type": "integer"}], "additionalItems": False}, [1], True),
    ({"$schema": DRAFT7, "items": [{"type": "integer"}], "additionalItems": False}, [1, 2], False),
    ({"contains": {"type": "integer"}}, ["a", 1], True),
    ({"contains": {"type": "integer"}, "minContains": 0}, [], True),
    ({"$schema": DRAFT7, "contains": {"type": "integer"}, "minContains": 2}, [1], True),
    # objects
    ({"minProperties": 1}, {}, False),
    ({"maxProperties": 1}, {"a": 1}, True),
    ({"required": ["a"]}, {"a": None}, True),
    ({"required": ["a"]}, ["a"], True),
    ({"dependentRequired": {"a": ["b"]}}, {"b": 1}, True),
    ({"dependentSchemas": {"a": {"required": ["b"]}}}, {"a": 1, "b": 2}, True),
    ({"$schema": DRAFT7, "dependencies": {"a": {"required": ["b"]}}}, {"a": 1}, False),
    ({"$schema": DRAFT7, "dependentRequired": {"a": ["b"]}}, {"a": 1}, True),
    ({"propertyNames": {"pattern": "^[a-z]+$"}}, {"abc": 1}, True),
    ({"propertyNames": {"pattern": "^[a-z]+$"}}, {"ABC": 1}, False),
    ({"properties": {"a": {"type": "integer"}}}, {"b": "x"}, True),
    ({"patternProperties": {"^x-": {"type": "string"}}}, {"x-a": 1}, False),
    ({"additionalProperties": {"type": "integer"}}, {"a": 1, "b": 2}, True),
    # boolean schemas
    (True, {"anything": [1]}, True),
    (False, None, False),
    ({"properties": {"a": False}}, {}, True),
    # annotations only
    ({"title": "t", "description": "d", "default": 1, "examples": [1]}, "x", True),
]


@pytest.mark.parametrize("schema, instance, expected", CASES)
def test_keyword_verdicts(compile_plan, schema, instance, expected):
    plan = compile_plan(schema)
    assert is_valid(plan, instance) is expected
    assert (validate_detailed(plan, instance) == []) is expected


class TestMessages:
    def test_type(self, compile_plan):
        assert messages(compile_plan({"type": "integer"}), 1.5) == [
            "type: expected integer, got number at <root>"
        ]
        assert messages(compile_plan({"type": ["string", "null"]}), 1) == [
            "type: expected string or null, got integer at <root>"
        ]

    def test_enum_and_const(self, compile_plan):
        assert messages(compile_plan({"enum": ["a", "b"]}), "c") == [
            'enum: "c" is not one of ["a","b"] at <root>'
        ]
        assert messages(compile_plan({"const": 1}), 2) == ["const: expected 1, got 2 at <root>"]

    @pytest.mark.parametrize(
        "schema, instance, message",
        [
            ({"minimum": 3}, 2, "minimum: 2 is less than the minimum of 3 at <root>"),
            ({"maximum": 3}, 4, "maximum: 4 is greater than the maximum of 3 at <root>"),
            (
                {"exclusiveMinimum": 3},
                3,
                "exclusiveMinimum: 3 is less than or equal to the exclusive minimum of 3 at <root>",
            ),
            (
                {"exclusiveMaximum": 1.5},
                1.5,
                "exclusiveMaximum: 1.5 is greater than or equal to the exclusive maximum of 1.5 at <root>",
            ),
            (
                {"$schema": DRAFT4, "minimum": 5, "exclusiveMinimum": True},
                5,
                "exclusiveMinimum: 5 is less than or equal to the exclusive minimum of 5 at <root>",
            ),
            ({"multipleOf": 2}, 3, "multipleOf: 3 is not a multiple of 2 at <root>"),
        ],
    )
    def test_numeric(self, compile_plan, schema, instance, message):
        assert messages(compile_plan(schema), instance) == [message]

    def test_sizes(self, compile_plan):
        assert messages(compile_plan({"maxLength": 5}), "foobar") == [
            'maxLength: "foobar" is longer than 5 characters at <root>'
        ]
        assert messages(compile_plan({"minLength": 2}), "a") == [
            'minLength: "a" is shorter than 2 characters at <root>'
        ]
        assert messages(compile_plan({"minItems": 2}), [1]) == [
            "minItems: array has fewer than 2 items at <root>"
        ]
        assert messages(compile_plan({"maxProperties": 1}), {"a": 1, "b": 2}) == [
            "maxProperties: object has more than 1 properties at <root>"
        ]

    def test_pattern_and_unique_items(self, compile_plan):
        assert messages(compile_plan({"pattern": "^a"}), "ba") == [
            "pattern: \"ba\" does not match pattern '^a' at <root>"
        ]
        assert messages(compile_plan({"uniqueItems": True}), [1, 2, 1.0]) == [
            "uniqueItems: array has non-unique items at indices 0 and 2 at <root>"
        ]

    def test_required_reports_every_missing_property(self, compile_plan):
        assert messages(compile_plan({"required": ["a", "b", "c"]}), {"b": 1}) == [
            "required: missing required property 'a' at <root>",
            "required: missing required property 'c' at <root>",
        ]

    def test_dependencies(self, compile_plan):
        plan = compile_plan({"$schema": DRAFT7, "dependencies": {"a": ["b"], "c": {"required": ["d"]}}})
        assert messages(plan, {"a": 1, "c": 2}) == [
            "dependencies: property 'b' is required when 'a' is present at <root>",
            "required: missing required property 'd' at <root>",
        ]
        errors = validate_detailed(plan, {"a": 1})
        assert errors[0].schema_path == ("dependencies", "a")

    def test_dependent_required(self, compile_plan):
        assert messages(compile_plan({"dependentRequired": {"a": ["b"]}}), {"a": 1}) == [
            "dependentRequired: property 'b' is required when 'a' is present at <root>"
        ]

    def test_additional_properties_false_reports_at_property(self, compile_plan):
        plan = compile_plan({
            "properties": {"name": {"type": "string"}},
            "patternProperties": {"^x-": {}},
            "additionalProperties": False,
        })
        errors = validate_detailed(plan, {"name": "n", "x-tag": 1, "extra": True})
        assert [error.message for error in errors] == [
            "additionalProperties: additional property 'extra' is not allowed at /extra"
        ]
        assert errors[0].instance_path == ("extra",)
        assert errors[0].schema_path == ("additionalProperties",)
        assert errors[0].keyword == "additionalProperties"

    def test_additional_properties_schema(self, compile_plan):
        plan = compile_plan({"properties": {"a": {}}, "additionalProperties": {"type": "integer"}})
        errors = validate_detailed(plan, {"a": "x", "b": "y"})
        assert [error.message for error in errors] == ["type: expected integer, got string at /b"]
        assert errors[0].schema_path == ("additionalProperties", "type")

    def test_pattern_properties_schema_path(self, compile_plan):
        plan = compile_plan({"patternProperties": {"^x-": {"type": "string"}}})
        (error,) = validate_detailed(plan, {"x-a": 1})
        assert error.instance_path == ("x-a",)
        assert error.schema_path == ("patternProperties", "^x-", "type")

    def test_property_names(self, compile_plan):
        assert messages(compile_plan({"propertyNames": {"maxLength": 3}}), {"abcd": 1}) == [
            'maxLength: "abcd" is longer than 3 characters at <root>'
        ]

    def test_false_schema(self, compile_plan):
        assert messages(compile_plan(False), 1) == ["false: 1 is not allowed by a false schema at <root>"]
        errors = validate_detailed(compile_plan({"properties": {"a": False}}), {"a": 1})
        assert [error.message for error in errors] == ["false: 1 is not allowed by a false schema at /a"]
        assert errors[0].keyword == "false"

    def test_format(self, compile_plan):
        assert messages(compile_plan({"format": "ipv4"}), "x") == [
            "format: \"x\" is not a valid 'ipv4' at <root>"
        ]
        assert is_valid(compile_plan({"format": "ipv4"}), 5)
        plan = compile_schema({"format": "ipv4"}, config=EngineConfig(validate_formats=False))
        assert is_valid(plan, "x")


class TestArrays:
    def test_prefix_items_and_rest(self, compile_plan):
        plan = compile_plan({"prefixItems": [{"type": "integer"}, {"type": "string"}], "items": False})
        assert messages(plan, [1, "a", True]) == ["items: array has 3 items, at most 2 allowed at <root>"]
        errors = validate_detailed(plan, [1, 2])
        assert [error.message for error in errors] == ["type: expected string, got integer at /1"]
        assert errors[0].schema_path == ("prefixItems", 1, "type")

    def test_draft7_tuple_items(self, compile_plan):
        plan = compile_plan({
            "$schema": DRAFT7,
            "items": [{"type": "integer"}],
            "additionalItems": {"type": "string"},
        })
        (error,) = validate_detailed(plan, [1, "a", 2])
        assert error.instance_path == (2,)
        assert error.schema_path == ("additionalItems", "type")
        assert error.instance_pointer == "/2"

    def test_items_schema_reports_each_element(self, compile_plan):
        plan = compile_plan({"items": {"type": "integer"}})
        assert messages(plan, [1, "a", 2, "b"]) == [
            "type: expected integer, got string at /1",
            "type: expected integer, got string at /3",
        ]

    def test_contains(self, compile_plan):
        plan = compile_plan({"contains": {"type": "integer"}})
        assert messages(plan, ["a"]) == [
            "contains: array does not contain any item matching the contains schema at <root>"
        ]
        assert messages(plan, []) == messages(plan, ["a"])

    def test_min_and_max_contains(self, compile_plan):
        plan = compile_plan({"contains": {"type": "integer"}, "minContains": 2, "maxContains": 3})
        assert is_valid(plan, [1, "a", 2])
        assert messages(plan, [1, "a"]) == [
            "minContains: array contains 1 matching items, fewer than 2 at <root>"
        ]
        assert messages(plan, [1, 2, 3, 4]) == [
            "maxContains: array contains 4 matching items, more than 3 at <root>"
        ]

    def test_2019_09_supports_min_contains(self, compile_plan):
        plan = compile_plan({"$schema": DRAFT2019, "contains": {"const": 1}, "minContains": 2})
        assert not is_valid(plan, [1])


def test_detailed_report_is_complete_and_ordered(compile_plan):
    plan = compile_plan({
        "type": "object",
        "required": ["a"],
        "properties": {"b": {"type": "string"}, "c": {"type": "integer"}},
        "minProperties": 5,
    })
    assert messages(plan, {"c": "x", "b": 1}) == [
        "required: missing required property 'a' at <root>",
        "minProperties: object has fewer than 5 properties at <root>",
        "type: expected integer, got string at /c",
        "type: expected string, got integer at /b",
    ]
