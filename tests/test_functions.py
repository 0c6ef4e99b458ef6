"""Tests for the database-style facade functions."""

import pytest

from pg_jsonschema import (
    EngineConfig,
    SchemaFunctions,
    json_matches_schema,
    jsonb_matches_schema,
    validate_json_schema,
    validate_jsonb_schema,
)
from pg_jsonschema.engine.cache import PlanCache
from pg_jsonschema.exceptions import CompileError, DocumentError


def test_json_matches_schema_max_length():
    assert json_matches_schema('{"maxLength": 5}', '"foo"')
    assert not json_matches_schema('{"maxLength": 5}', '"foobar"')


def test_jsonb_matches_schema_max_length():
    assert jsonb_matches_schema({"maxLength": 5}, "foo")
    assert not jsonb_matches_schema({"maxLength": 5}, "foobar")


def test_object_type():
    assert json_matches_schema('{"type": "object"}', "{}")
    assert not json_matches_schema('{"type": "object"}', "1")
    assert jsonb_matches_schema('{"type": "object"}', {})
    assert not jsonb_matches_schema('{"type": "object"}', 1)


def test_validate_returns_messages():
    assert validate_json_schema('{"type": "object"}', "{}") == []
    assert validate_json_schema('{"type": "object"}', "1") == ["type: expected object, got integer at <root>"]
    assert validate_jsonb_schema({"type": "object"}, []) == ["type: expected object, got array at <root>"]
    assert validate_jsonb_schema({"maxLength": 5}, "foobar") == [
        'maxLength: "foobar" is longer than 5 characters at <root>'
    ]


def test_validate_reports_compile_error_as_message():
    assert validate_jsonb_schema({"type": 5}, {}) == [
        "type: expected a type name or a non-empty array of type names, got number"
    ]


def test_matches_raises_on_invalid_schema():
    with pytest.raises(CompileError):
        jsonb_matches_schema({"type": 5}, {})


def test_invalid_json_text():
    with pytest.raises(DocumentError):
        json_matches_schema("{}", "not json")
    with pytest.raises(DocumentError):
        validate_json_schema("{", "1")


def test_decimal_precision_from_text():
    assert json_matches_schema('{"multipleOf": 0.01}', "19.99")
    assert json_matches_schema('{"type": "integer"}', "1.0")


def test_explicit_cache():
    cache = PlanCache(config=EngineConfig())
    assert validate_jsonb_schema({"minimum": 1}, 0, cache=cache) == ["minimum: 0 is less than the minimum of 1 at <root>"]
    assert jsonb_matches_schema({"minimum": 1}, 2, cache=cache)
    assert json_matches_schema('{"minimum": 1}', "3", cache=cache)
    assert (cache.hits, cache.misses) == (2, 1)


class TestSchemaFunctions:
    def test_plans_are_cached(self):
        functions = SchemaFunctions(EngineConfig())
        assert functions.json_matches_schema('{"maxLength": 5}', '"foo"')
        assert not functions.jsonb_matches_schema('{"maxLength": 5}', "foobar")
        assert functions.validate_jsonb_schema({"maxLength": 5}, "foobar") == [
            'maxLength: "foobar" is longer than 5 characters at <root>'
        ]
        assert functions.validate_json_schema({"maxLength": 5}, '"ok"') == []
        assert len(functions.cache) == 1
        assert functions.cache.hits == 3

    def test_cache_can_be_disabled(self):
        functions = SchemaFunctions(EngineConfig(cache_enabled=False))
        assert functions.cache is None
        assert functions.jsonb_matches_schema({"type": "string"}, "x")

    def test_uses_its_configuration(self):
        strict = SchemaFunctions(EngineConfig(strict_keywords=True))
        assert strict.validate_jsonb_schema({"maxlength": 1}, "x") == ["maxlength: unknown keyword for dialect 2020-12"]
        lenient = SchemaFunctions(EngineConfig(validate_formats=False))
        assert lenient.jsonb_matches_schema({"format": "email"}, "nope")
