"""
Tests for modconfig.validation module.

This module tests advisory validation of merged configs: unknown keys,
validator functions, nested objects, dictionaries and arrays, and the
strict top-level mode.
"""

from __future__ import annotations

import pytest

from modconfig.exceptions import ConfigError, ConfigSchemaError
from modconfig.results import (
    ARRAY_SHAPE,
    DICTIONARY_SHAPE,
    OBJECT_SHAPE,
    UNKNOWN_KEY,
    VALIDATOR_FAILURE,
)
from modconfig.schema import parse_schema
from modconfig.validation import ConfigValidator, validate_config


def _is_string(value):
    if not isinstance(value, str):
        return "must be a string"
    return None


def _is_positive(value):
    if not isinstance(value, int) or value <= 0:
        return "must be a positive integer"
    return None


class TestUnknownKeys:
    """Tests for keys missing from the schema."""

    def test_unknown_key_is_reported(self, logger):
        """Test that an unknown key is logged with its full path."""
        schema = parse_schema("foo-module", {"foo": {"default": "qux"}}, logger)
        config = {"bar": "baz"}

        diagnostics = validate_config(schema, config, "foo-module", logger=logger)

        assert len(diagnostics) == 1
        assert diagnostics[0].kind == UNKNOWN_KEY
        assert diagnostics[0].key_path == "foo-module.bar"
        assert "Unknown config key 'foo-module.bar' provided" in logger.warning_text()
        # Value is reported, not removed
        assert config == {"bar": "baz"}

    def test_nested_unknown_key(self, logger):
        """Test that unknown keys inside nested objects are reported."""
        schema = parse_schema("mod", {"logo": {"src": {"default": ""}}}, logger)

        diagnostics = validate_config(
            schema, {"logo": {"src": "a", "size": 3}}, "mod", logger=logger
        )

        assert [d.key_path for d in diagnostics] == ["mod.logo.size"]

    def test_known_keys_pass(self, logger, sample_schema):
        """Test that a conforming config produces no diagnostics."""
        schema = parse_schema("mod", sample_schema, logger)
        config = {
            "title": "Welcome",
            "logo": {"src": "https://example.com/a.png"},
            "links": [{"label": "A", "url": "/a"}],
            "labels": {"greeting": {"text": "hi"}},
            "extra": {"anything": ["goes"]},
        }

        assert validate_config(schema, config, "mod", logger=logger) == []
        assert logger.warnings == []


class TestValidators:
    """Tests for validator functions."""

    def test_failing_validator_is_reported(self, logger):
        """Test that a returned error string becomes a diagnostic."""
        schema = parse_schema(
            "mod", {"count": {"default": 1, "validators": [_is_positive]}}, logger
        )

        diagnostics = validate_config(schema, {"count": -2}, "mod", logger=logger)

        assert len(diagnostics) == 1
        assert diagnostics[0].kind == VALIDATOR_FAILURE
        assert diagnostics[0].value == -2
        assert diagnostics[0].message == (
            "Invalid configuration value -2 for mod.count: must be a positive integer"
        )

    def test_object_values_rendered_as_json(self, logger):
        """Test that structured values are rendered as JSON in messages."""
        schema = parse_schema(
            "mod", {"name": {"default": "", "validators": [_is_string]}}, logger
        )

        diagnostics = validate_config(
            schema, {"name": {"first": "Ada"}}, "mod", logger=logger
        )

        assert '{"first": "Ada"}' in diagnostics[0].message

    def test_every_validator_runs(self, logger):
        """Test that all validators of a node run, in order."""
        schema = parse_schema(
            "mod",
            {"count": {"default": 1, "validators": [_is_string, _is_positive]}},
            logger,
        )

        diagnostics = validate_config(schema, {"count": 0}, "mod", logger=logger)

        assert [d.message.split(": ")[-1] for d in diagnostics] == [
            "must be a string",
            "must be a positive integer",
        ]

    def test_non_string_result_passes(self, logger):
        """Test that only string results count as failures."""
        schema = parse_schema(
            "mod",
            {"count": {"default": 1, "validators": [lambda v: False, lambda v: 0]}},
            logger,
        )

        assert validate_config(schema, {"count": 5}, "mod", logger=logger) == []

    def test_raising_validator_is_fatal(self, logger):
        """Test that a validator that raises surfaces as ConfigError."""

        def broken(value):
            raise RuntimeError("boom")

        schema = parse_schema("mod", {"x": {"default": 1, "validators": [broken]}}, logger)

        with pytest.raises(ConfigError, match="boom"):
            validate_config(schema, {"x": 2}, "mod", logger=logger)


class TestStructures:
    """Tests for nested objects, dictionaries and arrays."""

    def test_freeform_leaf_is_not_recursed(self, logger):
        """Test that a dict value under a leaf is opaque."""
        schema = parse_schema("mod", {"extra": {"default": {"a": 1}}}, logger)

        diagnostics = validate_config(
            schema, {"extra": {"unknown": 1}}, "mod", logger=logger
        )

        assert diagnostics == []

    def test_object_with_scalar_value(self, logger):
        """Test that a scalar where an object is declared is reported."""
        schema = parse_schema("mod", {"logo": {"src": {"default": ""}}}, logger)

        diagnostics = validate_config(schema, {"logo": "a.png"}, "mod", logger=logger)

        assert [d.kind for d in diagnostics] == [OBJECT_SHAPE]

    def test_dictionary_entries_validated(self, logger):
        """Test that each dictionary entry is validated at its dynamic key."""
        schema = parse_schema(
            "mod",
            {
                "labels": {
                    "dictionary_elements": {
                        "text": {"default": "", "validators": [_is_string]}
                    }
                }
            },
            logger,
        )

        diagnostics = validate_config(
            schema,
            {"labels": {"greeting": {"text": 5}, "farewell": {"txt": "bye"}}},
            "mod",
            logger=logger,
        )

        assert [(d.kind, d.key_path) for d in diagnostics] == [
            (VALIDATOR_FAILURE, "mod.labels.greeting.text"),
            (UNKNOWN_KEY, "mod.labels.farewell.txt"),
        ]

    def test_dictionary_leaf_elements(self, logger):
        """Test that leaf element validators run on every entry value."""
        schema = parse_schema(
            "mod",
            {"labels": {"dictionary_elements": {"validators": [_is_string]}}},
            logger,
        )

        diagnostics = validate_config(
            schema, {"labels": {"a": "ok", "b": 2}}, "mod", logger=logger
        )

        assert [d.key_path for d in diagnostics] == ["mod.labels.b"]

    def test_dictionary_with_non_mapping(self, logger):
        """Test that a non-mapping dictionary value is reported."""
        schema = parse_schema(
            "mod", {"labels": {"dictionary_elements": {"default": ""}}}, logger
        )

        diagnostics = validate_config(schema, {"labels": ["a"]}, "mod", logger=logger)

        assert [d.kind for d in diagnostics] == [DICTIONARY_SHAPE]

    def test_array_must_be_list(self, logger):
        """Test that a non-list array value is reported and not recursed."""
        schema = parse_schema(
            "mod",
            {"tags": {"default": [], "array_elements": {"validators": [_is_string]}}},
            logger,
        )

        diagnostics = validate_config(schema, {"tags": "a,b"}, "mod", logger=logger)

        assert len(diagnostics) == 1
        assert diagnostics[0].kind == ARRAY_SHAPE
        assert "value must be an array" in diagnostics[0].message

    def test_array_element_validators(self, logger):
        """Test that element validators run on every element with its index."""
        schema = parse_schema(
            "mod",
            {"tags": {"default": [], "array_elements": {"validators": [_is_string]}}},
            logger,
        )

        diagnostics = validate_config(
            schema, {"tags": ["a", 1, "b", None]}, "mod", logger=logger
        )

        assert [d.key_path for d in diagnostics] == ["mod.tags[1]", "mod.tags[3]"]

    def test_array_of_objects_validated_structurally(self, logger):
        """Test that structured array elements are validated key by key."""
        schema = parse_schema(
            "mod",
            {
                "links": {
                    "default": [],
                    "array_elements": {
                        "url": {"default": "/", "validators": [_is_string]},
                    },
                }
            },
            logger,
        )

        diagnostics = validate_config(
            schema,
            {"links": [{"url": "/a"}, {"url": 3}, {"href": "/c"}]},
            "mod",
            logger=logger,
        )

        assert [(d.kind, d.key_path) for d in diagnostics] == [
            (VALIDATOR_FAILURE, "mod.links[1].url"),
            (UNKNOWN_KEY, "mod.links[2].href"),
        ]


class TestStrictMode:
    """Tests for strict top-level validation."""

    def test_strict_raises_on_unknown_top_level_key(self, logger):
        """Test that strict mode raises a schema error."""
        schema = parse_schema("foo-module", {"foo": {"default": "qux"}}, logger)

        with pytest.raises(ConfigSchemaError, match="schema") as exc_info:
            validate_config(
                schema, {"bar": "baz"}, "foo-module", logger=logger, strict=True
            )

        assert exc_info.value.key_path == "foo-module.bar"

    def test_strict_still_reports_nested_unknown_keys(self, logger):
        """Test that strict mode only raises at the top level."""
        schema = parse_schema("mod", {"logo": {"src": {"default": ""}}}, logger)

        diagnostics = validate_config(
            schema, {"logo": {"size": 3}}, "mod", logger=logger, strict=True
        )

        assert [d.kind for d in diagnostics] == [UNKNOWN_KEY]

    def test_validator_accumulates_across_calls(self, logger):
        """Test that a ConfigValidator keeps all diagnostics it found."""
        schema = parse_schema("mod", {"foo": {"default": 1}}, logger)
        validator = ConfigValidator(logger=logger)

        first = validator.validate(schema, {"a": 1}, "mod")
        second = validator.validate(schema, {"b": 1}, "mod")

        assert len(first) == 1
        assert len(second) == 1
        assert len(validator.diagnostics) == 2
