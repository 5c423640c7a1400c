# Copyright 2025 Roger Cibrian
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

"""Config validation module.

This module walks a module's merged config alongside its schema and reports
everything that does not fit. Validation is advisory: problems are logged
and returned as Diagnostic records, and the config is left untouched so the
module still receives a (possibly imperfect) config object.

Validation Checks:

- Every provided key exists in the schema (unknown keys are reported)
- Validator functions declared on a node pass for its value
- Nested objects are validated recursively
- Every entry of a dictionary node is validated against its element schema
- Array nodes hold lists; each element is validated against the element
  schema

Strict Mode:
    With ``strict=True`` an unknown key at the top level raises
    ConfigSchemaError instead of being reported. Nested unknown keys are
    always reported only.

Example:
    Validate a merged config and handle results:
        ```python
        from modconfig.schema import parse_schema
        from modconfig.validation import validate_config

        schema = parse_schema("foo-module", {"foo": {"default": "qux"}})
        diagnostics = validate_config(schema, {"bar": "baz"}, "foo-module")
        for diagnostic in diagnostics:
            print(diagnostic.message)
        # Unknown config key 'foo-module.bar' provided. Ignoring.
        ```

"""

from __future__ import annotations

from collections.abc import Mapping
import json
from typing import Any

from modconfig.exceptions import ConfigError, ConfigSchemaError
from modconfig.logging import Logger, get_global_logger
from modconfig.results import (
    ARRAY_SHAPE,
    DICTIONARY_SHAPE,
    OBJECT_SHAPE,
    UNKNOWN_KEY,
    VALIDATOR_FAILURE,
    Diagnostic,
)
from modconfig.schema import (
    ArrayNode,
    DictionaryNode,
    ObjectNode,
    SchemaNode,
    Validator,
    join_key_path,
)

__all__ = ["ConfigValidator", "validate_config"]


def _format_value(value: Any) -> str:
    if isinstance(value, (Mapping, list, tuple)) or value is None:
        return json.dumps(value, default=repr)
    return str(value)


class ConfigValidator:
    """Recursive validator for one config tree.

    Args:
        logger: Logger for diagnostics. Defaults to the global logger.
        strict: Raise ConfigSchemaError on unknown top-level keys.

    Attributes:
        diagnostics: Findings accumulated by validate(), in the order found.
    """

    def __init__(self, logger: Logger | None = None, strict: bool = False) -> None:
        self.logger = logger or get_global_logger()
        self.strict = strict
        self.diagnostics: list[Diagnostic] = []

    def validate(
        self, schema: ObjectNode, config: Mapping[str, Any], key_path: str = ""
    ) -> list[Diagnostic]:
        """Validate ``config`` against ``schema``.

        Args:
            schema: Root object schema.
            config: Merged config for the module (without the module key).
            key_path: Prefix for reported paths, normally the module id.

        Returns:
            The diagnostics found by this call.

        Raises:
            ConfigSchemaError: Strict mode only, for an unknown top-level key.
            ConfigError: If a validator function raises.
        """
        start = len(self.diagnostics)
        self._validate_object(schema, config, key_path, top_level=True)
        return self.diagnostics[start:]

    def _report(self, kind: str, key_path: str, message: str, value: Any) -> None:
        self.logger.warning("VALIDATE", message)
        self.diagnostics.append(Diagnostic(kind, key_path, message, value))

    def _validate_object(
        self,
        schema: ObjectNode,
        config: Mapping[str, Any],
        key_path: str,
        top_level: bool = False,
    ) -> None:
        for key, value in config.items():
            this_key_path = join_key_path(key_path, key)
            node = schema.children.get(key)
            if node is None:
                if self.strict and top_level:
                    raise ConfigSchemaError(this_key_path)
                self._report(
                    UNKNOWN_KEY,
                    this_key_path,
                    f"Unknown config key '{this_key_path}' provided. Ignoring.",
                    value,
                )
                continue
            self._validate_value(node, value, this_key_path)

    def _validate_value(self, node: SchemaNode, value: Any, key_path: str) -> None:
        self._run_validators(node.validators, value, key_path)

        if isinstance(node, ObjectNode):
            if isinstance(value, Mapping):
                self._validate_object(node, value, key_path)
            else:
                self._report(
                    OBJECT_SHAPE,
                    key_path,
                    f"Invalid configuration value {_format_value(value)} for "
                    f"{key_path}: value must be an object.",
                    value,
                )
        elif isinstance(node, DictionaryNode):
            if isinstance(value, Mapping):
                for entry_key, entry in value.items():
                    self._validate_value(
                        node.elements, entry, join_key_path(key_path, str(entry_key))
                    )
            else:
                self._report(
                    DICTIONARY_SHAPE,
                    key_path,
                    f"Invalid configuration value {_format_value(value)} for "
                    f"{key_path}: value must be a dictionary.",
                    value,
                )
        elif isinstance(node, ArrayNode):
            if not isinstance(value, list):
                self._report(
                    ARRAY_SHAPE,
                    key_path,
                    f"Invalid configuration value {_format_value(value)} for "
                    f"{key_path}: value must be an array.",
                    value,
                )
                return
            for index, element in enumerate(value):
                self._validate_value(node.elements, element, f"{key_path}[{index}]")
        # Leaf values are opaque, including dict-valued ones

    def _run_validators(
        self, validators: tuple[Validator, ...], value: Any, key_path: str
    ) -> None:
        for validator in validators:
            try:
                result = validator(value)
            except Exception as err:
                raise ConfigError(
                    f"Validator {getattr(validator, '__name__', validator)!r} "
                    f"raised for {key_path}: {err}"
                ) from err
            if isinstance(result, str):
                self._report(
                    VALIDATOR_FAILURE,
                    key_path,
                    f"Invalid configuration value {_format_value(value)} for "
                    f"{key_path}: {result}",
                    value,
                )


def validate_config(
    schema: ObjectNode,
    config: Mapping[str, Any],
    key_path: str = "",
    *,
    logger: Logger | None = None,
    strict: bool = False,
) -> list[Diagnostic]:
    """Validate a merged config tree against a module schema.

    Args:
        schema: Root object schema (see modconfig.schema.parse_schema).
        config: Merged config for the module.
        key_path: Prefix for reported paths, normally the module id.
        logger: Logger for diagnostics. Defaults to the global logger.
        strict: Raise on unknown top-level keys instead of reporting them.

    Returns:
        List of diagnostics. Empty if the config fits the schema.

    Raises:
        ConfigSchemaError: Strict mode only, for an unknown top-level key.
        ConfigError: If a validator function raises.
    """
    return ConfigValidator(logger=logger, strict=strict).validate(
        schema, config, key_path
    )
