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

"""Config schema model and declaration parser for modconfig.

Modules declare their configuration as nested dicts. This module turns that
declaration into a tree of explicit node variants so the merge, validation
and default passes dispatch on the node type instead of sniffing for keys.

Declaration Form
----------------
A node containing ``default`` is a value. A node containing
``array_elements`` or ``dictionary_elements`` describes a list or an
arbitrary-keyed mapping whose members conform to the element schema. Any
other node is a nested object whose non-reserved keys are child schemas.

    {
        "logo": {
            "src": {"default": None, "validators": [is_url]},
            "alt": {"default": "Logo"},
        },
        "links": {
            "default": [],
            "array_elements": {
                "label": {"default": ""},
                "url": {"default": "", "validators": [is_url]},
            },
        },
        "labels": {
            "dictionary_elements": {"validators": [is_string]},
        },
    }

The camelCase spellings ``arrayElements`` and ``dictionaryElements`` are
accepted as aliases.

Node Variants
-------------
Leaf : value with a default (freeform: a dict default is opaque)
ObjectNode : nested object of child schemas
DictionaryNode : arbitrary-keyed mapping of homogeneous values
ArrayNode : list of homogeneous values

Well-formedness problems found while parsing are logged and reported as
``malformed_schema`` diagnostics; the offending node or validator is skipped
and parsing continues.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from modconfig.exceptions import ConfigError
from modconfig.logging import Logger, get_global_logger
from modconfig.results import MALFORMED_SCHEMA, Diagnostic

Validator = Callable[[Any], Any]

RESERVED_KEYS = frozenset(
    {
        "default",
        "validators",
        "description",
        "array_elements",
        "dictionary_elements",
        "arrayElements",
        "dictionaryElements",
    }
)

# Keys that may appear on an element schema without making it structured
_ELEMENT_LEAF_KEYS = frozenset({"default", "validators", "description"})

_UPDATE_MESSAGE = (
    "Please verify that you are running the latest version and, if so, "
    "alert the maintainer."
)


# -------------------------------
# Node variants
# -------------------------------


@dataclass(frozen=True)
class Leaf:
    """A config value with a default."""

    default: Any = None
    validators: tuple[Validator, ...] = ()
    description: str | None = None


@dataclass(frozen=True)
class ObjectNode:
    """A nested config object; ``children`` maps keys to child schemas."""

    children: dict[str, SchemaNode] = field(default_factory=dict)
    validators: tuple[Validator, ...] = ()
    description: str | None = None


@dataclass(frozen=True)
class DictionaryNode:
    """An arbitrary-keyed mapping whose values conform to ``elements``."""

    elements: SchemaNode
    default: Any = field(default_factory=dict)
    validators: tuple[Validator, ...] = ()
    description: str | None = None


@dataclass(frozen=True)
class ArrayNode:
    """A list whose elements conform to ``elements``."""

    elements: SchemaNode
    default: Any = field(default_factory=list)
    validators: tuple[Validator, ...] = ()
    description: str | None = None


SchemaNode = Union[Leaf, ObjectNode, DictionaryNode, ArrayNode]


def is_structured(node: SchemaNode) -> bool:
    """Return True if values of ``node`` need structural recursion."""
    return not isinstance(node, Leaf)


def join_key_path(key_path: str, key: str) -> str:
    """Append ``key`` to a dotted key path."""
    return f"{key_path}.{key}" if key_path else key


# -------------------------------
# Declaration parser
# -------------------------------


class SchemaParser:
    """Parse one module's schema declaration into node variants.

    Args:
        module_id: Module the declaration belongs to (used in messages).
        logger: Logger for well-formedness warnings. Defaults to the
            global logger.

    Attributes:
        diagnostics: ``malformed_schema`` findings from the last parse.
    """

    def __init__(self, module_id: str, logger: Logger | None = None) -> None:
        self.module_id = module_id
        self.logger = logger or get_global_logger()
        self.diagnostics: list[Diagnostic] = []

    def parse(self, declaration: Mapping[str, Any]) -> ObjectNode:
        """Parse a root declaration. The root is always an object node.

        Raises:
            ConfigError: If ``declaration`` is not a mapping at all.
        """
        if not isinstance(declaration, Mapping):
            raise ConfigError(
                f"{self.module_id} config schema must be a mapping, "
                f"got {type(declaration).__name__}"
            )
        self.diagnostics = []
        validators = self._parse_validators(declaration, "")
        return self._parse_object(
            declaration, "", validators, declaration.get("description")
        )

    def _report(self, key_path: str, message: str, value: Any = None) -> None:
        self.logger.warning("SCHEMA", message)
        self.diagnostics.append(Diagnostic(MALFORMED_SCHEMA, key_path, message, value))

    def _parse_node(self, declaration: Mapping[str, Any], key_path: str) -> SchemaNode:
        validators = self._parse_validators(declaration, key_path)
        description = declaration.get("description")

        array_elements = _lookup(declaration, "array_elements", "arrayElements")
        if array_elements is not None:
            return ArrayNode(
                elements=self._parse_element(array_elements, f"{key_path}[]"),
                default=declaration["default"] if "default" in declaration else [],
                validators=validators,
                description=description,
            )

        dictionary_elements = _lookup(
            declaration, "dictionary_elements", "dictionaryElements"
        )
        if dictionary_elements is not None:
            return DictionaryNode(
                elements=self._parse_element(dictionary_elements, f"{key_path}.*"),
                default=declaration["default"] if "default" in declaration else {},
                validators=validators,
                description=description,
            )

        if "default" in declaration:
            return Leaf(declaration["default"], validators, description)

        return self._parse_object(declaration, key_path, validators, description)

    def _parse_object(
        self,
        declaration: Mapping[str, Any],
        key_path: str,
        validators: tuple[Validator, ...],
        description: str | None,
    ) -> ObjectNode:
        children: dict[str, SchemaNode] = {}
        for key, child in declaration.items():
            if key in RESERVED_KEYS:
                continue
            this_key_path = join_key_path(key_path, key)
            if not isinstance(child, Mapping):
                self._report(
                    this_key_path,
                    f"{self.module_id} has bad config schema definition for key "
                    f"'{this_key_path}'. {_UPDATE_MESSAGE}",
                    child,
                )
                continue
            children[key] = self._parse_node(child, this_key_path)
        return ObjectNode(children, validators, description)

    def _parse_element(self, declaration: Any, key_path: str) -> SchemaNode:
        if not isinstance(declaration, Mapping):
            self._report(
                key_path,
                f"{self.module_id} has bad element schema for key '{key_path}'. "
                f"{_UPDATE_MESSAGE}",
                declaration,
            )
            return Leaf()
        if set(declaration) - _ELEMENT_LEAF_KEYS:
            return self._parse_node(declaration, key_path)
        return Leaf(
            declaration.get("default"),
            self._parse_validators(declaration, key_path),
            declaration.get("description"),
        )

    def _parse_validators(
        self, declaration: Mapping[str, Any], key_path: str
    ) -> tuple[Validator, ...]:
        raw = declaration.get("validators")
        if raw is None:
            return ()
        if not isinstance(raw, (list, tuple)):
            self._report(
                key_path,
                f"{self.module_id} has invalid validators for key '{key_path}'. "
                f"validators must be a list, received {raw!r}. {_UPDATE_MESSAGE}",
                raw,
            )
            return ()
        validators = []
        for validator in raw:
            if not callable(validator):
                self._report(
                    key_path,
                    f"{self.module_id} has invalid validator for key '{key_path}'. "
                    f"{_UPDATE_MESSAGE} If you're the maintainer: validators must be "
                    f"functions that return either None or an error string. "
                    f"Received {validator!r}.",
                    validator,
                )
                continue
            validators.append(validator)
        return tuple(validators)


def _lookup(declaration: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in declaration:
            return declaration[name]
    return None


def parse_schema(
    module_id: str, declaration: Mapping[str, Any], logger: Logger | None = None
) -> ObjectNode:
    """Parse a schema declaration, logging any well-formedness problems.

    Args:
        module_id: Module the declaration belongs to.
        declaration: Nested-dict schema declaration.
        logger: Logger for warnings. Defaults to the global logger.

    Returns:
        The root ObjectNode.

    Raises:
        ConfigError: If ``declaration`` is not a mapping.

    Example:
        ```python
        schema = parse_schema("testmod", {"foo": {"default": "qux"}})
        assert schema.children["foo"] == Leaf("qux")
        ```
    """
    return SchemaParser(module_id, logger).parse(declaration)
