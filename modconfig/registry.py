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

"""Schema registry for modconfig.

Maps module ids to their parsed root schema. Modules declare their schema
once, typically at import time; declaring again replaces the previous
schema. Lookup of an undeclared module raises SchemaNotDeclaredError.

Example:
    ```python
    registry = SchemaRegistry()
    registry.declare("testmod", {"foo": {"default": "qux"}})
    schema = registry.get("testmod")
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from modconfig.exceptions import SchemaNotDeclaredError
from modconfig.logging import Logger, get_global_logger
from modconfig.results import Diagnostic
from modconfig.schema import ObjectNode, SchemaParser


class SchemaRegistry:
    """Module id -> root ObjectNode."""

    def __init__(self) -> None:
        self._schemas: dict[str, ObjectNode] = {}

    def declare(
        self,
        module_id: str,
        declaration: Mapping[str, Any],
        logger: Logger | None = None,
    ) -> list[Diagnostic]:
        """Parse and store a schema declaration.

        Well-formedness problems are logged and the offending parts skipped;
        the schema is stored regardless.

        Returns:
            The ``malformed_schema`` diagnostics found while parsing.

        Raises:
            ConfigError: If ``declaration`` is not a mapping.
        """
        logger = logger or get_global_logger()
        parser = SchemaParser(module_id, logger)
        schema = parser.parse(declaration)
        if module_id in self._schemas:
            logger.verbose("SCHEMA", f"Replacing config schema for {module_id}")
        self._schemas[module_id] = schema
        logger.debug(
            "SCHEMA",
            f"Declared config schema for {module_id} with "
            f"{len(schema.children)} top-level key(s)",
        )
        return parser.diagnostics

    def get(self, module_id: str) -> ObjectNode:
        """Return the schema for ``module_id``.

        Raises:
            SchemaNotDeclaredError: If the module never declared a schema.
        """
        try:
            return self._schemas[module_id]
        except KeyError:
            raise SchemaNotDeclaredError(module_id) from None

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def module_ids(self) -> list[str]:
        """Declared module ids in declaration order."""
        return list(self._schemas)

    def clear(self) -> None:
        self._schemas.clear()
