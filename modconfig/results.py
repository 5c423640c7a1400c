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

"""Public API return types for modconfig.

This module defines dataclasses for the advisory findings of the engine and
for the result of resolving a module's configuration with its diagnostics.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Diagnostic kinds:

- unknown_key: A provided key has no matching schema entry
- validator_failure: A validator function returned an error string
- malformed_schema: A schema node is not a mapping, or a validator entry
  is not callable
- array_shape: A value declared as an array is not a list
- object_shape: A value declared as a nested object is not a mapping
- dictionary_shape: A value declared as a dictionary is not a mapping

Example:
    Inspecting diagnostics:
        ```python
        result = await engine.resolve("foo-module")
        for diagnostic in result.diagnostics:
            print(f"{diagnostic.kind}: {diagnostic.message}")
        ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

UNKNOWN_KEY = "unknown_key"
VALIDATOR_FAILURE = "validator_failure"
MALFORMED_SCHEMA = "malformed_schema"
ARRAY_SHAPE = "array_shape"
OBJECT_SHAPE = "object_shape"
DICTIONARY_SHAPE = "dictionary_shape"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found in a schema or a provided config.

    Attributes:
        kind: One of the kind constants in this module.
        key_path: Dotted/indexed path of the offending node
            (e.g. "foo-module.links[2].url").
        message: Human-readable description, as logged.
        value: The offending value, when there is one.
    """

    kind: str
    key_path: str
    message: str
    value: Any = None


@dataclass(frozen=True)
class ResolveResult:
    """Result from resolving a module's configuration.

    Attributes:
        module_id: Module the config was resolved for.
        config: Merged, validated and defaulted config.
        diagnostics: Advisory findings from validation, in the order found.
    """

    module_id: str
    config: dict[str, Any]
    diagnostics: list[Diagnostic] = field(default_factory=list)
