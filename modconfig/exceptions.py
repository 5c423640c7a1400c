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

"""Exception hierarchy for modconfig.

This module defines the fatal errors of the configuration engine. Everything
else the engine finds wrong with a schema or a provided value is advisory and
is reported as a Diagnostic (see modconfig.results), never raised.

- ConfigError: Bad input at the API boundary (non-mapping sources, raising
  validator functions)
- SchemaNotDeclaredError: A config was requested for a module that never
  declared a schema
- ConfigSchemaError: Strict mode found a config key the schema does not know
- ExternalLoadError: The deployment config source was located but could not
  be loaded

All exceptions inherit from ModConfigError, allowing users to catch all
engine errors with a single except clause if needed.

Example:
    Catching specific error types:
        ```python
        from modconfig import get_config
        from modconfig.exceptions import ExternalLoadError, SchemaNotDeclaredError

        try:
            config = await get_config("my-module")
        except SchemaNotDeclaredError as e:
            print(f"Module never declared a schema: {e}")
        except ExternalLoadError as e:
            print(f"Deployment config is broken: {e}")
        ```

"""

from __future__ import annotations

__all__ = [
    "ModConfigError",
    "ConfigError",
    "SchemaNotDeclaredError",
    "ConfigSchemaError",
    "ExternalLoadError",
]


class ModConfigError(Exception):
    """Base exception for all modconfig errors."""

    pass


class ConfigError(ModConfigError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - Sources that are not mappings keyed by module id
    - Validator functions that raise instead of returning an error string
    - Unreadable source files handed to the CLI
    """

    pass


class SchemaNotDeclaredError(ConfigError):
    """Raised when a config is requested for a module with no schema.

    Example:
        ```python
        try:
            await engine.get_config("fake-module")
        except SchemaNotDeclaredError as e:
            print(e)  # No config schema has been defined for fake-module
        ```
    """

    def __init__(self, module_id: str) -> None:
        super().__init__(f"No config schema has been defined for {module_id}")
        self.module_id = module_id


class ConfigSchemaError(ConfigError):
    """Raised in strict mode for a config key missing from the schema.

    Attributes:
        key_path: Dotted path of the offending key (e.g. "foo-module.bar").
    """

    def __init__(self, key_path: str) -> None:
        super().__init__(
            f"Config key '{key_path}' is not defined in the module's config schema"
        )
        self.key_path = key_path


class ExternalLoadError(ModConfigError):
    """Raised when the external config source exists but fails to load.

    Every caller awaiting the one-shot load observes the same error, and so
    does every later caller until the engine is cleared.

    Example:
        ```python
        try:
            await engine.get_config("foo-module")
        except ExternalLoadError as e:
            print(f"Problem loading config-file: {e}")
        ```
    """

    pass
