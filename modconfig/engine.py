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

"""Config resolution orchestration for modconfig.

A ConfigEngine owns everything one application needs to resolve module
configuration: the schema registry, the source store, and the one-shot
external source loader. Hosts construct one engine and hand it to the
modules that declare or consume config; tests construct a fresh engine per
test instead of sharing state.

Resolution Steps
----------------
1. Load the external config source (first resolution only; shared by
   concurrent callers).
2. Look up the module's schema (SchemaNotDeclaredError if missing).
3. Merge the module's subtree from every source (external first, then
   provided sources in provide() order).
4. Validate the merged tree against the schema (advisory diagnostics).
5. Fill in defaults.

Validation Contract
-------------------
By default unknown keys are reported and resolution continues. Constructing
the engine with ``strict=True`` makes an unknown top-level key raise
ConfigSchemaError instead.

Module-level Functions
----------------------
For applications that want one process-wide engine, this module also keeps
a global engine (using EnvironmentProvider) and exposes define_config_schema,
provide, get_config, get_devtools_config and clear_all on top of it.

Example:
    ```python
    engine = ConfigEngine()
    engine.declare_schema("foo-module", {"foo": {"default": "qux"}})
    engine.provide({"foo-module": {"foo": "bar"}})
    config = await engine.get_config("foo-module")
    assert config == {"foo": "bar"}
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
import copy
from typing import Any

from modconfig.defaults import apply_defaults
from modconfig.loader import EnvironmentProvider, ExternalSourceLoader, SourceProvider
from modconfig.logging import Logger, get_global_logger
from modconfig.merge import merge_for_module, merge_sources
from modconfig.registry import SchemaRegistry
from modconfig.results import Diagnostic, ResolveResult
from modconfig.schema import ObjectNode, parse_schema
from modconfig.sources import Source, SourceStore
from modconfig.validation import validate_config


class ConfigEngine:
    """Schema registry, source store and loader for one application.

    Args:
        provider: Where the external "config-file" source is looked up.
            Defaults to NullProvider (no external source).
        strict: Raise ConfigSchemaError on unknown top-level config keys
            instead of reporting them.
        logger: Logger for diagnostics and progress. Defaults to the global
            logger at the time of each call.
    """

    def __init__(
        self,
        provider: SourceProvider | None = None,
        *,
        strict: bool = False,
        logger: Logger | None = None,
    ) -> None:
        self.strict = strict
        self._logger = logger
        self.registry = SchemaRegistry()
        self.sources = SourceStore()
        self.loader = ExternalSourceLoader(self.sources, provider, logger=logger)

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    def declare_schema(
        self, module_id: str, schema: Mapping[str, Any]
    ) -> list[Diagnostic]:
        """Declare (or replace) the config schema of ``module_id``.

        Malformed parts of the declaration are logged and skipped; see
        modconfig.schema.

        Returns:
            The ``malformed_schema`` diagnostics, empty for a clean schema.

        Raises:
            ConfigError: If ``schema`` is not a mapping.
        """
        return self.registry.declare(module_id, schema, self.logger)

    def provide(self, source: Source) -> None:
        """Add a config source that overrides every source provided before it.

        Raises:
            ConfigError: If ``source`` is not a mapping.
        """
        self.sources.provide(source)
        self.logger.debug(
            "SOURCES",
            f"Provided source #{len(self.sources)} for module(s): "
            f"{', '.join(map(str, source.keys())) or '(none)'}",
        )

    async def get_config(self, module_id: str) -> dict[str, Any]:
        """Resolve the config for ``module_id``.

        Returns:
            The merged, validated and defaulted config.

        Raises:
            SchemaNotDeclaredError: If ``module_id`` never declared a schema.
            ConfigSchemaError: Strict mode only, for unknown top-level keys.
            ExternalLoadError: If the external config source failed to load.
            ConfigError: If a validator function raised.
        """
        result = await self.resolve(module_id)
        return result.config

    async def resolve(self, module_id: str) -> ResolveResult:
        """Like get_config(), but also return the validation diagnostics."""
        await self.loader.ensure_loaded()
        schema = self.registry.get(module_id)
        sources = self.sources.ordered()
        self.logger.debug(
            "MERGE", f"Merging {len(sources)} source(s) for {module_id}"
        )
        merged = merge_for_module(module_id, sources)
        diagnostics = validate_config(
            schema, merged, module_id, logger=self.logger, strict=self.strict
        )
        config = apply_defaults(schema, merged)
        return ResolveResult(module_id, config, diagnostics)

    async def get_devtools_config(self) -> dict[str, dict[str, Any]]:
        """Resolve every declared module without validating.

        Intended for tooling that wants a best-effort view of the whole
        application config; unknown keys and failing validators are neither
        reported nor raised.

        Raises:
            ExternalLoadError: If the external config source failed to load.
        """
        await self.loader.ensure_loaded()
        merged = merge_sources(self.sources.ordered())
        configs: dict[str, dict[str, Any]] = {}
        for module_id in self.registry.module_ids():
            provided = merged.get(module_id)
            if not isinstance(provided, dict):
                provided = {}
            configs[module_id] = apply_defaults(self.registry.get(module_id), provided)
        return configs

    def process_config(
        self,
        schema: ObjectNode | Mapping[str, Any],
        provided: Mapping[str, Any],
        key_path: str = "",
    ) -> dict[str, Any]:
        """Validate and default a single config tree against a schema.

        Works on a copy of ``provided``; the registry and sources are not
        involved.

        Args:
            schema: A parsed ObjectNode or a schema declaration.
            provided: Config values (without the top-level module id).
            key_path: Prefix for reported paths.

        Returns:
            The defaulted config.
        """
        if not isinstance(schema, ObjectNode):
            schema = parse_schema(key_path or "<anonymous>", schema, self.logger)
        config = copy.deepcopy(dict(provided))
        validate_config(
            schema, config, key_path, logger=self.logger, strict=self.strict
        )
        return apply_defaults(schema, config)

    def clear_all(self) -> None:
        """Forget all schemas and sources and allow the external load again."""
        self.registry.clear()
        self.sources.clear()
        self.loader.reset()
        self.logger.debug("SOURCES", "Cleared all schemas and sources")


# -------------------------------
# Global engine
# -------------------------------

_global_engine = ConfigEngine(EnvironmentProvider())


def get_global_engine() -> ConfigEngine:
    """Get the process-wide engine used by the module-level functions."""
    return _global_engine


def set_global_engine(engine: ConfigEngine) -> None:
    """Replace the process-wide engine.

    Note:
        Modules that declared their schema on the previous engine must
        declare again on the new one.
    """
    global _global_engine
    _global_engine = engine


def define_config_schema(module_id: str, schema: Mapping[str, Any]) -> list[Diagnostic]:
    """Declare a module's config schema on the global engine."""
    return _global_engine.declare_schema(module_id, schema)


def provide(source: Source) -> None:
    """Provide a config source to the global engine."""
    _global_engine.provide(source)


async def get_config(module_id: str) -> dict[str, Any]:
    """Resolve a module's config on the global engine."""
    return await _global_engine.get_config(module_id)


async def get_devtools_config() -> dict[str, dict[str, Any]]:
    """Resolve every module's config on the global engine, without validating."""
    return await _global_engine.get_devtools_config()


def process_config(
    schema: ObjectNode | Mapping[str, Any],
    provided: Mapping[str, Any],
    key_path: str = "",
) -> dict[str, Any]:
    """Validate and default one config tree with the global engine's settings."""
    return _global_engine.process_config(schema, provided, key_path)


def clear_all() -> None:
    """Reset the global engine."""
    _global_engine.clear_all()
