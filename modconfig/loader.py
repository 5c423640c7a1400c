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

"""External config source loading for modconfig.

A deployment can ship one config source of its own, addressed by the
well-known name "config-file". The loader looks it up through a pluggable
SourceProvider the first time any config is resolved, and puts it into the
SourceStore at the lowest priority.

Load Semantics
--------------
- The load is attempted at most once per engine (or since clear_all).
- Concurrent resolutions await the same pending load; there is never a
  second fetch.
- A name the provider cannot resolve is a normal outcome: nothing is added.
- A resolved location that fails to load raises ExternalLoadError, for every
  waiter and for every later resolution until the engine is cleared.

Providers
---------
NullProvider : Resolves nothing (the engine default)
ImportMapProvider : Looks the name up in a name -> location mapping
EnvironmentProvider : Takes the location from MODCONFIG_CONFIG_FILE

Locations are file paths or http(s) URLs holding a YAML or JSON document
(see modconfig.io).

Example:
    ```python
    engine = ConfigEngine(
        ImportMapProvider({"config-file": "https://cfg.example.com/app.yaml"})
    )
    config = await engine.get_config("foo-module")
    ```
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
import os
from typing import Any, Protocol

from modconfig.exceptions import ExternalLoadError
from modconfig.io import load_document
from modconfig.io.fetch import DEFAULT_TIMEOUT
from modconfig.logging import Logger, get_global_logger
from modconfig.sources import SourceStore

CONFIG_FILE_NAME = "config-file"
CONFIG_FILE_ENV = "MODCONFIG_CONFIG_FILE"


# -------------------------------
# Provider Protocol
# -------------------------------


class SourceProvider(Protocol):
    """Protocol for external config source providers."""

    def resolve(self, name: str) -> str | None:
        """Return the location of ``name``, or None if it does not exist."""
        ...

    def load(self, location: str) -> Any:
        """Load the source at ``location``. Blocking; run in a worker thread.

        Raises:
            Exception: Any failure; the loader wraps it in ExternalLoadError.
        """
        ...


class NullProvider:
    """Provider for deployments without an external config source."""

    def resolve(self, name: str) -> str | None:
        return None

    def load(self, location: str) -> Any:
        raise LookupError(f"NullProvider cannot load {location!r}")


class ImportMapProvider:
    """Resolve names through a name -> location mapping.

    Args:
        import_map: Mapping of well-known names to file paths or URLs.
        timeout: Per-request timeout for URL locations (seconds).
    """

    def __init__(
        self, import_map: Mapping[str, str], *, timeout: int = DEFAULT_TIMEOUT
    ) -> None:
        self.import_map = dict(import_map)
        self.timeout = timeout

    def resolve(self, name: str) -> str | None:
        return self.import_map.get(name) or None

    def load(self, location: str) -> Any:
        return load_document(location, timeout=self.timeout)


class EnvironmentProvider(ImportMapProvider):
    """Resolve "config-file" from an environment variable.

    The variable is read at resolution time, not at construction.
    """

    def __init__(
        self, env_var: str = CONFIG_FILE_ENV, *, timeout: int = DEFAULT_TIMEOUT
    ) -> None:
        super().__init__({}, timeout=timeout)
        self.env_var = env_var

    def resolve(self, name: str) -> str | None:
        if name != CONFIG_FILE_NAME:
            return None
        return os.environ.get(self.env_var) or None


# -------------------------------
# One-shot loader
# -------------------------------


class ExternalSourceLoader:
    """Load the external config source into a SourceStore, once.

    Args:
        store: Store whose external slot receives the loaded source.
        provider: Where to look the source up. Defaults to NullProvider.
        name: Well-known name of the source.
        logger: Logger for progress messages. Defaults to the global logger.
    """

    def __init__(
        self,
        store: SourceStore,
        provider: SourceProvider | None = None,
        *,
        name: str = CONFIG_FILE_NAME,
        logger: Logger | None = None,
    ) -> None:
        self.store = store
        self.provider = provider or NullProvider()
        self.name = name
        self._logger = logger
        self._pending: asyncio.Future[None] | None = None
        self._generation = 0

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    @property
    def attempted(self) -> bool:
        """True once a load has been started."""
        return self._pending is not None

    async def ensure_loaded(self) -> None:
        """Start the load if needed and wait for it.

        Cancelling one caller stops only that caller's wait; the shared load
        keeps running for the other waiters and later resolutions.

        Raises:
            ExternalLoadError: If the source was found but failed to load.
        """
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load())
        await asyncio.shield(self._pending)

    def reset(self) -> None:
        """Forget the previous attempt so the next resolution loads again."""
        self._pending = None
        self._generation += 1

    async def _load(self) -> None:
        generation = self._generation
        location = self.provider.resolve(self.name)
        if location is None:
            self.logger.verbose(
                "LOADER", f"No {self.name} provided; continuing without it"
            )
            return

        self.logger.verbose("LOADER", f"Loading {self.name} from {location}")
        try:
            source = await asyncio.to_thread(self.provider.load, location)
        except Exception as err:
            raise ExternalLoadError(
                f"Problem importing {self.name} from {location}: {err}"
            ) from err

        if not isinstance(source, Mapping):
            raise ExternalLoadError(
                f"{self.name} at {location} must be a mapping of module id to "
                f"config, got {type(source).__name__}"
            )
        if generation != self._generation:
            # Cleared while loading; the result belongs to a discarded session
            return
        self.store.set_external(source)
        self.logger.verbose(
            "LOADER",
            f"Loaded {self.name} with config for {len(source)} module(s)",
        )
