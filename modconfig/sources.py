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

"""Config source store for modconfig.

Holds the sources that feed config resolution, in priority order:

1. **External source** (lowest priority)
   - Loaded once from the deployment (see modconfig.loader)
   - Always loses to explicitly provided sources, whenever it arrives

2. **Provided sources** (in provide() order)
   - Supplied by the host application, tests, or runtime overrides
   - A later source overrides an earlier one

Sources are not validated when provided; validation happens per module at
resolution time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from modconfig.exceptions import ConfigError

Source = Mapping[str, Any]


class SourceStore:
    """Ordered config sources plus a lowest-priority external slot."""

    def __init__(self) -> None:
        self._provided: list[Source] = []
        self._external: Source | None = None

    def provide(self, source: Source) -> None:
        """Append an explicitly provided source (highest priority so far).

        Raises:
            ConfigError: If ``source`` is not a mapping keyed by module id.
        """
        if not isinstance(source, Mapping):
            raise ConfigError(
                f"Config source must be a mapping of module id to config, "
                f"got {type(source).__name__}"
            )
        self._provided.append(source)

    def set_external(self, source: Source) -> None:
        """Fill the lowest-priority slot with the externally loaded source."""
        self._external = source

    @property
    def external(self) -> Source | None:
        return self._external

    def ordered(self) -> list[Source]:
        """All sources from lowest to highest priority."""
        if self._external is None:
            return list(self._provided)
        return [self._external, *self._provided]

    def __len__(self) -> int:
        return len(self._provided) + (self._external is not None)

    def clear(self) -> None:
        self._provided.clear()
        self._external = None
