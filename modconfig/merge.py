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

"""Config source merging for modconfig.

Sources are merged left to right with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from the later source override)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans, None)

Dictionary-shaped values (arbitrary-keyed maps) are plain dicts at this
level and therefore merge key by key like any other dict.

Merging never mutates the sources and the result shares no containers with
them, so callers may fill defaults into the result in place.

Example:
    >>> merge_for_module("foo-module", [
    ...     {"foo-module": {"a": 1, "nested": {"x": 1}}},
    ...     {"other": {"ignored": True}},
    ...     {"foo-module": {"nested": {"y": 2}}},
    ... ])
    {'a': 1, 'nested': {'x': 1, 'y': 2}}
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import copy
from typing import Any


def deep_merge_dicts(
    base: Mapping[str, Any], overlay: Mapping[str, Any]
) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = {k: copy.deepcopy(v) for k, v in base.items()}
    for k, v in overlay.items():
        if k in result and isinstance(result[k], Mapping) and isinstance(v, Mapping):
            result[k] = deep_merge_dicts(result[k], v)
        else:
            # Replace lists and scalars entirely
            result[k] = copy.deepcopy(v)
    return result


def merge_sources(sources: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Merge whole sources (all modules) in priority order."""
    merged: dict[str, Any] = {}
    for source in sources:
        merged = deep_merge_dicts(merged, source)
    return merged


def merge_for_module(
    module_id: str, sources: Iterable[Mapping[str, Any]]
) -> dict[str, Any]:
    """Merge the ``module_id`` subtree of every source in priority order.

    Args:
        module_id: Module whose config to extract.
        sources: Sources ordered from lowest to highest priority.

    Returns:
        A new dict. Sources without the module key, or whose module entry
        is not a mapping, contribute nothing; an empty dict is returned if
        none has it.
    """
    merged: dict[str, Any] = {}
    for source in sources:
        part = source.get(module_id)
        if not isinstance(part, Mapping):
            continue
        merged = deep_merge_dicts(merged, part)
    return merged
