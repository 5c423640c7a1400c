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

"""Default interpolation for resolved configs.

Fills every schema-declared value missing from a merged config with the
schema's default:

- Leaf, array and dictionary nodes: the default is used when the key is absent
- Arrays with a structured element schema: defaults are applied to every
  element individually
- Nested objects: an empty dict is created when absent, then filled
- Dictionary entries are user-defined keys and are NOT defaulted

Defaults are deep-copied into the config, so mutating a resolved config
never alters the schema.
"""

from __future__ import annotations

import copy
from typing import Any

from modconfig.schema import ArrayNode, ObjectNode, SchemaNode, is_structured


def apply_defaults(schema: ObjectNode, config: dict[str, Any]) -> dict[str, Any]:
    """Recursively fill ``config`` with defaults from ``schema``.

    Mutates and returns ``config``; pass a tree nobody else holds (the
    output of modconfig.merge qualifies).
    """
    for key, node in schema.children.items():
        if isinstance(node, ObjectNode):
            if key not in config:
                config[key] = {}
            # A non-dict value here was already reported by the validator
            if isinstance(config[key], dict):
                apply_defaults(node, config[key])
            continue

        if key not in config:
            config[key] = copy.deepcopy(node.default)

        if isinstance(node, ArrayNode) and isinstance(config[key], list):
            config[key] = [_apply_element_defaults(node.elements, e) for e in config[key]]
    return config


def _apply_element_defaults(node: SchemaNode, element: Any) -> Any:
    if not is_structured(node):
        return element
    if isinstance(node, ObjectNode):
        if isinstance(element, dict):
            apply_defaults(node, element)
        return element
    if isinstance(node, ArrayNode) and isinstance(element, list):
        return [_apply_element_defaults(node.elements, e) for e in element]
    return element
