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

"""Navigation helpers for configurable links.

Modules often carry link targets in their config as templates such as
``${spa_base}/home`` so that the same config works under any deployment
prefix. This module substitutes those placeholders and dispatches the
resulting URL either to the single-page-app router or to a full page load.

Example:
    ```python
    context = NavigationContext(
        spa_base="/app/spa",
        app_base="/app",
        navigate_spa=router.push,
        assign_location=browser.assign,
    )
    navigate("${app_spa_base}/patients", context)  # router.push("/app/spa/patients")
    navigate("${app_base}/admin", context)         # browser.assign("/app/admin")
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import re
from typing import Any

_PLACEHOLDER = re.compile(r"\$\{([^}]*)\}")


def interpolate_string(template: str, params: Mapping[str, Any]) -> str:
    """Substitute ``${name}`` placeholders in ``template`` from ``params``.

    Placeholder contents are looked up as names, never evaluated, and extra
    params are ignored.

    Args:
        template: String with ``${name}`` placeholders.
        params: Substitution values; rendered with str().

    Returns:
        The substituted string.

    Raises:
        ValueError: If the template contains a backtick.
        KeyError: If a placeholder names a missing param.

    Example:
        >>> interpolate_string("test ${one} ${two} 3", {"one": 1, "two": 2})
        'test 1 2 3'
    """
    if "`" in template:
        raise ValueError("Template may not include backticks")

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1).strip()
        if name not in params:
            raise KeyError(f"Template placeholder '{name}' has no value")
        return str(params[name])

    return _PLACEHOLDER.sub(_substitute, template)


@dataclass(frozen=True)
class NavigationContext:
    """Deployment prefixes and the two ways of changing location.

    Attributes:
        spa_base: Path prefix of the single-page app (the ``spa_base`` param).
        app_base: Path prefix of the whole application.
        navigate_spa: Called with targets inside the single-page app.
        assign_location: Called with every other target (full page load).
        app_spa_base: Absolute prefix of the single-page app; defaults to
            ``spa_base``.
    """

    spa_base: str
    app_base: str
    navigate_spa: Callable[[str], Any]
    assign_location: Callable[[str], Any]
    app_spa_base: str | None = None

    @property
    def params(self) -> dict[str, str]:
        return {
            "spa_base": self.spa_base,
            "app_base": self.app_base,
            "app_spa_base": self.resolved_spa_base,
        }

    @property
    def resolved_spa_base(self) -> str:
        return self.app_spa_base if self.app_spa_base is not None else self.spa_base


def navigate(to: str, context: NavigationContext) -> str:
    """Interpolate ``to`` and navigate to it.

    Targets under the single-page-app prefix go to ``context.navigate_spa``;
    anything else goes to ``context.assign_location``.

    Returns:
        The interpolated target.
    """
    target = interpolate_string(to, context.params)
    if target.startswith(context.resolved_spa_base):
        context.navigate_spa(target)
    else:
        context.assign_location(target)
    return target
