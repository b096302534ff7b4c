"""``{{ name }}`` placeholder rendering against context variables.

A string made of a single placeholder renders to the raw variable value, so
``"{{ userId }}"`` keeps an integer id an integer. Placeholders embedded in
longer strings are formatted with ``str()``.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any

from arbor.core.errors import TemplateError

PLACEHOLDER_RE = re.compile(r"\{\{\s*(?P<name>[A-Za-z_][\w.-]*)\s*\}\}")


def _lookup(name: str, variables: Mapping[str, Any]) -> Any:
    if name not in variables:
        available = ", ".join(sorted(variables)) or "(none)"
        raise TemplateError(
            f"undefined variable {name!r}. Available: {available}",
            variable=name,
        )
    return variables[name]


def render(value: Any, variables: Mapping[str, Any]) -> Any:
    """Render placeholders in *value*, recursing into dicts and lists."""
    if isinstance(value, str):
        whole = PLACEHOLDER_RE.fullmatch(value)
        if whole:
            return copy.deepcopy(_lookup(whole.group("name"), variables))
        return PLACEHOLDER_RE.sub(
            lambda m: str(_lookup(m.group("name"), variables)), value
        )
    if isinstance(value, dict):
        return {key: render(item, variables) for key, item in value.items()}
    if isinstance(value, list):
        return [render(item, variables) for item in value]
    return value


__all__ = ["PLACEHOLDER_RE", "render"]
