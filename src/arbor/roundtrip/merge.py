"""Field-level merge of a round-trip override onto its inherited template."""

from __future__ import annotations

import copy
from typing import TypeVar

from pydantic import BaseModel

from arbor.core.errors import MergeError
from arbor.roundtrip.models import RoundTrip

M = TypeVar("M", bound=BaseModel)

# Mapping fields merge key by key; every other field is replaced wholesale.
MAPPING_FIELDS = frozenset({"headers", "query", "variables"})


def merge_model(template: M, override: M) -> M:
    """Return *template* with every field explicitly set on *override* applied.

    Nested models are merged recursively. Neither argument is mutated.
    """
    if type(template) is not type(override):
        raise MergeError(
            f"cannot merge {type(override).__name__} onto {type(template).__name__}"
        )

    updates = {}
    for name in override.model_fields_set:
        new = getattr(override, name)
        old = getattr(template, name)
        if isinstance(new, BaseModel) and isinstance(old, BaseModel):
            updates[name] = merge_model(old, new)
        elif name in MAPPING_FIELDS and isinstance(old, dict) and isinstance(new, dict):
            updates[name] = {**copy.deepcopy(old), **copy.deepcopy(new)}
        else:
            updates[name] = copy.deepcopy(new)

    return template.model_copy(update=updates, deep=True)


def merge_round_trip(template: RoundTrip | None, override: RoundTrip | None) -> RoundTrip:
    """Merge a step's override onto the template it inherits.

    Override fields take precedence; fields the override leaves unset fall
    back to the template.
    """
    if template is None and override is None:
        return RoundTrip()
    if template is None:
        return override.model_copy(deep=True)
    if override is None:
        return template.model_copy(deep=True)
    return merge_model(template, override)


__all__ = ["MAPPING_FIELDS", "merge_model", "merge_round_trip"]
