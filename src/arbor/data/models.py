"""Directory model: group configs, cases and the loaded tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from arbor.roundtrip.models import RoundTrip


class _DataModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PresetterRef(_DataModel):
    """A presetter applied while constructing a group's context."""

    name: str = Field(..., min_length=1)
    args: dict[str, Any] = Field(default_factory=dict)


class GroupConfig(_DataModel):
    """Contents of a directory's ``_context.yaml``.

    ``flow`` holds setup round trips run once per group activation; their
    captured variables become part of the group's baseline.
    """

    summary: str = ""
    cleaner: str | None = None
    presetters: list[PresetterRef] = Field(default_factory=list)
    round_trip_template: RoundTrip | None = None
    flow: list[RoundTrip] = Field(default_factory=list)


class Case(_DataModel):
    """One leaf test: a description and its ordered flow."""

    description: str = ""
    flow: list[RoundTrip] = Field(default_factory=list)


@dataclass
class DirNode:
    """A loaded directory.

    Attributes:
        path: Directory on disk
        config: Parsed ``_context`` file (defaults when absent)
        dirs: Child groups keyed by directory name, in name order
        files: Cases keyed by file name, in name order
        case_num: Number of cases in the whole subtree
    """

    path: Path
    config: GroupConfig = field(default_factory=GroupConfig)
    dirs: dict[str, DirNode] = field(default_factory=dict)
    files: dict[str, Case] = field(default_factory=dict)
    case_num: int = 0

    @property
    def name(self) -> str:
        return self.path.name

    def walk(self):
        """Yield ``(depth, name, node)`` for this node and every descendant."""
        stack = [(0, self.name, self)]
        while stack:
            depth, name, node = stack.pop()
            yield depth, name, node
            for child_name, child in reversed(list(node.dirs.items())):
                stack.append((depth + 1, child_name, child))


__all__ = ["Case", "DirNode", "GroupConfig", "PresetterRef"]
