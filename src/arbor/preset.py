"""Presetters: named suppliers of default round-trip values.

A group config lists the presetters to apply::

    presetters:
      - name: request-header
        args:
          Content-Type: application/json
      - name: response-header
        args:
          Content-Type: application/json

Each presetter receives the group's round-trip template and returns a new
template with its defaults applied. Two header presetters are built in.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, runtime_checkable

from arbor.core.errors import PresetError
from arbor.roundtrip.merge import merge_round_trip
from arbor.roundtrip.models import Request, Response, RoundTrip


@runtime_checkable
class Presetter(Protocol):
    """Named default-value supplier applied during context construction."""

    @property
    def name(self) -> str: ...

    def preset(self, template: RoundTrip | None, args: dict[str, Any]) -> RoundTrip: ...


class PresetType(str, Enum):
    """Which side of the round trip a presetter fills in."""

    REQUEST = "request"
    RESPONSE = "response"


class HeaderPresetter:
    """Adds default headers to the request or to the expected response."""

    def __init__(self, preset_type: PresetType):
        self.preset_type = preset_type

    @property
    def name(self) -> str:
        return f"{self.preset_type.value}-header"

    def preset(self, template: RoundTrip | None, args: dict[str, Any]) -> RoundTrip:
        bad = [key for key, value in args.items() if isinstance(value, (dict, list))]
        if bad:
            raise PresetError(f"{self.name}: header values must be scalars: {', '.join(bad)}")

        headers = {key: str(value) for key, value in args.items()}
        if self.preset_type is PresetType.REQUEST:
            defaults = RoundTrip(request=Request(headers=headers))
        else:
            defaults = RoundTrip(response=Response(headers=headers))
        # Headers already on the template win over presets.
        return merge_round_trip(defaults, template)

    def __repr__(self) -> str:
        return f"HeaderPresetter({self.preset_type.value!r})"


__all__ = ["HeaderPresetter", "PresetType", "Presetter"]
