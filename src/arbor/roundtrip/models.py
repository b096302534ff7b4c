"""Pydantic models for round-trip steps.

A round trip is one request plus the response it is expected to produce.
Case files and group context files are parsed into these models; groups
hand a *template* round trip down to their descendants and every step in a
case is an *override* merged onto that template before it runs.

Only fields that were explicitly written in the source data count as
overrides, which is why merging relies on pydantic's ``model_fields_set``
rather than on default values.

Example YAML::

    description: create a user
    request:
      method: POST
      path: /api/v1/users
      headers:
        Authorization: "Bearer {{ token }}"
      body:
        name: alice
    response:
      statusCode: 201
      body:
        name: alice
      variables:
        userId: body.id
      eventually:
        timeout: 5s
        interval: 200ms

Tags:
    arbor, roundtrip, pydantic, declarative
"""

from __future__ import annotations

import re
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

_DURATION_RE = re.compile(r"^\s*(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>ms|s|m)?\s*$")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, None: 1.0}


def parse_duration(value: Any) -> Any:
    """Convert ``"500ms"`` / ``"2s"`` / ``"1m"`` / numbers into seconds."""
    if value is None or isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        match = _DURATION_RE.match(value)
        if not match:
            raise ValueError(f"invalid duration: {value!r}")
        return float(match.group("value")) * _UNIT_SECONDS[match.group("unit")]
    return value


Duration = Annotated[float, BeforeValidator(parse_duration), Field(gt=0)]


class _Model(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Eventually(_Model):
    """Polling policy: retry the request until the response matches."""

    timeout: Duration | None = None
    interval: Duration | None = None


class Request(_Model):
    """Outbound request. Strings may contain ``{{ name }}``."""

    method: str = "GET"
    path: str = ""
    headers: dict[str, Any] = Field(default_factory=dict)
    query: dict[str, Any] = Field(default_factory=dict)
    body: Any = None


class Response(_Model):
    """Expected response plus the variables to capture from it.

    ``variables`` maps a variable name to a selector: ``status``,
    ``header.<Name>``, ``body`` or ``body.<path>``.
    """

    status_code: int | None = None
    headers: dict[str, Any] = Field(default_factory=dict)
    body: Any = None
    variables: dict[str, str] = Field(default_factory=dict)
    eventually: Eventually | None = None


class RoundTrip(_Model):
    """One request/expected-response step."""

    description: str = ""
    request: Request = Field(default_factory=Request)
    response: Response = Field(default_factory=Response)


__all__ = ["Duration", "Eventually", "Request", "Response", "RoundTrip", "parse_duration"]
