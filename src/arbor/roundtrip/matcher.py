"""Response matching and variable capture.

``match_response`` turns a merged step's expected response into a
``ResponseMatcher``. The matcher is stateful: it remembers the last response
it accepted so that ``variables()`` can extract bindings from exactly that
response.

Matching rules:

- ``statusCode``: equality, when declared.
- ``headers``: the expected headers are a case-insensitive subset of the
  received ones.
- ``body``: mappings are a recursive subset, lists match element-wise and
  must have the same length, everything else is compared for equality.

Selectors used by ``variables``::

    status              → response status code
    header.<Name>       → response header (case-insensitive)
    body                → whole decoded body
    body.<a>.<0>.<b>    → nested key / list index
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import httpx

from arbor.core.errors import ArborError, MatcherError, VariableError
from arbor.roundtrip.models import Response, RoundTrip
from arbor.roundtrip.template import render

if TYPE_CHECKING:
    from arbor.engine.context import Context

SELECTOR_RE = re.compile(r"^(status|body(\.[^.\s]+)*|header\.[^.\s]+)$")

_MISSING = object()


def decode_body(response: httpx.Response) -> Any:
    """Decode JSON bodies; fall back to text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _subset_mismatch(expected: Any, actual: Any, path: str) -> str | None:
    """Describe the first place *expected* is not contained in *actual*."""
    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return f"{path}: expected an object, got {type(actual).__name__}"
        for key, value in expected.items():
            if key not in actual:
                return f"{path}.{key}: missing"
            problem = _subset_mismatch(value, actual[key], f"{path}.{key}")
            if problem:
                return problem
        return None
    if isinstance(expected, list):
        if not isinstance(actual, list):
            return f"{path}: expected a list, got {type(actual).__name__}"
        if len(expected) != len(actual):
            return f"{path}: expected {len(expected)} items, got {len(actual)}"
        for index, (want, got) in enumerate(zip(expected, actual)):
            problem = _subset_mismatch(want, got, f"{path}.{index}")
            if problem:
                return problem
        return None
    if expected != actual:
        return f"{path}: expected {expected!r}, got {actual!r}"
    return None


def select(selector: str, response: httpx.Response) -> Any:
    """Resolve a variable selector against *response*."""
    if selector == "status":
        return response.status_code
    if selector.startswith("header."):
        name = selector.split(".", 1)[1]
        if name not in response.headers:
            raise VariableError(f"header {name!r} not in response")
        return response.headers[name]

    value = decode_body(response)
    for segment in selector.split(".")[1:]:
        if isinstance(value, dict):
            value = value.get(segment, _MISSING)
        elif isinstance(value, list) and segment.isdigit() and int(segment) < len(value):
            value = value[int(segment)]
        else:
            value = _MISSING
        if value is _MISSING:
            raise VariableError(f"selector {selector!r} does not resolve at {segment!r}")
    return value


class ResponseMatcher:
    """Matches responses against one expected ``Response``."""

    def __init__(self, expected: Response):
        self.expected = expected
        self._matched: httpx.Response | None = None
        self._mismatch: str | None = None

    def matches(self, response: httpx.Response) -> bool:
        """Check *response*; remember it when it matches."""
        self._mismatch = self._check(response)
        if self._mismatch is None:
            self._matched = response
            return True
        return False

    def failure_message(self) -> str:
        return self._mismatch or "no response evaluated"

    def _check(self, response: httpx.Response) -> str | None:
        expected = self.expected
        fields_set = expected.model_fields_set

        if expected.status_code is not None and response.status_code != expected.status_code:
            return f"status: expected {expected.status_code}, got {response.status_code}"

        for name, value in expected.headers.items():
            got = response.headers.get(name)
            if got is None:
                return f"header {name}: missing"
            if got != str(value):
                return f"header {name}: expected {value!r}, got {got!r}"

        if "body" in fields_set:
            return _subset_mismatch(expected.body, decode_body(response), "body")
        return None

    def variables(self) -> dict[str, Any]:
        """Extract the declared variables from the last matched response."""
        if self._matched is None:
            raise VariableError("variables requested before a response matched")
        return {
            name: select(selector, self._matched)
            for name, selector in self.expected.variables.items()
        }


def match_response(context: Context, step: RoundTrip) -> ResponseMatcher:
    """Build a matcher for *step*'s expected response against *context*.

    Placeholders in the expectation are rendered with the variables bound at
    construction time.

    Raises:
        MatcherError: A selector is malformed or a placeholder is undefined
    """
    expected = step.response
    for name, selector in expected.variables.items():
        if not SELECTOR_RE.match(selector):
            raise MatcherError(
                f"variable {name!r}: invalid selector {selector!r}"
            ).with_context(step=step.description)

    # model_copy marks updated fields as set; an unset body must stay unset.
    try:
        updates = {"headers": render(expected.headers, context.variables)}
        if "body" in expected.model_fields_set:
            updates["body"] = render(expected.body, context.variables)
        rendered = expected.model_copy(update=updates)
    except ArborError as e:
        raise MatcherError(
            f"cannot build matcher: {e.message}", cause=e
        ).with_context(step=step.description)

    return ResponseMatcher(rendered)


__all__ = ["ResponseMatcher", "SELECTOR_RE", "decode_body", "match_response", "select"]
