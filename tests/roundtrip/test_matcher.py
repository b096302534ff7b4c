"""Tests for response matching and variable selectors."""

from __future__ import annotations

import httpx
import pytest

from arbor.core.errors import MatcherError, VariableError
from arbor.engine.context import Context
from arbor.roundtrip.matcher import ResponseMatcher, decode_body, match_response, select
from arbor.roundtrip.models import Response, RoundTrip


def step(response: dict, description: str = "step") -> RoundTrip:
    return RoundTrip.model_validate({"description": description, "response": response})


def json_response(status: int = 200, body=None, headers=None) -> httpx.Response:
    return httpx.Response(status, json=body, headers=headers)


# ---------------------------------------------------------------------------
# Matching rules
# ---------------------------------------------------------------------------


class TestStatus:
    def test_equal(self):
        assert ResponseMatcher(Response(status_code=201)).matches(json_response(201, {}))

    def test_different(self):
        matcher = ResponseMatcher(Response(status_code=201))
        assert not matcher.matches(json_response(500, {}))
        assert matcher.failure_message() == "status: expected 201, got 500"

    def test_not_declared_accepts_any(self):
        assert ResponseMatcher(Response()).matches(json_response(418, {}))


class TestHeaders:
    def test_case_insensitive_subset(self):
        matcher = ResponseMatcher(Response(headers={"content-type": "application/json"}))
        assert matcher.matches(json_response(200, {}))

    def test_missing(self):
        matcher = ResponseMatcher(Response(headers={"X-Trace": "1"}))
        assert not matcher.matches(json_response(200, {}))
        assert matcher.failure_message() == "header X-Trace: missing"

    def test_scalar_compared_as_string(self):
        matcher = ResponseMatcher(Response(headers={"X-Count": 3}))
        assert matcher.matches(httpx.Response(200, headers={"X-Count": "3"}))


class TestBody:
    def test_recursive_subset(self):
        matcher = ResponseMatcher(Response.model_validate({"body": {"user": {"name": "alice"}}}))
        assert matcher.matches(json_response(200, {"user": {"name": "alice", "id": 1}, "x": 2}))

    def test_nested_mismatch_message(self):
        matcher = ResponseMatcher(Response.model_validate({"body": {"user": {"name": "alice"}}}))
        assert not matcher.matches(json_response(200, {"user": {"name": "bob"}}))
        assert matcher.failure_message() == "body.user.name: expected 'alice', got 'bob'"

    def test_lists_match_element_wise(self):
        matcher = ResponseMatcher(Response.model_validate({"body": [{"id": 1}, {"id": 2}]}))
        assert matcher.matches(json_response(200, [{"id": 1, "n": "a"}, {"id": 2}]))
        assert not matcher.matches(json_response(200, [{"id": 1}]))
        assert matcher.failure_message() == "body: expected 2 items, got 1"

    def test_missing_key(self):
        matcher = ResponseMatcher(Response.model_validate({"body": {"id": 1}}))
        assert not matcher.matches(json_response(200, {}))
        assert matcher.failure_message() == "body.id: missing"

    def test_unset_body_not_checked(self):
        assert ResponseMatcher(Response()).matches(httpx.Response(200, text="anything"))

    def test_explicit_null_body(self):
        matcher = ResponseMatcher(Response.model_validate({"body": None}))
        assert matcher.matches(httpx.Response(204))
        assert not matcher.matches(json_response(200, {"a": 1}))

    def test_text_body(self):
        matcher = ResponseMatcher(Response.model_validate({"body": "pong"}))
        assert matcher.matches(httpx.Response(200, text="pong"))


# ---------------------------------------------------------------------------
# Selectors and captures
# ---------------------------------------------------------------------------


class TestSelect:
    RESPONSE = httpx.Response(
        201, json={"id": 7, "items": [{"sku": "a"}, {"sku": "b"}]}, headers={"Location": "/u/7"}
    )

    @pytest.mark.parametrize(
        "selector, value",
        [
            ("status", 201),
            ("header.location", "/u/7"),
            ("body.id", 7),
            ("body.items.1.sku", "b"),
            ("body", {"id": 7, "items": [{"sku": "a"}, {"sku": "b"}]}),
        ],
    )
    def test_resolves(self, selector, value):
        assert select(selector, self.RESPONSE) == value

    @pytest.mark.parametrize("selector", ["body.nope", "body.items.5", "body.id.x", "header.X-None"])
    def test_unresolved(self, selector):
        with pytest.raises(VariableError):
            select(selector, self.RESPONSE)

    def test_decode_body_empty_and_text(self):
        assert decode_body(httpx.Response(204)) is None
        assert decode_body(httpx.Response(200, text="plain")) == "plain"


class TestVariables:
    def test_extracts_from_matched_response(self):
        matcher = ResponseMatcher(Response(variables={"userId": "body.id", "code": "status"}))
        assert matcher.matches(json_response(201, {"id": 9}))
        assert matcher.variables() == {"userId": 9, "code": 201}

    def test_before_match(self):
        with pytest.raises(VariableError):
            ResponseMatcher(Response(variables={"x": "status"})).variables()

    def test_uses_last_matching_response(self):
        matcher = ResponseMatcher(Response(status_code=200, variables={"v": "body.v"}))
        matcher.matches(json_response(200, {"v": 1}))
        matcher.matches(json_response(500, {"v": 2}))
        assert matcher.variables() == {"v": 1}


# ---------------------------------------------------------------------------
# match_response
# ---------------------------------------------------------------------------


class TestMatchResponse:
    def test_renders_expectation(self):
        context = Context(variables={"name": "alice", "id": 3})
        matcher = match_response(context, step({"body": {"name": "{{ name }}", "id": "{{ id }}"}}))
        assert matcher.expected.body == {"name": "alice", "id": 3}
        assert matcher.matches(json_response(200, {"name": "alice", "id": 3}))

    def test_unset_body_stays_unset(self):
        matcher = match_response(Context(), step({"statusCode": 200}))
        assert "body" not in matcher.expected.model_fields_set
        assert matcher.matches(httpx.Response(200, text="not json"))

    def test_invalid_selector(self):
        with pytest.raises(MatcherError, match="invalid selector"):
            match_response(Context(), step({"variables": {"x": "cookies.session"}}))

    def test_undefined_placeholder(self):
        with pytest.raises(MatcherError, match="undefined variable") as exc:
            match_response(Context(), step({"body": {"id": "{{ missing }}"}}, "read"))
        assert exc.value.context.step == "read"
