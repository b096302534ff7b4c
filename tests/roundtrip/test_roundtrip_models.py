"""Tests for round-trip models — aliases, durations, explicit-field tracking."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from arbor.roundtrip.models import Eventually, Request, Response, RoundTrip, parse_duration


class TestParseDuration:
    @pytest.mark.parametrize(
        "raw, seconds",
        [("500ms", 0.5), ("2s", 2.0), ("1m", 60.0), ("1.5", 1.5), (3, 3), (0.25, 0.25)],
    )
    def test_units(self, raw, seconds):
        assert parse_duration(raw) == pytest.approx(seconds)

    def test_invalid(self):
        with pytest.raises(ValueError, match="invalid duration"):
            parse_duration("soon")


class TestRoundTrip:
    def test_camel_case_aliases(self):
        rt = RoundTrip.model_validate(
            {"response": {"statusCode": 201, "eventually": {"timeout": "500ms", "interval": "100ms"}}}
        )
        assert rt.response.status_code == 201
        assert rt.response.eventually == Eventually(timeout=0.5, interval=0.1)

    def test_snake_case_accepted(self):
        assert Response(status_code=204).status_code == 204

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            RoundTrip.model_validate({"request": {"verb": "GET"}})

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValidationError):
            Eventually(timeout="0s")

    def test_defaults(self):
        req = Request()
        assert req.method == "GET"
        assert req.headers == {}
        assert req.body is None

    def test_fields_set_tracks_explicit_fields(self):
        rt = RoundTrip.model_validate({"request": {"path": "/x"}})
        assert rt.model_fields_set == {"request"}
        assert rt.request.model_fields_set == {"path"}

    def test_explicit_null_body_is_set(self):
        resp = Response.model_validate({"body": None})
        assert "body" in resp.model_fields_set
