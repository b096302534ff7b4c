"""Round trips: models, field-level merge, placeholder rendering, HTTP client, matcher."""

from arbor.roundtrip.client import RoundTripClient, render_request
from arbor.roundtrip.matcher import ResponseMatcher, match_response
from arbor.roundtrip.merge import merge_round_trip
from arbor.roundtrip.models import Eventually, Request, Response, RoundTrip
from arbor.roundtrip.template import render

__all__ = [
    "Eventually",
    "Request",
    "Response",
    "ResponseMatcher",
    "RoundTrip",
    "RoundTripClient",
    "match_response",
    "merge_round_trip",
    "render",
    "render_request",
]
