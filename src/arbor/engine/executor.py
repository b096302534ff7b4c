"""Round-Trip Executor — runs one step of a leaf against the shared context.

Manifesto:
    A step is only meaningful relative to what its group inherited: the
    executor merges the step onto the context's template, builds a matcher
    for the merged expectation, dispatches once (or polls within an
    eventually window) and binds the captured variables so the next step
    of the same leaf can use them.

ARCHITECTURE
────────────
::

    execute(context, template, override)
      ├── merge(template, override)              → merged step
      ├── matcher_factory(context, merged)       → ResponseMatcher
      ├── eventually?  ── no  → dispatch once, match or MatchError
      │                └─ yes → poll until match or EventuallyTimeoutError
      └── matcher.variables() → context.bind()   → captured dict

    run_flow(context, flow)  → execute every step in order, stop at first error

Failure semantics:
    Merge, matcher construction, dispatch, match and variable-extraction
    failures raise a ``StepError`` subclass. Nothing is retried outside an
    eventually window; inside one, transport errors count as failed polls.

Tags:
    arbor, engine, roundtrip, polling, eventually
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from arbor.core.errors import (
    ArborError,
    DispatchError,
    EventuallyTimeoutError,
    MatchError,
    MergeError,
    VariableError,
)
from arbor.core.logging import get_logger
from arbor.roundtrip.matcher import ResponseMatcher, match_response
from arbor.roundtrip.merge import merge_round_trip
from arbor.roundtrip.models import RoundTrip

if TYPE_CHECKING:
    from arbor.engine.context import Context

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 1.0
DEFAULT_INTERVAL = 0.1


class Clock(Protocol):
    def monotonic(self) -> float: ...

    def sleep(self, seconds: float) -> None: ...


class SystemClock:
    """Wall clock used outside tests."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


class HTTPClient(Protocol):
    def do_request(self, context: Context, step: RoundTrip) -> httpx.Response: ...


MatcherFactory = Callable[["Context", RoundTrip], ResponseMatcher]
MergeFunc = Callable[[RoundTrip | None, RoundTrip | None], RoundTrip]


class RoundTripExecutor:
    """
    Executes round-trip steps.

    Args:
        client: Sends requests (``RoundTripClient`` or a test double)
        matcher_factory: Builds a matcher for a merged step
        merge: Merges a step override onto its template
        clock: Time source for eventually polling
        default_timeout: Eventually window when a step declares none (seconds)
        default_interval: Poll interval when a step declares none (seconds)
    """

    def __init__(
        self,
        client: HTTPClient,
        *,
        matcher_factory: MatcherFactory = match_response,
        merge: MergeFunc = merge_round_trip,
        clock: Clock | None = None,
        default_timeout: float = DEFAULT_TIMEOUT,
        default_interval: float = DEFAULT_INTERVAL,
    ):
        self.client = client
        self.matcher_factory = matcher_factory
        self.merge = merge
        self.clock = clock or SystemClock()
        self.default_timeout = default_timeout
        self.default_interval = default_interval

    def execute(
        self,
        context: Context,
        template: RoundTrip | None,
        override: RoundTrip,
    ) -> dict[str, Any]:
        """Run one step and bind its captures into *context*.

        Returns:
            The variables captured by this step
        """
        try:
            step = self.merge(template, override)
        except ArborError:
            raise
        except (TypeError, ValueError) as e:
            raise MergeError(f"cannot merge step: {e}", cause=e).with_context(
                step=override.description
            )

        logger.info("executor.step", step=step.description)
        matcher = self.matcher_factory(context, step)

        if step.response.eventually is not None:
            self._poll(context, step, matcher)
        else:
            response = self.client.do_request(context, step)
            if not matcher.matches(response):
                raise MatchError(
                    f"response mismatch: {matcher.failure_message()}"
                ).with_context(step=step.description, http_status=response.status_code)

        try:
            captured = matcher.variables()
        except VariableError as e:
            raise e.with_context(step=step.description)

        context.bind(captured)
        if captured:
            logger.debug("executor.captured", step=step.description, names=sorted(captured))
        return captured

    def run_flow(self, context: Context, flow: Sequence[RoundTrip]) -> dict[str, Any]:
        """Execute *flow* in order against ``context.template``.

        Each step sees the captures of the steps before it. The first failing
        step stops the flow.
        """
        captured: dict[str, Any] = {}
        for step in flow:
            captured.update(self.execute(context, context.template, step))
        return captured

    def _poll(self, context: Context, step: RoundTrip, matcher: ResponseMatcher) -> int:
        """Poll until *matcher* accepts a response; return the attempt count."""
        policy = step.response.eventually
        timeout = policy.timeout if policy.timeout is not None else self.default_timeout
        interval = policy.interval if policy.interval is not None else self.default_interval

        start = self.clock.monotonic()
        deadline = start + timeout
        attempts = 0
        while True:
            attempts += 1
            try:
                response = self.client.do_request(context, step)
            except DispatchError as e:
                last_failure = e.message
            else:
                if matcher.matches(response):
                    logger.debug("executor.poll_matched", step=step.description, attempts=attempts)
                    return attempts
                last_failure = matcher.failure_message()

            now = self.clock.monotonic()
            logger.debug(
                "executor.poll",
                step=step.description,
                attempt=attempts,
                elapsed=round(now - start, 3),
                failure=last_failure,
            )
            if now + interval > deadline:
                raise EventuallyTimeoutError(
                    f"no match within {timeout}s after {attempts} attempts: {last_failure}",
                    attempts=attempts,
                    elapsed=now - start,
                ).with_context(step=step.description)
            self.clock.sleep(interval)


__all__ = [
    "DEFAULT_INTERVAL",
    "DEFAULT_TIMEOUT",
    "Clock",
    "HTTPClient",
    "RoundTripExecutor",
    "SystemClock",
]
