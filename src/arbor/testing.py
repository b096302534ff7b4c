"""Test Harness — doubles for exercising arbor without a live API or wall clock.

ARCHITECTURE
────────────
::

    Time:
      FakeClock               → monotonic() / sleep() on virtual time

    HTTP:
      Route(method, path)     → key of a scripted endpoint
      ScriptedTransport       → httpx.MockTransport serving scripted responses
                                 and recording every request

    Teardown:
      RecordingCleaner        → Cleaner that records each call's variables

BEST PRACTICES
──────────────
- Pass ``FakeClock`` to ``RoundTripExecutor`` / ``Framework`` so eventually
  windows elapse instantly and deterministically.
- Give ``ScriptedTransport`` a list of responses to simulate an endpoint
  that only starts matching after a few polls.

Example::

    transport = ScriptedTransport({
        ("POST", "/login"): httpx.Response(200, json={"token": "abc"}),
        ("GET", "/me"): [httpx.Response(503), httpx.Response(200, json={"id": 1})],
    })
    framework = Framework("http://api.test", "testdata", transport=transport,
                          clock=FakeClock())
"""

from __future__ import annotations

import json
from collections.abc import Callable
from threading import Lock
from typing import Any, Union

import httpx

Scripted = Union[httpx.Response, list[httpx.Response], Callable[[httpx.Request], httpx.Response]]


class FakeClock:
    """Virtual clock: ``sleep`` advances time instead of blocking."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []
        self._lock = Lock()

    def monotonic(self) -> float:
        with self._lock:
            return self.now

    def sleep(self, seconds: float) -> None:
        with self._lock:
            self.sleeps.append(seconds)
            self.now += seconds

    def advance(self, seconds: float) -> None:
        with self._lock:
            self.now += seconds


class ScriptedTransport(httpx.MockTransport):
    """Mock transport serving scripted responses per ``(method, path)``.

    A list value is consumed one response per request; its last response
    repeats once exhausted. A callable receives the ``httpx.Request``.
    Unscripted routes answer 404.
    """

    def __init__(self, routes: dict[tuple[str, str], Scripted] | None = None):
        self.routes: dict[tuple[str, str], Scripted] = {
            (method.upper(), path): value for (method, path), value in (routes or {}).items()
        }
        self.requests: list[httpx.Request] = []
        self._cursor: dict[tuple[str, str], int] = {}
        self._lock = Lock()
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.path)
        with self._lock:
            self.requests.append(request)
            scripted = self.routes.get(key)
            if isinstance(scripted, list):
                index = self._cursor.get(key, 0)
                self._cursor[key] = index + 1
                scripted = scripted[min(index, len(scripted) - 1)]

        if scripted is None:
            return httpx.Response(404, json={"error": f"no route for {key[0]} {key[1]}"})
        if callable(scripted):
            return scripted(request)
        return httpx.Response(
            scripted.status_code,
            headers=scripted.headers,
            content=scripted.content,
        )

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        """Decode a recorded request's JSON body."""
        return json.loads(request.content) if request.content else None


class RecordingCleaner:
    """Cleaner double recording the variables of every call."""

    def __init__(self, name: str, error: Exception | None = None):
        self._name = name
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self._lock = Lock()

    @property
    def name(self) -> str:
        return self._name

    def clean(self, variables: dict[str, Any]) -> None:
        with self._lock:
            self.calls.append(dict(variables))
        if self.error is not None:
            raise self.error

    @property
    def call_count(self) -> int:
        return len(self.calls)


__all__ = ["FakeClock", "RecordingCleaner", "ScriptedTransport"]
