"""HTTP client that dispatches a rendered round-trip request via httpx."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from arbor.core.errors import DispatchError
from arbor.core.logging import get_logger
from arbor.roundtrip.models import Request, RoundTrip
from arbor.roundtrip.template import render

if TYPE_CHECKING:
    from arbor.engine.context import Context

logger = get_logger(__name__)


def render_request(request: Request, variables: dict[str, Any]) -> Request:
    """Return a copy of *request* with every placeholder resolved."""
    return request.model_copy(
        update={
            "method": render(request.method, variables),
            "path": render(request.path, variables),
            "headers": {k: str(v) for k, v in render(request.headers, variables).items()},
            "query": render(request.query, variables),
            "body": render(request.body, variables),
        }
    )


class RoundTripClient:
    """
    Sends round-trip requests to the API under test.

    Args:
        host: Base URL every request path is resolved against
        timeout: Per-request transport timeout in seconds
        transport: Optional httpx transport (``httpx.MockTransport`` in tests)
    """

    def __init__(
        self,
        host: str,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.host = host
        self._client = httpx.Client(base_url=host, timeout=timeout, transport=transport)

    def do_request(self, context: Context, step: RoundTrip) -> httpx.Response:
        """Render *step*'s request against the context and send it.

        Raises:
            TemplateError: A placeholder references an unknown variable
            DispatchError: The request failed at the transport level
        """
        request = render_request(step.request, context.variables)

        kwargs: dict[str, Any] = {"headers": request.headers, "params": request.query}
        if isinstance(request.body, (str, bytes)):
            kwargs["content"] = request.body
        elif request.body is not None:
            kwargs["json"] = request.body

        logger.debug(
            "client.request",
            method=request.method,
            path=request.path,
            step=step.description,
        )
        try:
            response = self._client.request(request.method, request.path, **kwargs)
        except httpx.HTTPError as e:
            raise DispatchError(
                f"{request.method} {request.path} failed: {e}", cause=e
            ).with_context(step=step.description, url=f"{self.host}{request.path}")

        logger.debug(
            "client.response",
            method=request.method,
            path=request.path,
            status=response.status_code,
        )
        return response

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RoundTripClient:
        return self

    def __exit__(self, *args) -> None:
        self.close()


__all__ = ["RoundTripClient", "render_request"]
