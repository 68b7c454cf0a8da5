"""Per-request correlation context."""
from __future__ import annotations

import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "x-request-id"

# Coroutine-local copy of the current request id, read by the logging filter.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


@dataclass(frozen=True)
class RequestContext:
    request_id: str
    started_at_millis: int
    started_monotonic: float = field(repr=False)

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started_monotonic) * 1000


def new_request_context(incoming_id: str | None) -> RequestContext:
    """Adopt a non-empty incoming id verbatim, otherwise generate one."""
    request_id = incoming_id if incoming_id else str(uuid.uuid4())
    return RequestContext(
        request_id=request_id,
        started_at_millis=int(time.time() * 1000),
        started_monotonic=time.perf_counter(),
    )


def get_request_context(request: Request) -> RequestContext | None:
    return getattr(request.state, "context", None)


def get_request_id(request: Request) -> str:
    ctx = get_request_context(request)
    if ctx is not None:
        return ctx.request_id
    return request_id_var.get()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a RequestContext to every request and echo its id on the response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        ctx = new_request_context(request.headers.get(REQUEST_ID_HEADER))
        request.state.context = ctx
        request_id_var.set(ctx.request_id)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = ctx.request_id
        return response
