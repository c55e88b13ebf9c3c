"""FastAPI middleware for observability and HTTP hardening.

Provides trace ID generation, request logging and metrics, security headers
and a request body size limit.
"""

import time
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from errors import error_body, internal_error_body
from .trace_id import TRACE_ID_HEADER, generate_trace_id, set_trace_id, trace_id_var
from .logging_config import get_logger
from .metrics import http_requests_total, http_request_duration_seconds

logger = get_logger(__name__)

DOCS_PATHS = ("/api/docs", "/api/docs/oauth2-redirect", "/api/openapi.json")


def _route_template(request: Request) -> str:
    """Resolve the matched route path (e.g. /api/v1/events/{event_id}).

    Keeps metric label cardinality bounded. Unmatched paths collapse to
    "unmatched".
    """
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", "unmatched")
    return "unmatched"


class TraceIDMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and inject trace IDs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with trace ID.

        The ID is exposed three ways: the logging context, request.state for
        exception handlers, and the x-trace-id response header.
        """
        incoming = request.headers.get(TRACE_ID_HEADER)
        trace_id = incoming if incoming and len(incoming) <= 128 else generate_trace_id()
        set_trace_id(trace_id)
        request.state.trace_id = trace_id

        start_time = time.perf_counter()
        logger.info(
            f"{request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else None,
            }
        )

        route = _route_template(request)
        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            http_requests_total.labels(request.method, route, "500").inc()
            http_request_duration_seconds.labels(request.method, route).observe(duration)
            logger.error(
                f"Request failed: {str(e)}",
                extra={
                    "error_type": type(e).__name__,
                    "duration_ms": round(duration * 1000, 2),
                },
                exc_info=True
            )
            # Answered here so the CORS and security header layers still wrap it
            return JSONResponse(
                status_code=500,
                content=internal_error_body(trace_id),
                headers={TRACE_ID_HEADER: trace_id},
            )

        duration = time.perf_counter() - start_time
        http_requests_total.labels(request.method, route, str(response.status_code)).inc()
        http_request_duration_seconds.labels(request.method, route).observe(duration)
        logger.info(
            f"Request completed: {response.status_code}",
            extra={
                "status_code": response.status_code,
                "duration_ms": round(duration * 1000, 2),
                "tenant_id": getattr(request.state, "tenant_id", None),
                "user_id": getattr(request.state, "user_id", None),
            }
        )

        response.headers[TRACE_ID_HEADER] = trace_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Security headers middleware (equivalent to helmet.js)."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "0"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cross-Origin-Opener-Policy"] = "same-origin"

        # Swagger UI loads its bundle from a CDN
        if request.url.path in DOCS_PATHS:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "img-src 'self' data: https:; "
                "connect-src 'self'; "
                "frame-ancestors 'none'"
            )
        else:
            response.headers["Content-Security-Policy"] = (
                "default-src 'none'; frame-ancestors 'none'"
            )

        return response


class BodySizeLimitMiddleware:
    """Reject request bodies larger than max_body_bytes with 413.

    Pure ASGI: a declared Content-Length is checked up front, and the body
    stream itself is counted while it is read, so chunked uploads are capped
    too. The accepted body is replayed to the application in one message.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_body_bytes:
            await self._reject(scope, receive, send)
            return

        chunks = []
        received = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > self.max_body_bytes:
                await self._reject(scope, receive, send)
                return
            chunks.append(chunk)
            if not message.get("more_body", False):
                break

        body = b"".join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if replayed:
                return await receive()
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        logger.warning(
            "Request body too large",
            extra={"path": scope.get("path"), "error_code": "payload_too_large"},
        )
        trace_id = trace_id_var.get() or generate_trace_id()
        response = JSONResponse(
            status_code=413,
            content=error_body(
                "payload_too_large",
                f"Request body exceeds {self.max_body_bytes} bytes.",
                trace_id,
            ),
        )
        await response(scope, receive, send)
