"""Pure ASGI middleware for correlation IDs and request logging."""

import time

import structlog
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from vidshare.common.logging import set_correlation_id

logger = structlog.get_logger()

CORRELATION_HEADER = "X-Correlation-ID"

# Probes hit these constantly; they are logged at debug level only.
QUIET_PATHS = frozenset({"/api/health"})


class CorrelationIdMiddleware:
    """Binds a correlation ID for the request and echoes it on the response."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        cid = set_correlation_id(Headers(scope=scope).get(CORRELATION_HEADER))

        async def send_with_cid(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).append(CORRELATION_HEADER, cid)
            await send(message)

        await self.app(scope, receive, send_with_cid)


class RequestLoggingMiddleware:
    """Logs method, path, status code and latency once the response has started."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500

        async def send_with_status(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        finally:
            log = logger.debug if scope["path"] in QUIET_PATHS else logger.info
            log(
                "http_request",
                method=scope["method"],
                path=scope["path"],
                status_code=status_code,
                latency_ms=round((time.perf_counter() - start) * 1000, 1),
            )
