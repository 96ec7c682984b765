"""Request middleware for correlation and logging."""

import time
import uuid

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from djcafe.core.logging import get_logger, request_id_ctx

logger = get_logger(__name__)


class RequestIdMiddleware:
    """Inject and propagate request IDs for correlation.

    Written as pure ASGI middleware: BaseHTTPMiddleware buffers through
    call_next, which breaks long-lived Server-Sent Events responses.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process request with correlation ID.

        Args:
            scope: ASGI connection scope.
            receive: ASGI receive callable.
            send: ASGI send callable.
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = {k.decode("latin-1").lower(): v.decode("latin-1") for k, v in scope["headers"]}
        request_id = headers.get("x-request-id") or str(uuid.uuid4())
        method = scope["method"]
        path = scope["path"]
        query = scope.get("query_string", b"").decode("latin-1")

        token = request_id_ctx.set(request_id)
        started = time.perf_counter()

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).append("X-Request-ID", request_id)
                logger.info(
                    "http.request_completed",
                    method=method,
                    path=path,
                    status_code=message["status"],
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )
            await send(message)

        try:
            logger.info(
                "http.request_started",
                method=method,
                path=path,
                query=query or None,
            )
            await self.app(scope, receive, send_with_request_id)
        finally:
            request_id_ctx.reset(token)
