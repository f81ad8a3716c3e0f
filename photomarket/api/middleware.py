"""API middleware for request IDs and response timing."""
import logging
import time
import uuid

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

SLOW_REQUEST_SECONDS = 1.0
# Archive downloads legitimately run long; only flag them past this
SLOW_DOWNLOAD_SECONDS = 60.0


class RequestTimingMiddleware:
    """
    Tag every response with a request ID and time it until the last byte.

    ``X-Process-Time`` can only cover the time to the response headers.
    Streamed album archives keep sending long after that, so the log line
    is written once the body is complete and also reports bytes sent.
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_threshold: float = SLOW_REQUEST_SECONDS,
        download_threshold: float = SLOW_DOWNLOAD_SECONDS,
        download_prefix: str = "/download/"
    ):
        self.app = app
        self.slow_threshold = slow_threshold
        self.download_threshold = download_threshold
        self.download_prefix = download_prefix

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id
        start_time = time.perf_counter()
        status_code = 500
        bytes_sent = 0

        async def send_with_timing(message: Message):
            nonlocal status_code, bytes_sent
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id
                headers["X-Process-Time"] = f"{time.perf_counter() - start_time:.3f}"
            elif message["type"] == "http.response.body":
                bytes_sent += len(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, send_with_timing)
        finally:
            self._log(scope, request_id, status_code, bytes_sent, time.perf_counter() - start_time)

    def _log(self, scope: Scope, request_id: str, status_code: int, bytes_sent: int, elapsed: float):
        path = scope["path"]
        threshold = self.download_threshold if self.download_prefix in path else self.slow_threshold

        if elapsed > threshold:
            logger.warning(
                "SLOW REQUEST [%s]: %s %s -> %d, %d bytes in %.3fs",
                request_id, scope["method"], path, status_code, bytes_sent, elapsed
            )
        else:
            logger.debug(
                "[%s] %s %s -> %d, %d bytes in %.3fs",
                request_id, scope["method"], path, status_code, bytes_sent, elapsed
            )
