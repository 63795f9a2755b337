"""LoggingMiddleware

每个请求分配一个 ULID request_id，与调用者身份一起绑定到 structlog contextvars，
并通过 X-Request-ID 响应头返回。4xx/5xx 响应以 warning 级别记录。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

from ..deps import CALLER_HEADER

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }
        caller = request.headers.get(CALLER_HEADER)
        if caller:
            context["caller"] = caller

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(**context)

        log = structlog.get_logger()
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = int((time.monotonic() - start) * 1000)

        if response.status_code >= 400:
            await log.awarning(
                "request_failed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
        else:
            await log.ainfo(
                "request_completed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
