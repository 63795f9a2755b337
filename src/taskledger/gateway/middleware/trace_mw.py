"""TraceMiddleware

按 URL 把操作对象绑定到日志上下文：
/api/tasks/{task_id}[/...]       -> task_id
/api/profiles/{profile_id}[/...] -> profile_id
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response


def _trace_context(path: str) -> dict[str, int | str]:
    parts = path.strip("/").split("/")
    if len(parts) < 3 or parts[0] != "api":
        return {}
    if parts[1] == "tasks" and parts[2].isdigit():
        return {"task_id": int(parts[2])}
    if parts[1] == "profiles":
        return {"profile_id": parts[2]}
    return {}


class TraceMiddleware(BaseHTTPMiddleware):
    """对象级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        context = _trace_context(request.url.path)
        if context:
            structlog.contextvars.bind_contextvars(**context)
        return await call_next(request)
