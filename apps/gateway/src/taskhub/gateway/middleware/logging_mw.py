"""LoggingMiddleware

为每个 HTTP 请求生成 request_id，并把租户/角色绑定到 structlog contextvars，
使同一请求内的 core 日志（task_created / task_version_conflict 等）带上调用方信息。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(ULID())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        # 租户/角色仅用于日志，合法性由路由依赖校验
        tenant_id = request.headers.get("x-tenant-id")
        if tenant_id:
            structlog.contextvars.bind_contextvars(tenant_id=tenant_id.strip())
        role = request.headers.get("x-role")
        if role:
            structlog.contextvars.bind_contextvars(role=role.strip().lower())

        log = structlog.get_logger()
        started = time.perf_counter()
        await log.ainfo("request_started")

        response = await call_next(request)

        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )

        response.headers["X-Request-ID"] = request_id
        return response
