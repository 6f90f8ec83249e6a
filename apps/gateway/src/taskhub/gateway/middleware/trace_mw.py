"""TraceMiddleware

为任务操作绑定 trace_id / workspace_id，贯穿任务生命周期日志。
从 /api/v1/workspaces/{workspace_id}/tasks/{task_id}[/assign|/transition] 路径提取。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ULID 字符串长度
TASK_ID_LENGTH = 26


def extract_trace_fields(path: str) -> dict[str, str]:
    """从请求路径提取 workspace_id 与 trace_id

    Returns:
        可直接绑定到 structlog contextvars 的字段；无匹配时为空 dict
    """
    fields: dict[str, str] = {}
    parts = [p for p in path.split("/") if p]
    for i, part in enumerate(parts):
        if i + 1 >= len(parts):
            break
        if part == "workspaces":
            fields["workspace_id"] = parts[i + 1]
        elif part == "tasks" and len(parts[i + 1]) == TASK_ID_LENGTH:
            fields["trace_id"] = f"trace-{parts[i + 1]}"
    return fields


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        fields = extract_trace_fields(request.url.path)
        if fields:
            structlog.contextvars.bind_contextvars(**fields)

        return await call_next(request)
