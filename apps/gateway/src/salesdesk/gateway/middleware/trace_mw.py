"""TraceMiddleware

为任务操作绑定 trace_id，贯穿任务生命周期日志。
trace_id 从 /api/tasks/{task_id}/... 路径中提取的 task_id 生成。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ULID 长度
_TASK_ID_LENGTH = 26


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件 -- 为任务操作绑定 trace_id"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        parts = request.url.path.strip("/").split("/")
        trace_id = None

        if "tasks" in parts:
            index = parts.index("tasks")
            if index + 1 < len(parts) and len(parts[index + 1]) == _TASK_ID_LENGTH:
                trace_id = f"trace-{parts[index + 1]}"

        if trace_id:
            structlog.contextvars.bind_contextvars(trace_id=trace_id)

        return await call_next(request)
