"""TraceMiddleware -- 为批次/事件查询绑定追踪字段

从路径中提取 batch_id（/api/batches/{batch_id}/...）
或 event_id（/api/tracking/{event_id}/...），贯穿该请求的所有日志。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# 路径段 -> 绑定的日志字段
_TRACE_SEGMENTS = {
    "batches": "batch_id",
    "tracking": "event_id",
}


def extract_trace_fields(path: str) -> dict[str, str]:
    """从请求路径中提取追踪字段"""
    parts = [p for p in path.split("/") if p]
    fields: dict[str, str] = {}
    for i, part in enumerate(parts[:-1]):
        key = _TRACE_SEGMENTS.get(part)
        if key and key not in fields:
            fields[key] = parts[i + 1]
    return fields


class TraceMiddleware(BaseHTTPMiddleware):
    """追踪中间件 -- 绑定 batch_id / event_id"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        fields = extract_trace_fields(request.url.path)
        if fields:
            structlog.contextvars.bind_contextvars(**fields)

        return await call_next(request)
