"""LoggingMiddleware -- 请求级日志

每个请求绑定 request_id（ULID）到 structlog contextvars，并在响应头 X-Request-ID 返回。
扫码端可在请求头携带自己的 X-Request-ID（必须是合法 ULID）以串联前后端日志。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"


def _request_id_from(request: Request) -> str:
    """沿用合法的上游 request_id，否则生成新的 ULID"""
    incoming = request.headers.get(REQUEST_ID_HEADER, "")
    if incoming:
        try:
            return str(ULID.from_str(incoming))
        except ValueError:
            pass
    return str(ULID())


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = _request_id_from(request)
        start_time = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        log = structlog.get_logger()

        try:
            response = await call_next(request)
        except Exception:
            await log.aexception(
                "request_failed",
                elapsed_ms=int((time.monotonic() - start_time) * 1000),
            )
            raise

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        if response.status_code >= 500:
            await log.aerror("request_completed", status_code=response.status_code, elapsed_ms=elapsed_ms)
        else:
            await log.ainfo("request_completed", status_code=response.status_code, elapsed_ms=elapsed_ms)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
