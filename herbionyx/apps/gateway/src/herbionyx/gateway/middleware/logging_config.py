"""structlog 配置

structlog 与标准库 logging 共用一条处理器链，uvicorn / aiosqlite 的日志
和业务日志格式一致。

环境变量：
- HERBIONYX_LOG_FORMAT: dev（默认，彩色可读）/ json（一行一条，异常栈展开为字段）
- HERBIONYX_LOG_LEVEL: 根 logger 级别，默认 INFO
- LOGFIRE_SEND_TO_LOGFIRE: true 时启用 Logfire APM
"""

import logging
import os

import structlog

# 每个请求都会打一行，与 request_completed 重复
_NOISY_LOGGERS = ("uvicorn.access", "httpx", "aiosqlite")

LOGFIRE_SERVICE_NAME = "herbionyx-gateway"


def _shared_processors(log_format: str) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
    return processors


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """配置 structlog 与标准库 logging，参数缺省时读取环境变量"""
    log_format = (log_format or os.environ.get("HERBIONYX_LOG_FORMAT", "dev")).lower()
    level_name = (log_level or os.environ.get("HERBIONYX_LOG_LEVEL", "INFO")).upper()
    shared = _shared_processors(log_format)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(log_format),
            foreign_pre_chain=shared,
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logfire(app) -> bool:
    """按需启用 Logfire 并插桩 FastAPI app

    Returns:
        是否已启用；未开启或初始化失败时只用本地日志
    """
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return False

    try:
        import logfire

        logfire.configure(service_name=LOGFIRE_SERVICE_NAME)
        logfire.instrument_fastapi(app)
    except Exception as e:
        structlog.get_logger().warning(
            "logfire_init_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        return False
    return True
