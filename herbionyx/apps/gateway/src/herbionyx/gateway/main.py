"""FastAPI 应用主文件

app 创建 + lifespan 管理：账本初始化/关闭 + 元数据解析组件初始化 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from herbionyx.core.config import get_db_path, get_ledger_backend
from herbionyx.core.store import create_ledger
from herbionyx.resolver import (
    FallbackResolver,
    IpfsGatewayClient,
    ParticipantDirectory,
    StaticMetadataAdapter,
    load_resolver_config,
)

from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import batches, health, tracking

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化账本和解析组件，关闭时释放账本"""
    # 启动：按配置选择账本后端
    app.state.ledger = await create_ledger(get_ledger_backend(), get_db_path())

    # 元数据解析（根据配置选择模式）
    resolver_config = load_resolver_config()
    app.state.resolver_config = resolver_config

    if resolver_config.resolver_mode == "gateway":
        # 网关模式：主网关 + 可选备用网关
        primary = IpfsGatewayClient(
            gateway_url=resolver_config.gateway_url,
            timeout_s=resolver_config.timeout_s,
        )
        fallback = None
        if resolver_config.fallback_gateway_url:
            fallback = IpfsGatewayClient(
                gateway_url=resolver_config.fallback_gateway_url,
                timeout_s=resolver_config.timeout_s,
            )
        app.state.metadata_resolver = FallbackResolver(primary=primary, fallback=fallback)
        # 保存主网关引用供健康检查使用
        app.state.ipfs_client = primary
        log.info(
            "metadata_resolver_initialized",
            mode="gateway",
            gateway_url=resolver_config.gateway_url,
            fallback_gateway_url=resolver_config.fallback_gateway_url,
            timeout_s=resolver_config.timeout_s,
        )
    else:
        # Static 模式：不访问网络
        app.state.metadata_resolver = FallbackResolver(primary=StaticMetadataAdapter())
        app.state.ipfs_client = None
        log.info("metadata_resolver_initialized", mode="static")

    if resolver_config.participants_file:
        app.state.participant_directory = ParticipantDirectory.from_json_file(
            resolver_config.participants_file
        )
    else:
        app.state.participant_directory = ParticipantDirectory()

    yield

    # 关闭：释放账本
    if getattr(app.state, "ledger", None) is not None:
        await app.state.ledger.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="HerbionYX Gateway",
        version="0.1.0",
        description="Ayurvedic herb supply-chain provenance API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging，Logging 在最外层）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    # 初始化日志
    setup_logging()
    setup_logfire(app)

    # 注册路由
    app.include_router(batches.router, tags=["batches"])
    app.include_router(tracking.router, tags=["tracking"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
