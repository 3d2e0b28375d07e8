"""健康检查路由

GET /health: 进程存活即 200。
GET /ready: 账本可用才算就绪；profile=full 且为网关模式时再探测 IPFS 主网关。
元数据解析失败只会让事件缺少元数据，所以默认 profile 不把网关算进就绪条件。
"""

from typing import Literal

import structlog
from fastapi import APIRouter, Query, Request
from starlette.datastructures import State
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()

ReadinessProfile = Literal["core", "full"]


async def _check_ledger(state: State) -> str:
    try:
        await state.ledger.ping()
    except Exception as e:
        log.warning("ledger_check_failed", error=str(e), error_type=type(e).__name__)
        return "unavailable"
    return "ok"


async def _check_ipfs_gateway(state: State, profile: ReadinessProfile) -> str:
    # static 模式下 ipfs_client 为 None
    ipfs_client = getattr(state, "ipfs_client", None)
    if profile != "full" or ipfs_client is None:
        return "skipped"
    if await ipfs_client.health_check():
        return "ok"
    log.warning("ipfs_gateway_check_failed", gateway_url=ipfs_client.gateway_url)
    return "unreachable"


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    request: Request,
    profile: ReadinessProfile = Query(
        default="core",
        description="core 仅检查账本；full 额外探测 IPFS 网关",
    ),
):
    """Readiness 检查，任一检查项不是 ok / skipped 时返回 503"""
    checks = {
        "ledger": await _check_ledger(request.app.state),
        "ipfs_gateway": await _check_ipfs_gateway(request.app.state, profile),
    }
    is_ready = all(value in ("ok", "skipped") for value in checks.values())

    return JSONResponse(
        status_code=200 if is_ready else 503,
        content={
            "status": "ready" if is_ready else "not_ready",
            "profile": profile,
            "checks": checks,
        },
    )
