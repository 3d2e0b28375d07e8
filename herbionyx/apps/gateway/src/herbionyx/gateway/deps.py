"""依赖注入模块 -- 通过 FastAPI Depends 注入账本与服务实例

账本、元数据解析器、参与者目录通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request

from .services.batch_service import BatchService
from .services.tracking_service import TrackingService


def get_tracking_service(request: Request) -> TrackingService:
    """基于 app.state 组装 TrackingService"""
    state = request.app.state
    return TrackingService(
        ledger=state.ledger,
        resolver=getattr(state, "metadata_resolver", None),
        directory=getattr(state, "participant_directory", None),
    )


def get_batch_service(request: Request) -> BatchService:
    """基于 app.state 组装 BatchService"""
    return BatchService(request.app.state.ledger)
