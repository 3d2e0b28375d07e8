"""扫码溯源路由 -- 面向消费者的查询

GET /api/tracking/{event_id}: 事件所属批次的完整溯源（富化事件 + 溯源森林）。
GET /api/tracking/{event_id}/path: 根事件到该事件的富化路径。
"""

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from ..deps import get_tracking_service
from ..services.tracking_service import TrackingService
from .batches import error_response

router = APIRouter()


@router.get("/api/tracking/{event_id}")
async def trace_event(
    event_id: str,
    service: TrackingService = Depends(get_tracking_service),
):
    """按事件 ID 查询批次溯源信息，事件不存在返回 404"""
    trace = await service.trace_event(event_id)
    if trace is None:
        return error_response(
            404, "EVENT_NOT_FOUND", f"Batch not found for event id {event_id}"
        )
    return JSONResponse(content=trace.to_dict())


@router.get("/api/tracking/{event_id}/path")
async def trace_path(
    event_id: str,
    service: TrackingService = Depends(get_tracking_service),
):
    """根事件到目标事件的路径，事件不存在返回 404"""
    path = await service.trace_path(event_id)
    if path is None:
        return error_response(
            404, "EVENT_NOT_FOUND", f"Event with id {event_id} does not exist"
        )
    return path.model_dump(mode="json")
