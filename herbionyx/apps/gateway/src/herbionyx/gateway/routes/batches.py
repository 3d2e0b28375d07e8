"""批次路由 -- 写入路径 + 批次级查询

POST /api/batches: 创建批次（写入根 Collection 事件）。
POST /api/batches/{batch_id}/events: 追加质检 / 加工 / 制造事件。
GET /api/batches: 批次列表。
GET /api/batches/{batch_id}/tree: 溯源森林 + 完整性诊断。
GET /api/batches/{batch_id}/stats: 批次统计。
"""

from fastapi import APIRouter, Depends
from herbionyx.core.exceptions import (
    BatchNotFoundError,
    DuplicateBatchError,
    DuplicateEventError,
    LedgerError,
)
from herbionyx.core.models import EventType, GeoLocation
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_batch_service, get_tracking_service
from ..services.batch_service import BatchService
from ..services.tracking_service import BatchSummary, TrackingService

router = APIRouter()


class CreateBatchRequest(BaseModel):
    """创建批次请求体"""

    herb_species: str = Field(min_length=1, description="药材品种")
    participant: str = Field(min_length=1, description="采集者链上地址")
    content_hash: str = Field(min_length=1, description="采集元数据的 IPFS 哈希")
    location: GeoLocation | None = Field(default=None, description="采集地点")
    qr_code_hash: str = Field(default="", description="二维码哈希")


class CreateBatchResponse(BaseModel):
    """创建批次响应"""

    batch_id: str
    event_id: str
    created_at: int


class AddEventRequest(BaseModel):
    """追加事件请求体"""

    event_type: EventType = Field(description="QualityTest / Processing / Manufacturing")
    parent_event_id: str = Field(description="父事件 ID")
    participant: str = Field(min_length=1, description="记录者链上地址")
    content_hash: str = Field(min_length=1, description="事件元数据的 IPFS 哈希")
    location: GeoLocation | None = Field(default=None)
    qr_code_hash: str = Field(default="")


class AddEventResponse(BaseModel):
    """追加事件响应"""

    batch_id: str
    event_id: str
    event_type: EventType
    parent_event_id: str
    timestamp: int


class BatchListResponse(BaseModel):
    """批次列表响应"""

    batches: list[BatchSummary]


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """统一错误响应格式"""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


def _ledger_error_response(error: LedgerError) -> JSONResponse:
    if isinstance(error, BatchNotFoundError):
        status_code = 404
    elif isinstance(error, DuplicateBatchError | DuplicateEventError):
        status_code = 409
    else:
        status_code = 422
    return error_response(status_code, error.code, str(error))


@router.post("/api/batches", status_code=201, response_model=CreateBatchResponse)
async def create_batch(
    body: CreateBatchRequest,
    service: BatchService = Depends(get_batch_service),
):
    """创建批次，返回批次 ID 与根 Collection 事件 ID"""
    try:
        batch, event = await service.create_batch(
            herb_species=body.herb_species,
            participant=body.participant,
            content_hash=body.content_hash,
            location=body.location,
            qr_code_hash=body.qr_code_hash,
        )
    except LedgerError as e:
        return _ledger_error_response(e)

    return CreateBatchResponse(
        batch_id=batch.batch_id,
        event_id=event.event_id,
        created_at=batch.creation_time,
    )


@router.post(
    "/api/batches/{batch_id}/events",
    status_code=201,
    response_model=AddEventResponse,
)
async def add_event(
    batch_id: str,
    body: AddEventRequest,
    service: BatchService = Depends(get_batch_service),
):
    """向批次追加事件"""
    try:
        event = await service.add_event(
            batch_id=batch_id,
            event_type=body.event_type,
            parent_event_id=body.parent_event_id,
            participant=body.participant,
            content_hash=body.content_hash,
            location=body.location,
            qr_code_hash=body.qr_code_hash,
        )
    except LedgerError as e:
        return _ledger_error_response(e)

    return AddEventResponse(
        batch_id=batch_id,
        event_id=event.event_id,
        event_type=event.event_type,
        parent_event_id=event.parent_event_id or "",
        timestamp=event.timestamp,
    )


@router.get("/api/batches", response_model=BatchListResponse)
async def list_batches(
    service: TrackingService = Depends(get_tracking_service),
):
    """批次列表，按创建时间正序"""
    return BatchListResponse(batches=await service.list_batches())


@router.get("/api/batches/{batch_id}/tree")
async def get_batch_tree(
    batch_id: str,
    service: TrackingService = Depends(get_tracking_service),
):
    """批次溯源森林

    直接返回 JSONResponse，深链不经过 jsonable_encoder 的逐层递归。
    """
    tree = await service.get_tree(batch_id)
    if tree is None:
        return error_response(
            404, "BATCH_NOT_FOUND", f"Batch with id {batch_id} does not exist"
        )
    return JSONResponse(content=tree.to_dict())


@router.get("/api/batches/{batch_id}/stats")
async def get_batch_stats(
    batch_id: str,
    service: TrackingService = Depends(get_tracking_service),
):
    """批次统计；批次没有事件时返回 404"""
    stats = await service.get_statistics(batch_id)
    if not stats.has_data:
        return error_response(
            404, "BATCH_NOT_FOUND", f"Batch with id {batch_id} has no events"
        )
    return {
        "batch_id": batch_id,
        "statistics": stats.model_dump(mode="json"),
    }
