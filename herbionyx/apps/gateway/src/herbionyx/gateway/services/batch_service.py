"""BatchService -- 批次创建与事件追加

写入路径的校验（读取侧依旧容忍畸形数据）：
1. Collection 只能通过 create_batch 写入，且没有父事件
2. 其他事件必须指向同一批次内已存在的父事件
3. ID 唯一性由账本唯一约束保证；生成的 ID 撞车时换一个重试
"""

import time

import structlog
from herbionyx.core.exceptions import (
    BatchNotFoundError,
    DuplicateBatchError,
    DuplicateEventError,
    InvalidEventError,
    ParentEventNotFoundError,
)
from herbionyx.core.ids import generate_batch_id, generate_event_id
from herbionyx.core.models import (
    CHILD_EVENT_TYPES,
    Batch,
    Event,
    EventType,
    GeoLocation,
)
from herbionyx.core.store import LedgerBackend

log = structlog.get_logger()

# 同一毫秒内随机段只有 10^4 种取值，高频写入会撞 ID
ID_GENERATION_ATTEMPTS = 3


class BatchService:
    """批次写入服务"""

    def __init__(self, ledger: LedgerBackend) -> None:
        self._ledger = ledger

    async def create_batch(
        self,
        herb_species: str,
        participant: str,
        content_hash: str,
        location: GeoLocation | None = None,
        qr_code_hash: str = "",
    ) -> tuple[Batch, Event]:
        """创建批次并写入根 Collection 事件

        Returns:
            (batch, collection_event)

        Raises:
            DuplicateBatchError / DuplicateEventError: 连续 ID_GENERATION_ATTEMPTS 次撞 ID
        """
        for attempt in range(1, ID_GENERATION_ATTEMPTS + 1):
            now = int(time.time())
            batch_id = generate_batch_id()
            event = Event(
                event_id=generate_event_id(EventType.COLLECTION),
                batch_id=batch_id,
                event_type=EventType.COLLECTION,
                parent_event_id=None,
                participant=participant,
                content_hash=content_hash,
                timestamp=now,
                qr_code_hash=qr_code_hash,
                location=location,
            )
            batch = Batch(
                batch_id=batch_id,
                herb_species=herb_species,
                creation_time=now,
                event_count=1,
            )
            try:
                await self._ledger.create_batch(batch, event)
                break
            except (DuplicateBatchError, DuplicateEventError) as e:
                if attempt == ID_GENERATION_ATTEMPTS:
                    raise
                log.warning("generated_id_collision", attempt=attempt, error=str(e))

        log.info(
            "batch_created",
            batch_id=batch_id,
            herb_species=herb_species,
            event_id=event.event_id,
        )
        return batch, event

    async def add_event(
        self,
        batch_id: str,
        event_type: EventType,
        parent_event_id: str,
        participant: str,
        content_hash: str,
        location: GeoLocation | None = None,
        qr_code_hash: str = "",
    ) -> Event:
        """向批次追加质检 / 加工 / 制造事件

        Raises:
            InvalidEventError: 事件类型为 Collection 或缺少父事件
            BatchNotFoundError: 批次不存在
            ParentEventNotFoundError: 父事件不在该批次内
            DuplicateEventError: 连续 ID_GENERATION_ATTEMPTS 次撞 ID
        """
        if event_type not in CHILD_EVENT_TYPES:
            raise InvalidEventError(
                f"{event_type.value} 事件只能通过创建批次写入"
            )
        if not parent_event_id:
            raise InvalidEventError(f"{event_type.value} 事件必须指定父事件")

        if await self._ledger.get_batch(batch_id) is None:
            raise BatchNotFoundError(batch_id)

        events = await self._ledger.get_batch_events(batch_id)
        if not any(e.event_id == parent_event_id for e in events):
            raise ParentEventNotFoundError(batch_id, parent_event_id)

        for attempt in range(1, ID_GENERATION_ATTEMPTS + 1):
            event = Event(
                event_id=generate_event_id(event_type),
                batch_id=batch_id,
                event_type=event_type,
                parent_event_id=parent_event_id,
                participant=participant,
                content_hash=content_hash,
                timestamp=int(time.time()),
                qr_code_hash=qr_code_hash,
                location=location,
            )
            try:
                await self._ledger.add_event(event)
                break
            except DuplicateEventError as e:
                if attempt == ID_GENERATION_ATTEMPTS:
                    raise
                log.warning("generated_id_collision", attempt=attempt, error=str(e))

        log.info(
            "event_added",
            batch_id=batch_id,
            event_id=event.event_id,
            event_type=event_type.value,
            parent_event_id=parent_event_id,
        )
        return event
