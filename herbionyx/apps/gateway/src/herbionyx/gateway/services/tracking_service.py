"""TrackingService -- 溯源查询业务逻辑

查询流程：
1. 从账本取批次完整事件快照
2. 调用溯源引擎得到结构（树 / 路径 / 统计）
3. 并发解析每个事件的链下元数据与参与者资料，单个失败不阻塞其他事件
"""

import asyncio
from typing import Any

import structlog
from herbionyx.core.models import (
    Batch,
    BatchStatistics,
    Event,
    IntegrityReport,
    TreeNode,
    forest_to_dicts,
)
from herbionyx.core.provenance import (
    build_tree,
    check_integrity,
    compute_statistics,
    find_path,
)
from herbionyx.core.store import LedgerBackend
from herbionyx.resolver import FallbackResolver, MetadataResult, ParticipantDirectory
from herbionyx.resolver.models import ParticipantProfile
from pydantic import BaseModel, Field

log = structlog.get_logger()


class EnrichedEvent(BaseModel):
    """附带元数据与参与者资料的事件"""

    event: Event
    metadata: dict[str, Any] | None = Field(default=None, description="原始元数据，解析失败为 None")
    metadata_type: str | None = Field(default=None, description="元数据变体 type")
    metadata_is_fallback: bool = Field(default=False)
    participant_profile: ParticipantProfile | None = None


class BatchTree(BaseModel):
    """批次溯源森林 + 完整性诊断"""

    batch: Batch
    provenance_tree: list[TreeNode]
    integrity: IntegrityReport

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", exclude={"provenance_tree"})
        data["provenance_tree"] = forest_to_dicts(self.provenance_tree)
        return data


class ConsumerTrace(BaseModel):
    """扫码视图：批次 + 富化事件 + 溯源森林"""

    batch: Batch
    events: list[EnrichedEvent]
    provenance_tree: list[TreeNode]

    def to_dict(self) -> dict[str, Any]:
        """provenance_tree 走 TreeNode.to_dict，深链不受递归上限影响"""
        data = self.model_dump(mode="json", exclude={"provenance_tree"})
        data["provenance_tree"] = forest_to_dicts(self.provenance_tree)
        return data


class EventPath(BaseModel):
    """根到目标事件的富化路径"""

    batch: Batch
    target_event: EnrichedEvent
    path: list[EnrichedEvent]


class BatchSummary(BaseModel):
    """批次列表项"""

    batch_id: str
    herb_species: str
    creation_time: int
    event_count: int
    last_updated: int
    participant_count: int


class TrackingService:
    """溯源查询服务"""

    def __init__(
        self,
        ledger: LedgerBackend,
        resolver: FallbackResolver | None = None,
        directory: ParticipantDirectory | None = None,
    ) -> None:
        self._ledger = ledger
        self._resolver = resolver
        self._directory = directory or ParticipantDirectory()

    async def list_batches(self) -> list[BatchSummary]:
        """列出全部批次，附带事件数、最后更新时间、参与者数"""
        batches = await self._ledger.get_all_batches()
        event_lists = await asyncio.gather(
            *(self._ledger.get_batch_events(b.batch_id) for b in batches)
        )

        summaries = []
        for batch, events in zip(batches, event_lists, strict=True):
            stats = compute_statistics(events)
            summaries.append(
                BatchSummary(
                    batch_id=batch.batch_id,
                    herb_species=batch.herb_species,
                    creation_time=batch.creation_time,
                    event_count=stats.total_events,
                    last_updated=(
                        stats.time_span.latest if stats.time_span else batch.creation_time
                    ),
                    participant_count=stats.participant_count,
                )
            )
        return summaries

    async def get_tree(self, batch_id: str) -> BatchTree | None:
        """批次溯源森林，批次不存在返回 None"""
        batch = await self._ledger.get_batch(batch_id)
        if batch is None:
            return None

        events = await self._ledger.get_batch_events(batch_id)
        integrity = check_integrity(events)
        if not integrity.is_clean:
            log.warning(
                "batch_integrity_issues",
                batch_id=batch_id,
                **integrity.model_dump(exclude_defaults=True),
            )
        return BatchTree(
            batch=batch,
            provenance_tree=build_tree(events),
            integrity=integrity,
        )

    async def get_statistics(self, batch_id: str) -> BatchStatistics:
        """批次统计；批次不存在或无事件时 has_data 为 False"""
        events = await self._ledger.get_batch_events(batch_id)
        return compute_statistics(events)

    async def trace_event(self, event_id: str) -> ConsumerTrace | None:
        """按事件 ID（二维码）查询所属批次的完整溯源信息"""
        located = await self._locate(event_id)
        if located is None:
            return None
        batch, events = located

        return ConsumerTrace(
            batch=batch,
            events=await self.enrich(events),
            provenance_tree=build_tree(events),
        )

    async def trace_path(self, event_id: str) -> EventPath | None:
        """根事件到目标事件的富化路径，事件不存在返回 None"""
        located = await self._locate(event_id)
        if located is None:
            return None
        batch, events = located

        path = find_path(events, event_id)
        if not path:
            return None

        enriched_path = await self.enrich(path)
        return EventPath(
            batch=batch,
            target_event=enriched_path[-1],
            path=enriched_path,
        )

    async def enrich(self, events: list[Event]) -> list[EnrichedEvent]:
        """并发解析元数据；同一 content_hash 只请求一次"""
        hashes = list(dict.fromkeys(e.content_hash for e in events if e.content_hash))
        results = await asyncio.gather(*(self._resolve_metadata(h) for h in hashes))
        resolved = dict(zip(hashes, results, strict=True))

        enriched = []
        for event in events:
            result = resolved.get(event.content_hash)
            metadata = result.metadata if result else None
            enriched.append(
                EnrichedEvent(
                    event=event,
                    metadata=result.raw if result else None,
                    metadata_type=metadata.type if metadata else None,
                    metadata_is_fallback=result.is_fallback if result else False,
                    participant_profile=self._directory.resolve(event.participant),
                )
            )
        return enriched

    async def _resolve_metadata(self, content_hash: str) -> MetadataResult | None:
        """解析单个哈希；失败只记录日志，返回 None"""
        if self._resolver is None:
            return None
        try:
            return await self._resolver.fetch_with_fallback(content_hash)
        except Exception as e:
            log.warning(
                "metadata_resolution_failed",
                content_hash=content_hash,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def _locate(self, event_id: str) -> tuple[Batch, list[Event]] | None:
        batch_id = await self._ledger.find_batch_id_for_event(event_id)
        if batch_id is None:
            return None
        batch = await self._ledger.get_batch(batch_id)
        if batch is None:
            return None
        return batch, await self._ledger.get_batch_events(batch_id)
