"""Ledger Protocol 接口定义

账本后端（本地 SQLite、内存 mock、外部链客户端）共享同一接口，
由配置选择具体实现，业务逻辑不随后端复制。
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol

from ..models.event import Batch, Event


class LedgerBackend(Protocol):
    """账本接口

    事件 append-only：只允许追加，不允许更新或删除。
    """

    async def create_batch(self, batch: Batch, collection_event: Event) -> None:
        """创建批次并写入根 Collection 事件"""
        ...

    async def add_event(self, event: Event) -> None:
        """向已存在的批次追加事件（event.batch_id 指定批次）"""
        ...

    async def get_batch(self, batch_id: str) -> Batch | None:
        """查询批次信息（含 event_count）"""
        ...

    async def get_batch_events(self, batch_id: str) -> list[Event]:
        """查询批次的全部事件，按写入顺序"""
        ...

    async def get_all_batches(self) -> list[Batch]:
        """查询全部批次，按创建时间正序"""
        ...

    async def find_batch_id_for_event(self, event_id: str) -> str | None:
        """查询事件所属批次 ID，不存在返回 None"""
        ...

    async def ping(self) -> None:
        """连通性检查，不可用时抛异常"""
        ...

    async def close(self) -> None:
        """释放后端资源"""
        ...
