"""LedgerBackend 内存实现 -- mock 后端

不持久化，进程退出即丢失；用于演示与测试。
与 SqliteLedger 保持相同的错误语义。
"""

from ..exceptions import BatchNotFoundError, DuplicateBatchError, DuplicateEventError
from ..models.event import Batch, Event


class InMemoryLedger:
    """LedgerBackend 的内存实现"""

    def __init__(self) -> None:
        self._batches: dict[str, Batch] = {}
        self._events: dict[str, list[Event]] = {}
        self._event_batch: dict[str, str] = {}

    async def create_batch(self, batch: Batch, collection_event: Event) -> None:
        if batch.batch_id in self._batches:
            raise DuplicateBatchError(batch.batch_id)
        if collection_event.event_id in self._event_batch:
            raise DuplicateEventError(collection_event.event_id)

        self._batches[batch.batch_id] = batch.model_copy(update={"event_count": 0})
        self._events[batch.batch_id] = []
        self._append(batch.batch_id, collection_event)

    async def add_event(self, event: Event) -> None:
        if event.batch_id not in self._batches:
            raise BatchNotFoundError(event.batch_id)
        if event.event_id in self._event_batch:
            raise DuplicateEventError(event.event_id)
        self._append(event.batch_id, event)

    async def get_batch(self, batch_id: str) -> Batch | None:
        batch = self._batches.get(batch_id)
        if batch is None:
            return None
        return batch.model_copy(update={"event_count": len(self._events[batch_id])})

    async def get_batch_events(self, batch_id: str) -> list[Event]:
        # 返回副本，调用方修改列表不影响账本
        return list(self._events.get(batch_id, []))

    async def get_all_batches(self) -> list[Batch]:
        batches = [await self.get_batch(batch_id) for batch_id in self._batches]
        return sorted(batches, key=lambda b: (b.creation_time, b.batch_id))

    async def find_batch_id_for_event(self, event_id: str) -> str | None:
        return self._event_batch.get(event_id)

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        return None

    def _append(self, batch_id: str, event: Event) -> None:
        self._events[batch_id].append(event)
        self._event_batch[event.event_id] = batch_id
