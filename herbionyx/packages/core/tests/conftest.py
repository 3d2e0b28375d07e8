"""packages/core 测试配置 -- 事件工厂 + 临时账本 fixture"""

from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from herbionyx.core.models import Event, EventType
from herbionyx.core.store import SqliteLedger


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """构造测试事件；participant / timestamp 有默认值"""

    def _make(
        event_id: str,
        event_type: EventType = EventType.QUALITY_TEST,
        parent: str | None = None,
        participant: str = "0xabc",
        timestamp: int = 100,
        batch_id: str = "HERB-1",
    ) -> Event:
        return Event(
            event_id=event_id,
            batch_id=batch_id,
            event_type=event_type,
            parent_event_id=parent,
            participant=participant,
            content_hash=f"Qm{event_id}",
            timestamp=timestamp,
        )

    return _make


@pytest.fixture
def linear_chain(make_event) -> list[Event]:
    """C1 -> Q1 -> P1 -> M1，四个不同参与者"""
    return [
        make_event("C1", EventType.COLLECTION, None, "0x01", 100),
        make_event("Q1", EventType.QUALITY_TEST, "C1", "0x02", 200),
        make_event("P1", EventType.PROCESSING, "Q1", "0x03", 300),
        make_event("M1", EventType.MANUFACTURING, "P1", "0x04", 400),
    ]


@pytest_asyncio.fixture
async def sqlite_ledger(tmp_path: Path) -> AsyncGenerator[SqliteLedger, None]:
    """已初始化的临时 SQLite 账本"""
    ledger = await SqliteLedger.open(str(tmp_path / "sqlite" / "ledger.db"))
    yield ledger
    await ledger.close()
