"""LedgerBackend SQLite 实现 -- 本地开发账本

events 表 append-only：只允许插入，不允许更新或删除。
event_id 全局唯一，seq 记录写入顺序。
"""

from pathlib import Path

import aiosqlite
import structlog

from ..exceptions import BatchNotFoundError, DuplicateBatchError, DuplicateEventError
from ..models.enums import EventType
from ..models.event import Batch, Event, GeoLocation
from .sqlite_init import init_db

log = structlog.get_logger()

_BATCH_SELECT = """
SELECT b.batch_id, b.herb_species, b.creation_time, COUNT(e.seq) AS event_count
FROM batches b
LEFT JOIN events e ON e.batch_id = b.batch_id
"""


class SqliteLedger:
    """LedgerBackend 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    @classmethod
    async def open(cls, db_path: str) -> "SqliteLedger":
        """打开（必要时创建）SQLite 账本

        Args:
            db_path: SQLite 数据库文件路径
        """
        # 确保数据库目录存在
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(db_path)
        conn.row_factory = aiosqlite.Row
        await init_db(conn)
        return cls(conn)

    @property
    def conn(self) -> aiosqlite.Connection:
        return self._conn

    async def create_batch(self, batch: Batch, collection_event: Event) -> None:
        """在同一事务内写入批次和根 Collection 事件"""
        try:
            await self._conn.execute(
                """
                INSERT INTO batches (batch_id, herb_species, creation_time, created_by)
                VALUES (?, ?, ?, ?)
                """,
                (
                    batch.batch_id,
                    batch.herb_species,
                    batch.creation_time,
                    collection_event.participant,
                ),
            )
            await self._insert_event(collection_event)
            await self._conn.commit()
        except aiosqlite.IntegrityError as e:
            await self._conn.rollback()
            if "batches.batch_id" in str(e):
                raise DuplicateBatchError(batch.batch_id) from e
            if "events.event_id" in str(e):
                raise DuplicateEventError(collection_event.event_id) from e
            raise
        except Exception:
            await self._conn.rollback()
            raise

    async def add_event(self, event: Event) -> None:
        """追加事件（批次必须已存在）"""
        if not await self._batch_exists(event.batch_id):
            raise BatchNotFoundError(event.batch_id)

        try:
            await self._insert_event(event)
            await self._conn.commit()
        except aiosqlite.IntegrityError as e:
            await self._conn.rollback()
            if "events.event_id" in str(e):
                raise DuplicateEventError(event.event_id) from e
            raise
        except Exception:
            await self._conn.rollback()
            raise

    async def get_batch(self, batch_id: str) -> Batch | None:
        cursor = await self._conn.execute(
            _BATCH_SELECT + "WHERE b.batch_id = ? GROUP BY b.batch_id",
            (batch_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_batch(row)

    async def get_batch_events(self, batch_id: str) -> list[Event]:
        """查询批次全部事件，按 seq 正序"""
        cursor = await self._conn.execute(
            "SELECT * FROM events WHERE batch_id = ? ORDER BY seq ASC",
            (batch_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_event(row) for row in rows]

    async def get_all_batches(self) -> list[Batch]:
        cursor = await self._conn.execute(
            _BATCH_SELECT + "GROUP BY b.batch_id ORDER BY b.creation_time ASC, b.batch_id ASC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_batch(row) for row in rows]

    async def find_batch_id_for_event(self, event_id: str) -> str | None:
        cursor = await self._conn.execute(
            "SELECT batch_id FROM events WHERE event_id = ? LIMIT 1",
            (event_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def ping(self) -> None:
        cursor = await self._conn.execute("SELECT 1")
        await cursor.fetchone()

    async def close(self) -> None:
        await self._conn.close()

    async def _batch_exists(self, batch_id: str) -> bool:
        cursor = await self._conn.execute(
            "SELECT 1 FROM batches WHERE batch_id = ? LIMIT 1",
            (batch_id,),
        )
        return await cursor.fetchone() is not None

    async def _insert_event(self, event: Event) -> None:
        """写入单条事件（不提交事务）"""
        await self._conn.execute(
            """
            INSERT INTO events (event_id, batch_id, event_type, parent_event_id,
                                participant, content_hash, timestamp, qr_code_hash,
                                location)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.event_id,
                event.batch_id,
                event.event_type.value,
                event.parent_event_id or None,
                event.participant,
                event.content_hash,
                event.timestamp,
                event.qr_code_hash,
                event.location.model_dump_json() if event.location else None,
            ),
        )
        log.debug(
            "ledger_event_appended",
            event_id=event.event_id,
            batch_id=event.batch_id,
            event_type=event.event_type.value,
        )

    @staticmethod
    def _row_to_batch(row: aiosqlite.Row) -> Batch:
        return Batch(
            batch_id=row["batch_id"],
            herb_species=row["herb_species"],
            creation_time=row["creation_time"],
            event_count=row["event_count"],
        )

    @staticmethod
    def _row_to_event(row: aiosqlite.Row) -> Event:
        """将数据库行转换为 Event 模型"""
        location = row["location"]
        return Event(
            event_id=row["event_id"],
            batch_id=row["batch_id"],
            event_type=EventType(row["event_type"]),
            parent_event_id=row["parent_event_id"],
            participant=row["participant"],
            content_hash=row["content_hash"],
            timestamp=row["timestamp"],
            qr_code_hash=row["qr_code_hash"],
            location=GeoLocation.model_validate_json(location) if location else None,
        )
