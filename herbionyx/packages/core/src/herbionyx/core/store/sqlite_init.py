"""SQLite 账本初始化

PRAGMA 配置 + 两张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# batches 表 DDL
_BATCHES_DDL = """
CREATE TABLE IF NOT EXISTS batches (
    batch_id       TEXT PRIMARY KEY,
    herb_species   TEXT NOT NULL,
    creation_time  INTEGER NOT NULL,
    created_by     TEXT NOT NULL DEFAULT ''
);
"""

_BATCHES_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_batches_creation_time ON batches(creation_time);",
]

# events 表 DDL（append-only，seq 记录写入顺序）
_EVENTS_DDL = """
CREATE TABLE IF NOT EXISTS events (
    seq              INTEGER PRIMARY KEY AUTOINCREMENT,
    event_id         TEXT NOT NULL UNIQUE,
    batch_id         TEXT NOT NULL,
    event_type       TEXT NOT NULL,
    parent_event_id  TEXT,
    participant      TEXT NOT NULL,
    content_hash     TEXT NOT NULL DEFAULT '',
    timestamp        INTEGER NOT NULL,
    qr_code_hash     TEXT NOT NULL DEFAULT '',
    location         TEXT,

    FOREIGN KEY (batch_id) REFERENCES batches(batch_id)
);
"""

_EVENTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_events_batch_seq ON events(batch_id, seq);",
    "CREATE INDEX IF NOT EXISTS idx_events_parent ON events(parent_event_id);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化账本：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    await conn.execute(_BATCHES_DDL)
    await conn.execute(_EVENTS_DDL)

    for idx_sql in _BATCHES_INDEXES + _EVENTS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效"""
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
