"""HerbionYX Core Store -- 账本后端

提供工厂函数按配置创建账本后端实例。
"""

import structlog

from .memory_ledger import InMemoryLedger
from .protocols import LedgerBackend
from .sqlite_init import init_db
from .sqlite_ledger import SqliteLedger

log = structlog.get_logger()


async def create_ledger(backend: str, db_path: str | None = None) -> LedgerBackend:
    """按名称创建账本后端

    Args:
        backend: 后端名称（sqlite / memory）
        db_path: SQLite 数据库文件路径（sqlite 后端必填）

    Returns:
        LedgerBackend 实例

    Raises:
        ValueError: 未知后端或缺少 db_path
    """
    if backend == "memory":
        log.info("ledger_initialized", backend="memory")
        return InMemoryLedger()

    if backend == "sqlite":
        if not db_path:
            raise ValueError("sqlite 账本需要 db_path")
        ledger = await SqliteLedger.open(db_path)
        log.info("ledger_initialized", backend="sqlite", db_path=db_path)
        return ledger

    raise ValueError(f"未知的账本后端: {backend}")


__all__ = [
    "LedgerBackend",
    "SqliteLedger",
    "InMemoryLedger",
    "create_ledger",
    "init_db",
]
