"""全局 pytest 配置 -- 环境变量隔离 + 临时 SQLite 连接"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """清除开发者 shell 里的 HERBIONYX_* / LOGFIRE_* 配置，测试只看到自己设置的值"""
    for name in list(os.environ):
        if name.startswith(("HERBIONYX_", "LOGFIRE_")):
            monkeypatch.delenv(name)


@pytest_asyncio.fixture
async def db_conn(tmp_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """已执行 init_db 的临时 SQLite 连接"""
    from herbionyx.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_path / "init.db"))
    await init_db(conn)
    yield conn
    await conn.close()
