"""集成测试共享 fixture"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from herbionyx.core.store import create_ledger
from herbionyx.resolver import FallbackResolver, ParticipantDirectory, StaticMetadataAdapter
from httpx import ASGITransport, AsyncClient


@pytest_asyncio.fixture
async def metadata_store() -> StaticMetadataAdapter:
    """集成测试用静态元数据源（测试中按需 put）"""
    return StaticMetadataAdapter()


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, metadata_store):
    """集成测试用 FastAPI app"""
    os.environ["HERBIONYX_DB_PATH"] = str(tmp_path / "test.db")
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from herbionyx.gateway.main import create_app

    app = create_app()

    ledger = await create_ledger("sqlite", str(tmp_path / "test.db"))
    app.state.ledger = ledger
    app.state.metadata_resolver = FallbackResolver(primary=metadata_store)
    app.state.ipfs_client = None
    app.state.participant_directory = ParticipantDirectory()

    yield app

    await ledger.close()
    os.environ.pop("HERBIONYX_DB_PATH", None)
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
