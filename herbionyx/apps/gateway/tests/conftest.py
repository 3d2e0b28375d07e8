"""apps/gateway 测试配置 -- httpx AsyncClient + 临时账本 fixture"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from herbionyx.core.store import SqliteLedger
from herbionyx.resolver import FallbackResolver, ParticipantDirectory, StaticMetadataAdapter
from herbionyx.resolver.models import ParticipantProfile
from httpx import ASGITransport, AsyncClient

COLLECTOR = "0xC011EC7000000000000000000000000000000001"
TESTER = "0x7E57E70000000000000000000000000000000002"


@pytest.fixture
def metadata_documents() -> dict[str, dict[str, Any]]:
    """静态解析源中的元数据"""
    return {
        "QmCollection": {
            "type": "collection",
            "herbSpecies": "Tulsi",
            "collector": "Anita",
            "weight": 10.0,
        },
        "QmQualityTest": {
            "type": "quality_test",
            "tester": "Dr. Rao",
            "testResults": {"purity": 97.5},
        },
        "QmProcessing": {
            "type": "processing",
            "processingDetails": {"method": "shade drying", "yield": 85},
        },
    }


@pytest_asyncio.fixture
async def test_app(tmp_path: Path, metadata_documents):
    """测试 app（手动初始化 app.state，绕过 lifespan）"""
    os.environ["HERBIONYX_DB_PATH"] = str(tmp_path / "sqlite" / "test.db")
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from herbionyx.gateway.main import create_app

    app = create_app()

    ledger = await SqliteLedger.open(str(tmp_path / "sqlite" / "test.db"))
    app.state.ledger = ledger
    app.state.metadata_resolver = FallbackResolver(
        primary=StaticMetadataAdapter(metadata_documents)
    )
    app.state.ipfs_client = None
    app.state.participant_directory = ParticipantDirectory(
        [
            ParticipantProfile(address=COLLECTOR, name="Anita", role="collector"),
            ParticipantProfile(address=TESTER, name="Dr. Rao", role="tester"),
        ]
    )

    yield app

    await ledger.close()
    os.environ.pop("HERBIONYX_DB_PATH", None)
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def seeded_batch(client: AsyncClient) -> dict[str, str]:
    """通过 API 写入 Collection -> QualityTest -> Processing"""
    resp = await client.post(
        "/api/batches",
        json={
            "herb_species": "Tulsi",
            "participant": COLLECTOR,
            "content_hash": "QmCollection",
            "location": {"latitude": "12.97", "longitude": "77.59", "zone": "Karnataka"},
        },
    )
    assert resp.status_code == 201
    created = resp.json()

    resp = await client.post(
        f"/api/batches/{created['batch_id']}/events",
        json={
            "event_type": "QualityTest",
            "parent_event_id": created["event_id"],
            "participant": TESTER,
            "content_hash": "QmQualityTest",
        },
    )
    assert resp.status_code == 201
    quality_test_id = resp.json()["event_id"]

    resp = await client.post(
        f"/api/batches/{created['batch_id']}/events",
        json={
            "event_type": "Processing",
            "parent_event_id": quality_test_id,
            "participant": "0xPR0CE55",
            "content_hash": "QmProcessing",
        },
    )
    assert resp.status_code == 201

    return {
        "batch_id": created["batch_id"],
        "collection_id": created["event_id"],
        "quality_test_id": quality_test_id,
        "processing_id": resp.json()["event_id"],
    }
