"""扫码溯源路由测试

测试内容：
1. GET /api/tracking/{event_id} 返回富化事件 + 溯源森林
2. 元数据缺失时事件仍返回（metadata=None）
3. GET /api/tracking/{event_id}/path 根在前的路径
4. 畸形账本数据（环路）不导致请求失败
5. 深链溯源树正常序列化
"""

from herbionyx.core.models import Batch, Event, EventType
from httpx import AsyncClient

COLLECTOR = "0xC011EC7000000000000000000000000000000001"


class TestTraceEvent:
    """扫码查询"""

    async def test_trace_event(self, client: AsyncClient, seeded_batch):
        resp = await client.get(f"/api/tracking/{seeded_batch['processing_id']}")

        assert resp.status_code == 200
        data = resp.json()
        assert data["batch"]["batch_id"] == seeded_batch["batch_id"]
        assert len(data["events"]) == 3
        assert len(data["provenance_tree"]) == 1

        collection = data["events"][0]
        assert collection["metadata_type"] == "collection"
        assert collection["metadata"]["herbSpecies"] == "Tulsi"
        assert collection["metadata_is_fallback"] is False
        assert collection["participant_profile"]["name"] == "Anita"

    async def test_unknown_participant_has_no_profile(self, client: AsyncClient, seeded_batch):
        resp = await client.get(f"/api/tracking/{seeded_batch['collection_id']}")

        processing = resp.json()["events"][2]
        assert processing["participant_profile"] is None
        assert processing["metadata_type"] == "processing"

    async def test_missing_metadata_degrades(self, client: AsyncClient, seeded_batch):
        """content_hash 无法解析时事件依然返回"""
        resp = await client.post(
            f"/api/batches/{seeded_batch['batch_id']}/events",
            json={
                "event_type": "Manufacturing",
                "parent_event_id": seeded_batch["processing_id"],
                "participant": "0xMFG",
                "content_hash": "QmNotPinned",
            },
        )
        manufacturing_id = resp.json()["event_id"]

        resp = await client.get(f"/api/tracking/{manufacturing_id}")

        assert resp.status_code == 200
        manufacturing = resp.json()["events"][-1]
        assert manufacturing["event"]["event_id"] == manufacturing_id
        assert manufacturing["metadata"] is None
        assert manufacturing["metadata_type"] is None

    async def test_unknown_event(self, client: AsyncClient):
        resp = await client.get("/api/tracking/QUALITY_TEST-0-0")

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "EVENT_NOT_FOUND"


class TestTracePath:
    """路径查询"""

    async def test_path_root_first(self, client: AsyncClient, seeded_batch):
        resp = await client.get(f"/api/tracking/{seeded_batch['processing_id']}/path")

        assert resp.status_code == 200
        data = resp.json()
        assert [step["event"]["event_id"] for step in data["path"]] == [
            seeded_batch["collection_id"],
            seeded_batch["quality_test_id"],
            seeded_batch["processing_id"],
        ]
        assert data["target_event"]["event"]["event_id"] == seeded_batch["processing_id"]
        assert data["target_event"]["metadata_type"] == "processing"

    async def test_path_unknown_event(self, client: AsyncClient):
        resp = await client.get("/api/tracking/PROCESSING-0-0/path")

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "EVENT_NOT_FOUND"


class TestMalformedLedgerData:
    """账本中已有的畸形数据只降级，不报错"""

    async def test_cycle_in_ledger(self, client: AsyncClient, test_app):
        ledger = test_app.state.ledger
        root = Event(
            event_id="C1",
            batch_id="HERB-LOOP",
            event_type=EventType.COLLECTION,
            participant=COLLECTOR,
            timestamp=100,
        )
        await ledger.create_batch(
            Batch(batch_id="HERB-LOOP", herb_species="Neem", creation_time=100), root
        )
        for event_id, parent in (("A", "B"), ("B", "A")):
            await ledger.add_event(
                Event(
                    event_id=event_id,
                    batch_id="HERB-LOOP",
                    event_type=EventType.PROCESSING,
                    parent_event_id=parent,
                    participant="0x1",
                    timestamp=200,
                )
            )

        tree = await client.get("/api/batches/HERB-LOOP/tree")
        assert tree.status_code == 200
        data = tree.json()
        assert [root["event_id"] for root in data["provenance_tree"]] == ["C1", "A"]
        assert data["integrity"]["cycle_event_ids"] == ["A", "B"]

        path = await client.get("/api/tracking/A/path")
        assert path.status_code == 200
        assert [step["event"]["event_id"] for step in path.json()["path"]] == ["B", "A"]


async def _seed_chain(ledger, batch_id: str, depth: int) -> list[str]:
    """直接写入 E0 -> E1 -> ... -> E{depth-1} 的线性链"""
    event_ids = [f"E{i}" for i in range(depth)]
    await ledger.create_batch(
        Batch(batch_id=batch_id, herb_species="Tulsi", creation_time=100),
        Event(
            event_id=event_ids[0],
            batch_id=batch_id,
            event_type=EventType.COLLECTION,
            participant=COLLECTOR,
            content_hash="QmCollection",
            timestamp=100,
        ),
    )
    for i in range(1, depth):
        await ledger.add_event(
            Event(
                event_id=event_ids[i],
                batch_id=batch_id,
                event_type=EventType.PROCESSING,
                parent_event_id=event_ids[i - 1],
                participant="0x1",
                content_hash="QmProcessing",
                timestamp=100 + i,
            )
        )
    return event_ids


def _chain_ids(node: dict) -> list[str]:
    """沿单链逐层取 event_id"""
    ids = []
    while True:
        ids.append(node["event_id"])
        if not node["children"]:
            return ids
        [node] = node["children"]


class TestLongChains:
    """深链（超过 pydantic 序列化递归上限）照常返回"""

    DEPTH = 300

    async def test_tree_endpoint(self, client: AsyncClient, test_app):
        event_ids = await _seed_chain(test_app.state.ledger, "HERB-DEEP", self.DEPTH)

        resp = await client.get("/api/batches/HERB-DEEP/tree")

        assert resp.status_code == 200
        data = resp.json()
        assert len(data["provenance_tree"]) == 1
        assert _chain_ids(data["provenance_tree"][0]) == event_ids
        assert data["integrity"]["cycle_event_ids"] == []

    async def test_trace_endpoint(self, client: AsyncClient, test_app):
        event_ids = await _seed_chain(test_app.state.ledger, "HERB-DEEP", self.DEPTH)

        resp = await client.get(f"/api/tracking/{event_ids[-1]}")

        assert resp.status_code == 200
        data = resp.json()
        assert len(data["events"]) == self.DEPTH
        assert data["events"][-1]["metadata_type"] == "processing"
        assert _chain_ids(data["provenance_tree"][0]) == event_ids

    async def test_path_endpoint(self, client: AsyncClient, test_app):
        event_ids = await _seed_chain(test_app.state.ledger, "HERB-DEEP", self.DEPTH)

        resp = await client.get(f"/api/tracking/{event_ids[-1]}/path")

        assert resp.status_code == 200
        assert [step["event"]["event_id"] for step in resp.json()["path"]] == event_ids
