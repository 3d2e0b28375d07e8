"""CLI 测试 -- stats / verify 命令"""

import json

import pytest
from herbionyx.core import __main__ as cli
from herbionyx.core.models import Batch, EventType
from herbionyx.core.store import SqliteLedger


@pytest.fixture
def db_path(tmp_path, monkeypatch) -> str:
    path = str(tmp_path / "cli.db")
    monkeypatch.setenv("HERBIONYX_DB_PATH", path)
    return path


async def _seed(db_path: str, events) -> None:
    ledger = await SqliteLedger.open(db_path)
    try:
        batch = Batch(batch_id="HERB-1", herb_species="Brahmi", creation_time=100)
        await ledger.create_batch(batch, events[0])
        for event in events[1:]:
            await ledger.add_event(event)
    finally:
        await ledger.close()


def _json_block(output: str) -> dict:
    """截取输出中的 JSON 部分"""
    start = output.index("{")
    end = output.rindex("}") + 1
    return json.loads(output[start:end])


class TestCli:
    """命令执行"""

    async def test_stats(self, db_path, linear_chain, capsys):
        await _seed(db_path, linear_chain)

        assert await cli.print_statistics("HERB-1") == 0
        stats = _json_block(capsys.readouterr().out)
        assert stats["total_events"] == 4
        assert stats["branch_statistics"]["total_branches"] == 3

    async def test_stats_unknown_batch(self, db_path, capsys):
        assert await cli.print_statistics("HERB-X") == 1
        assert "没有事件" in capsys.readouterr().out

    async def test_verify_clean(self, db_path, linear_chain, capsys):
        await _seed(db_path, linear_chain)

        assert await cli.verify_batch("HERB-1") == 0
        assert "数据完整" in capsys.readouterr().out

    async def test_verify_reports_issues(self, db_path, make_event, capsys):
        await _seed(
            db_path,
            [
                make_event("C1", EventType.COLLECTION),
                make_event("Q1", parent="GONE"),
            ],
        )

        assert await cli.verify_batch("HERB-1") == 2
        report = _json_block(capsys.readouterr().out)
        assert report["dangling_parent_ids"] == {"Q1": "GONE"}

    def test_usage_without_args(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.argv", ["herbionyx.core"])
        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 1
        assert "用法" in capsys.readouterr().out
