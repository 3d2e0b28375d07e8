"""CLI 入口模块 -- python -m herbionyx.core <command>

支持的命令：
  stats <batch_id>   输出批次聚合统计
  verify <batch_id>  输出批次数据完整性诊断
"""

import asyncio
import sys

from .config import get_db_path

_USAGE = """用法: python -m herbionyx.core <command> <batch_id>
命令:
  stats   输出批次聚合统计
  verify  输出批次数据完整性诊断"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 3:
        print(_USAGE)
        sys.exit(1)

    command, batch_id = sys.argv[1], sys.argv[2]

    if command == "stats":
        sys.exit(asyncio.run(print_statistics(batch_id)))
    elif command == "verify":
        sys.exit(asyncio.run(verify_batch(batch_id)))
    else:
        print(f"未知命令: {command}")
        print("可用命令: stats, verify")
        sys.exit(1)


async def _load_events(batch_id: str):
    from .store import SqliteLedger

    db_path = get_db_path()
    print(f"账本路径: {db_path}")

    ledger = await SqliteLedger.open(db_path)
    try:
        return await ledger.get_batch_events(batch_id)
    finally:
        await ledger.close()


async def print_statistics(batch_id: str) -> int:
    """输出批次统计，批次无事件时返回 1"""
    from .provenance import compute_statistics

    events = await _load_events(batch_id)
    stats = compute_statistics(events)
    if not stats.has_data:
        print(f"批次 {batch_id} 没有事件")
        return 1

    print(stats.model_dump_json(indent=2))
    return 0


async def verify_batch(batch_id: str) -> int:
    """输出完整性诊断，发现问题时返回 2"""
    from .provenance import check_integrity

    events = await _load_events(batch_id)
    report = check_integrity(events)
    print(report.model_dump_json(indent=2))
    if report.is_clean:
        print(f"批次 {batch_id} 数据完整（{len(events)} 条事件）")
        return 0
    return 2


if __name__ == "__main__":
    main()
