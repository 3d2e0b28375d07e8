"""配置常量模块 -- 可通过环境变量覆盖

包含数据目录、SQLite 账本路径、账本后端选择等可配置项。
"""

import os
from pathlib import Path

# 可选账本后端
LEDGER_BACKENDS: frozenset[str] = frozenset({"sqlite", "memory"})


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("HERBIONYX_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 账本路径"""
    return os.environ.get(
        "HERBIONYX_DB_PATH",
        str(_get_base_dir() / "sqlite" / "herbionyx.db"),
    )


def get_ledger_backend() -> str:
    """获取账本后端名称（sqlite / memory），未知值抛 ValueError"""
    backend = os.environ.get("HERBIONYX_LEDGER_BACKEND", "sqlite").strip().lower()
    if backend not in LEDGER_BACKENDS:
        raise ValueError(
            f"HERBIONYX_LEDGER_BACKEND 取值无效: {backend!r}，"
            f"可选值: {', '.join(sorted(LEDGER_BACKENDS))}"
        )
    return backend


# 批次 ID 前缀（HERB-<timestamp>-<random>）
BATCH_ID_PREFIX: str = "HERB"

# 事件 ID 随机后缀上界
ID_RANDOM_UPPER_BOUND: int = 10000
