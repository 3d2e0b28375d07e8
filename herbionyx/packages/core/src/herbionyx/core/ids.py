"""批次 / 事件 ID 生成

格式 <PREFIX>-<毫秒时间戳>-<随机数> 只是约定，唯一性才是契约；
冲突由账本的唯一约束拒绝，BatchService 换一个 ID 重试。
"""

import secrets
import time

from .config import BATCH_ID_PREFIX, ID_RANDOM_UPPER_BOUND
from .models.enums import EventType


def _stamp() -> str:
    return f"{int(time.time() * 1000)}-{secrets.randbelow(ID_RANDOM_UPPER_BOUND)}"


def generate_batch_id() -> str:
    """生成批次 ID，如 HERB-1700000000000-42"""
    return f"{BATCH_ID_PREFIX}-{_stamp()}"


def generate_event_id(event_type: EventType) -> str:
    """生成事件 ID，如 QUALITY_TEST-1700000000000-42"""
    return f"{event_type.id_prefix}-{_stamp()}"
