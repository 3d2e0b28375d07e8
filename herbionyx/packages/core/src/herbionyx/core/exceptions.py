"""账本异常体系

只用于写入路径与后端访问；溯源引擎对畸形数据从不抛异常。
"""


class LedgerError(Exception):
    """账本基础异常"""

    code = "LEDGER_ERROR"

    def __init__(self, message: str, recoverable: bool = False) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class BatchNotFoundError(LedgerError):
    """批次不存在"""

    code = "BATCH_NOT_FOUND"

    def __init__(self, batch_id: str) -> None:
        super().__init__(f"Batch with id {batch_id} does not exist")
        self.batch_id = batch_id


class DuplicateBatchError(LedgerError):
    """批次 ID 已存在"""

    code = "DUPLICATE_BATCH"

    def __init__(self, batch_id: str) -> None:
        super().__init__(f"Batch with id {batch_id} already exists")
        self.batch_id = batch_id


class DuplicateEventError(LedgerError):
    """事件 ID 已存在（事件表 append-only，ID 不可复用）"""

    code = "DUPLICATE_EVENT"

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event with id {event_id} already exists")
        self.event_id = event_id


class ParentEventNotFoundError(LedgerError):
    """父事件不在同一批次内"""

    code = "PARENT_EVENT_NOT_FOUND"

    def __init__(self, batch_id: str, parent_event_id: str) -> None:
        super().__init__(
            f"Parent event {parent_event_id} does not exist in batch {batch_id}"
        )
        self.batch_id = batch_id
        self.parent_event_id = parent_event_id


class InvalidEventError(LedgerError):
    """事件内容不合法（如 Collection 带父事件、非 Collection 缺父事件）"""

    code = "INVALID_EVENT"
