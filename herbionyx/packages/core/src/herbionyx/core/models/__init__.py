"""HerbionYX Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import CHILD_EVENT_TYPES, EventType, ParticipantRole
from .event import Batch, Event, GeoLocation
from .metadata import (
    CollectionMetadata,
    EventMetadata,
    ManufacturingMetadata,
    ProcessingMetadata,
    QualityTestMetadata,
    parse_metadata,
)
from .provenance import (
    BatchStatistics,
    BranchStatistics,
    IntegrityReport,
    TimeSpan,
    TreeNode,
    forest_to_dicts,
)

__all__ = [
    # 枚举
    "EventType",
    "ParticipantRole",
    "CHILD_EVENT_TYPES",
    # Event / Batch
    "Event",
    "Batch",
    "GeoLocation",
    # 元数据
    "EventMetadata",
    "CollectionMetadata",
    "QualityTestMetadata",
    "ProcessingMetadata",
    "ManufacturingMetadata",
    "parse_metadata",
    # 溯源输出
    "TreeNode",
    "forest_to_dicts",
    "TimeSpan",
    "BranchStatistics",
    "BatchStatistics",
    "IntegrityReport",
]
