"""枚举定义 -- 供应链事件类型

EventType 的值即统计输出中的类型名；链上合约以整数序号存储事件类型，
通过 from_chain_code() 转换。
"""

from enum import StrEnum


class EventType(StrEnum):
    """供应链事件类型"""

    COLLECTION = "Collection"
    QUALITY_TEST = "QualityTest"
    PROCESSING = "Processing"
    MANUFACTURING = "Manufacturing"

    @classmethod
    def from_chain_code(cls, code: int) -> "EventType":
        """将合约中的事件类型序号（0..3）转换为枚举值

        Raises:
            ValueError: 序号不在已知范围内
        """
        if not 0 <= code < len(_CHAIN_CODES):
            raise ValueError(f"未知的链上事件类型序号: {code}")
        return _CHAIN_CODES[code]

    @property
    def chain_code(self) -> int:
        """合约中的事件类型序号"""
        return _CHAIN_CODES.index(self)

    @property
    def id_prefix(self) -> str:
        """事件 ID 前缀（<TYPE>-<timestamp>-<random>）"""
        return self.name


# 合约枚举顺序
_CHAIN_CODES: list[EventType] = [
    EventType.COLLECTION,
    EventType.QUALITY_TEST,
    EventType.PROCESSING,
    EventType.MANUFACTURING,
]

# 可以挂在父事件之下的事件类型（Collection 永远是根）
CHILD_EVENT_TYPES: frozenset[EventType] = frozenset(
    {
        EventType.QUALITY_TEST,
        EventType.PROCESSING,
        EventType.MANUFACTURING,
    }
)


class ParticipantRole(StrEnum):
    """参与者角色"""

    COLLECTOR = "collector"
    TESTER = "tester"
    PROCESSOR = "processor"
    MANUFACTURER = "manufacturer"
    ADMIN = "admin"
    CONSUMER = "consumer"
