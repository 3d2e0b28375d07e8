"""Event / Batch Domain Model

事件只追加、不可变更：写入后不允许更新或删除。
event_id 在批次内唯一，格式 <TYPE>-<timestamp>-<random> 只是约定。
因果关系只由 parent_event_id 决定，timestamp 顺序不代表因果顺序。
"""

from pydantic import BaseModel, ConfigDict, Field

from .enums import EventType


class GeoLocation(BaseModel):
    """采集/处理地点"""

    model_config = ConfigDict(frozen=True)

    latitude: str = Field(default="", description="纬度")
    longitude: str = Field(default="", description="经度")
    zone: str = Field(default="", description="审批区域")
    timestamp: int = Field(default=0, ge=0, description="定位时间（秒）")


class Event(BaseModel):
    """供应链事件 -- 一次采集、质检、加工或制造动作的不可变记录"""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(min_length=1, description="批次内唯一标识")
    batch_id: str = Field(default="", description="所属批次 ID")
    event_type: EventType = Field(description="事件类型")
    parent_event_id: str | None = Field(
        default=None,
        description="父事件 ID，空值表示根事件",
    )
    participant: str = Field(description="记录者标识（链上地址）")
    content_hash: str = Field(default="", description="链下元数据的内容寻址哈希")
    timestamp: int = Field(ge=0, description="记录时间（秒）")
    qr_code_hash: str = Field(default="", description="绑定的二维码哈希")
    location: GeoLocation | None = Field(default=None, description="地点信息")

    @property
    def has_parent(self) -> bool:
        """是否声明了父事件（None 与空串均视为根）"""
        return bool(self.parent_event_id)


class Batch(BaseModel):
    """批次 -- 共享同一 batch_id 的一组事件"""

    batch_id: str = Field(description="批次 ID")
    herb_species: str = Field(description="药材品种")
    creation_time: int = Field(ge=0, description="根 Collection 事件的时间（秒）")
    event_count: int = Field(default=0, ge=0, description="事件数量")
