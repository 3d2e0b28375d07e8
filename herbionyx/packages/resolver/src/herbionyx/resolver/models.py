"""数据模型 -- MetadataResult + ParticipantProfile"""

from typing import Any

from herbionyx.core.models import EventMetadata, ParticipantRole, parse_metadata
from pydantic import BaseModel, Field


class MetadataResult(BaseModel):
    """元数据解析结果

    所有解析源（IPFS 网关、静态 mock）统一返回此类型。
    raw 保留原始 JSON；metadata 为按 type 解析后的变体，形状未知时为 None。
    """

    content_hash: str = Field(description="请求的内容哈希")
    raw: dict[str, Any] = Field(default_factory=dict, description="原始元数据 JSON")
    source: str = Field(default="", description="实际解析源（网关 URL 或 static）")
    duration_ms: int = Field(default=0, ge=0, description="端到端耗时（毫秒）")

    # 降级信息
    is_fallback: bool = Field(default=False, description="是否来自降级解析源")
    fallback_reason: str = Field(default="", description="降级原因说明")

    @property
    def metadata(self) -> EventMetadata | None:
        return parse_metadata(self.raw)


class ParticipantProfile(BaseModel):
    """参与者展示资料"""

    address: str = Field(description="链上地址")
    name: str = Field(default="", description="姓名")
    organization: str = Field(default="", description="所属机构")
    role: ParticipantRole = Field(description="角色")
