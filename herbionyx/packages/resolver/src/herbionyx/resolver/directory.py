"""ParticipantDirectory -- 参与者目录

链上地址 -> 展示资料（姓名 / 机构 / 角色）。
地址比较不区分大小写（校验和地址与小写地址视为同一参与者）。
启动时从配置加载，运行期间可追加登记。
"""

import json
from pathlib import Path

import structlog

from .models import ParticipantProfile

log = structlog.get_logger()


class ParticipantDirectory:
    """参与者目录"""

    def __init__(self, profiles: list[ParticipantProfile] | None = None) -> None:
        # 按小写地址建立索引，后登记覆盖先登记
        self._profiles: dict[str, ParticipantProfile] = {}
        for profile in profiles or []:
            self.register(profile)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "ParticipantDirectory":
        """从 JSON 文件加载（内容为 ParticipantProfile 对象数组）

        Raises:
            OSError: 文件无法读取
            pydantic.ValidationError: 条目格式不合法
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        profiles = [ParticipantProfile.model_validate(item) for item in data]
        log.info("participant_directory_loaded", path=str(path), count=len(profiles))
        return cls(profiles)

    def register(self, profile: ParticipantProfile) -> None:
        """登记或覆盖一个参与者"""
        self._profiles[profile.address.lower()] = profile

    def resolve(self, address: str) -> ParticipantProfile | None:
        """按地址查询参与者资料，未知地址返回 None"""
        if not address:
            return None
        return self._profiles.get(address.lower())

    def list_all(self) -> list[ParticipantProfile]:
        """列出所有参与者（按地址排序）"""
        return sorted(self._profiles.values(), key=lambda p: p.address.lower())

    def __len__(self) -> int:
        return len(self._profiles)
