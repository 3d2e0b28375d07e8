"""溯源图输出模型 -- TreeNode / 统计 / 完整性报告"""

from typing import Any

from pydantic import BaseModel, Field

from .enums import EventType
from .event import Event


class TreeNode(Event):
    """溯源树节点 = Event 字段 + 有序子节点

    cycle_terminated=True 表示该节点已出现在自己的祖先路径上，
    不再向下展开。
    """

    children: list["TreeNode"] = Field(default_factory=list, description="直接子节点")
    cycle_terminated: bool = Field(default=False, description="是否因环路截断")

    @classmethod
    def from_event(cls, event: Event, cycle_terminated: bool = False) -> "TreeNode":
        return cls(**event.model_dump(), cycle_terminated=cycle_terminated)

    def walk(self):
        """先序遍历当前子树（含自身）"""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> dict[str, Any]:
        """序列化为 JSON 兼容 dict

        model_dump 会逐层递归 children，深链超过 pydantic-core 的递归上限；
        这里每个节点只 dump 自身字段，children 用显式栈逐层填充。
        """
        root = self.model_dump(mode="json", exclude={"children"})
        stack = [(self, root)]
        while stack:
            node, data = stack.pop()
            data["children"] = []
            for child in node.children:
                child_data = child.model_dump(mode="json", exclude={"children"})
                data["children"].append(child_data)
                stack.append((child, child_data))
        return root


def forest_to_dicts(forest: list[TreeNode]) -> list[dict[str, Any]]:
    return [root.to_dict() for root in forest]


class TimeSpan(BaseModel):
    """事件时间跨度（秒）"""

    earliest: int
    latest: int
    duration: int


class BranchStatistics(BaseModel):
    """分支统计"""

    total_branches: int = Field(default=0, description="至少有一个子事件的父事件数")
    max_branching_factor: int = Field(default=0, description="最大出度，无分支时为 0")
    branching_points: dict[str, int] = Field(
        default_factory=dict,
        description="父事件 ID -> 直接子事件数",
    )


class BatchStatistics(BaseModel):
    """批次聚合统计

    time_span 为 None 表示没有数据，调用方应先判断 has_data。
    """

    total_events: int = 0
    event_type_counts: dict[EventType, int] = Field(default_factory=dict)
    participant_count: int = 0
    time_span: TimeSpan | None = None
    branch_statistics: BranchStatistics = Field(default_factory=BranchStatistics)

    @property
    def has_data(self) -> bool:
        return self.total_events > 0


class IntegrityReport(BaseModel):
    """数据完整性诊断

    这些问题来自上游写入路径，读取侧只做报告，不拒绝查询。
    """

    duplicate_event_ids: list[str] = Field(default_factory=list)
    dangling_parent_ids: dict[str, str] = Field(
        default_factory=dict,
        description="event_id -> 不存在的 parent_event_id",
    )
    cycle_event_ids: list[str] = Field(default_factory=list)
    rooted_non_collection_ids: list[str] = Field(
        default_factory=list,
        description="没有父事件的非 Collection 事件",
    )
    collection_with_parent_ids: list[str] = Field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (
            self.duplicate_event_ids
            or self.dangling_parent_ids
            or self.cycle_event_ids
            or self.rooted_non_collection_ids
            or self.collection_with_parent_ids
        )
