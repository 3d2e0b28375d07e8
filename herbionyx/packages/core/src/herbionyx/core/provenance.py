"""溯源图引擎 -- 从扁平事件列表重建父子关系

输入是某个批次的完整事件快照（无序、可能含重复 ID / 悬空父引用 / 环路），
输出溯源森林、根到目标事件的路径、聚合统计。

所有函数都是纯函数：不修改输入，不做 I/O，不保存跨调用状态。
畸形数据只会降级（孤儿成为根、环路截断、缺失目标返回空），不会抛异常；
异常只用于调用方误用（传入 None）。
"""

from collections.abc import Iterable, Sequence

import structlog

from .models.enums import EventType
from .models.event import Event
from .models.provenance import (
    BatchStatistics,
    BranchStatistics,
    IntegrityReport,
    TimeSpan,
    TreeNode,
)

log = structlog.get_logger()


def _require_events(events: Sequence[Event] | None, operation: str) -> Sequence[Event]:
    if events is None:
        raise TypeError(f"{operation}() 需要事件列表，收到 None")
    return events


def index_events(events: Iterable[Event]) -> dict[str, Event]:
    """按 event_id 建立索引

    重复 ID 后写覆盖先写（保留首次出现的位置），并记录 warning。
    """
    index: dict[str, Event] = {}
    for event in events:
        if event.event_id in index:
            log.warning(
                "duplicate_event_id",
                event_id=event.event_id,
                batch_id=event.batch_id,
            )
        index[event.event_id] = event
    return index


def _index_children(
    index: dict[str, Event],
) -> tuple[list[Event], dict[str, list[Event]]]:
    """将事件分为根事件和 parent -> children 映射（兄弟节点保持首次出现顺序）"""
    roots: list[Event] = []
    children: dict[str, list[Event]] = {}

    for event in index.values():
        if not event.has_parent:
            roots.append(event)
        elif event.parent_event_id not in index:
            # 悬空父引用：按孤儿根处理
            log.warning(
                "dangling_parent_reference",
                event_id=event.event_id,
                parent_event_id=event.parent_event_id,
            )
            roots.append(event)
        else:
            children.setdefault(event.parent_event_id, []).append(event)

    return roots, children


def _materialize(
    root: Event,
    children: dict[str, list[Event]],
    reached: set[str],
) -> TreeNode:
    """从根事件展开子树

    显式栈代替递归；path 是当前下降路径上的事件 ID，入栈时加入、
    出栈时移除。子节点 ID 已在 path 中时标记 cycle_terminated 且不再展开。
    """
    root_node = TreeNode.from_event(root)
    reached.add(root.event_id)
    path = {root.event_id}
    stack = [(root_node, iter(children.get(root.event_id, [])))]

    while stack:
        node, pending = stack[-1]
        child = next(pending, None)
        if child is None:
            stack.pop()
            path.remove(node.event_id)
            continue

        if child.event_id in path:
            log.warning(
                "provenance_cycle_detected",
                event_id=child.event_id,
                parent_event_id=node.event_id,
            )
            node.children.append(TreeNode.from_event(child, cycle_terminated=True))
            continue

        child_node = TreeNode.from_event(child)
        node.children.append(child_node)
        reached.add(child.event_id)
        path.add(child.event_id)
        stack.append((child_node, iter(children.get(child.event_id, []))))

    return root_node


def build_tree(events: Sequence[Event]) -> list[TreeNode]:
    """重建溯源森林

    1. 按 event_id 建索引（重复 ID 后写覆盖）
    2. parent 为空或无法解析的事件作为根，其余挂到父事件下
    3. 从每个根展开子树，带环路保护
    4. 仍未到达的事件（祖先链是纯环路）按输入顺序提升为额外的根

    Args:
        events: 单个批次的全部事件，顺序不限

    Returns:
        根节点列表，按根事件在输入中的首次出现顺序排列；空输入返回 []
    """
    events = _require_events(events, "build_tree")
    index = index_events(events)
    roots, children = _index_children(index)

    reached: set[str] = set()
    forest = [_materialize(root, children, reached) for root in roots]

    for event in index.values():
        if event.event_id not in reached:
            entry = _cycle_entry(event, index)
            log.warning(
                "provenance_cycle_detected",
                event_id=entry.event_id,
                unreached_event_id=event.event_id,
            )
            forest.append(_materialize(entry, children, reached))

    return forest


def _cycle_entry(event: Event, index: dict[str, Event]) -> Event:
    """沿父链回溯，返回第一个重复出现的事件（必定位于环上）

    只对任何根都无法到达的事件调用：它们的父链不会终止，必然进入环路。
    """
    seen: set[str] = set()
    current = event
    while current.event_id not in seen:
        seen.add(current.event_id)
        current = index[current.parent_event_id]
    return current


def find_path(events: Sequence[Event], target_event_id: str) -> list[Event]:
    """查找从最终根事件到目标事件的路径（根在前）

    沿 parent_event_id 反向回溯，遇到空父引用、无法解析的父引用
    或本次回溯中已访问过的事件时停止。

    Returns:
        根在前的事件列表，末尾为目标事件；目标不存在时返回 []
    """
    events = _require_events(events, "find_path")
    index = index_events(events)

    path: list[Event] = []
    visited: set[str] = set()
    current_id: str | None = target_event_id

    while current_id and current_id in index:
        if current_id in visited:
            log.warning(
                "provenance_cycle_detected",
                event_id=current_id,
                target_event_id=target_event_id,
            )
            break
        visited.add(current_id)
        event = index[current_id]
        path.append(event)
        current_id = event.parent_event_id if event.has_parent else None

    path.reverse()
    return path


def compute_branch_statistics(events: Sequence[Event]) -> BranchStatistics:
    """计算分支统计

    只统计能解析到批次内其他事件的父引用；自引用不计入。
    """
    index = index_events(events)
    branching_points: dict[str, int] = {}

    for event in index.values():
        parent_id = event.parent_event_id
        if not event.has_parent or parent_id == event.event_id or parent_id not in index:
            continue
        branching_points[parent_id] = branching_points.get(parent_id, 0) + 1

    return BranchStatistics(
        total_branches=len(branching_points),
        # 没有任何父事件时为 0
        max_branching_factor=max(branching_points.values(), default=0),
        branching_points=branching_points,
    )


def compute_statistics(events: Sequence[Event]) -> BatchStatistics:
    """计算批次聚合统计

    计数与时间跨度基于原始输入；空输入时 time_span 为 None（无数据），
    调用方应先检查 total_events / has_data。
    """
    events = _require_events(events, "compute_statistics")

    event_type_counts: dict[EventType, int] = {}
    for event in events:
        event_type_counts[event.event_type] = event_type_counts.get(event.event_type, 0) + 1

    time_span: TimeSpan | None = None
    if events:
        timestamps = [event.timestamp for event in events]
        earliest, latest = min(timestamps), max(timestamps)
        time_span = TimeSpan(earliest=earliest, latest=latest, duration=latest - earliest)

    return BatchStatistics(
        total_events=len(events),
        event_type_counts=event_type_counts,
        participant_count=len({event.participant for event in events}),
        time_span=time_span,
        branch_statistics=compute_branch_statistics(events),
    )


def check_integrity(events: Sequence[Event]) -> IntegrityReport:
    """诊断批次数据完整性（重复 ID、悬空父引用、环路、根类型异常）

    不改变任何查询结果，仅供运维排查写入路径问题。
    """
    events = _require_events(events, "check_integrity")

    seen: set[str] = set()
    duplicates: list[str] = []
    for event in events:
        if event.event_id in seen and event.event_id not in duplicates:
            duplicates.append(event.event_id)
        seen.add(event.event_id)

    index = {event.event_id: event for event in events}
    report = IntegrityReport(duplicate_event_ids=duplicates)

    for event in index.values():
        if event.event_type == EventType.COLLECTION and event.has_parent:
            report.collection_with_parent_ids.append(event.event_id)
        if not event.has_parent:
            if event.event_type != EventType.COLLECTION:
                report.rooted_non_collection_ids.append(event.event_id)
        elif event.parent_event_id not in index:
            report.dangling_parent_ids[event.event_id] = event.parent_event_id

    report.cycle_event_ids = _find_cycle_members(index)
    return report


def _find_cycle_members(index: dict[str, Event]) -> list[str]:
    """找出所有位于环路上的事件 ID（按索引顺序）

    每个事件至多一个父事件，沿父链前进时若回到本轮路径上的节点，
    从该节点开始的路径片段就是一个环。
    """
    on_cycle: set[str] = set()
    settled: set[str] = set()

    for start_id in index:
        if start_id in settled:
            continue
        trail: list[str] = []
        position: dict[str, int] = {}
        current_id: str | None = start_id

        while current_id and current_id in index and current_id not in settled:
            if current_id in position:
                on_cycle.update(trail[position[current_id]:])
                break
            position[current_id] = len(trail)
            trail.append(current_id)
            event = index[current_id]
            current_id = event.parent_event_id if event.has_parent else None

        settled.update(trail)

    return [event_id for event_id in index if event_id in on_cycle]
