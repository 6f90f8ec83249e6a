"""审计回放模块

从 task_events 表回放每个任务的快照（state / assignee / version），
与 tasks 表逐行比对，检查"每次变更恰好一条事件"的配对约束。
只读，不修改任何数据。
"""

import time

import structlog
from pydantic import BaseModel

from .models.enums import EventType, TaskState
from .models.event import TaskEvent
from .store import StoreGroup

log = structlog.get_logger()


class TaskSnapshot(BaseModel):
    """由事件回放得到的任务快照"""

    task_id: str
    state: TaskState = TaskState.NEW
    assignee_id: str | None = None
    version: int = 1


class AuditDrift(BaseModel):
    """一条不一致记录"""

    task_id: str
    reason: str
    expected: dict | None = None
    actual: dict | None = None


def apply_event(snapshots: dict[str, TaskSnapshot], event: TaskEvent) -> None:
    """将单个事件应用到快照（内存中操作）

    Args:
        snapshots: task_id -> TaskSnapshot 的映射表（会被就地修改）
        event: 要应用的事件
    """
    task_id = event.task_id

    if event.event_type == EventType.TASK_CREATED:
        snapshots[task_id] = TaskSnapshot(
            task_id=task_id,
            state=TaskState(event.event_data.get("initial_state", TaskState.NEW)),
        )
        return

    snapshot = snapshots.get(task_id)
    if snapshot is None:
        # 缺少 TASK_CREATED：跳过，由比对阶段报告
        return

    if event.event_type == EventType.TASK_ASSIGNED:
        snapshots[task_id] = snapshot.model_copy(
            update={
                "assignee_id": event.event_data.get("assignee_id"),
                "version": snapshot.version + 1,
            }
        )
    elif event.event_type == EventType.TASK_STATE_CHANGED:
        snapshots[task_id] = snapshot.model_copy(
            update={
                "state": TaskState(event.event_data.get("to_state", snapshot.state)),
                "version": snapshot.version + 1,
            }
        )


def replay_events(events: list[TaskEvent]) -> dict[str, TaskSnapshot]:
    """按追加顺序回放全部事件"""
    snapshots: dict[str, TaskSnapshot] = {}
    for event in events:
        apply_event(snapshots, event)
    return snapshots


async def verify_audit_trail(store_group: StoreGroup) -> list[AuditDrift]:
    """回放事件并与 tasks 表比对

    Returns:
        不一致记录列表，空列表表示审计链完整
    """
    start_time = time.monotonic()

    events = await store_group.event_store.get_all_events()
    tasks = await store_group.task_store.list_all()

    await log.ainfo(
        "audit_verify_started",
        event_count=len(events),
        task_count=len(tasks),
    )

    snapshots = replay_events(events)
    drifts: list[AuditDrift] = []

    for task in tasks:
        snapshot = snapshots.pop(task.task_id, None)
        actual = {
            "state": task.state.value,
            "assignee_id": task.assignee_id,
            "version": task.version,
        }
        if snapshot is None:
            drifts.append(
                AuditDrift(task_id=task.task_id, reason="missing_created_event", actual=actual)
            )
            continue

        expected = {
            "state": snapshot.state.value,
            "assignee_id": snapshot.assignee_id,
            "version": snapshot.version,
        }
        if expected != actual:
            drifts.append(
                AuditDrift(
                    task_id=task.task_id,
                    reason="row_event_mismatch",
                    expected=expected,
                    actual=actual,
                )
            )

    # 有事件无任务行
    for task_id in snapshots:
        drifts.append(AuditDrift(task_id=task_id, reason="missing_task_row"))

    elapsed_ms = int((time.monotonic() - start_time) * 1000)
    await log.ainfo(
        "audit_verify_completed",
        drift_count=len(drifts),
        elapsed_ms=elapsed_ms,
    )
    return drifts
