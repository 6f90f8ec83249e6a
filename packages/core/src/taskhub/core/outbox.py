"""事件工厂 -- 由聚合状态变更构造不可变审计事件

每次成功变更恰好产生一条事件；事件与任务行在同一事务内提交
（见 store.transaction）。事件必须在变更应用之前基于旧快照构造，
以便记录 previous_assignee / from_state。
"""

from .models.enums import EventType, Role, TaskState
from .models.event import TaskEvent
from .models.payloads import (
    TaskAssignedPayload,
    TaskCreatedPayload,
    TaskStateChangedPayload,
)
from .models.task import Task


def _base_fields(task: Task) -> dict:
    return {
        "task_id": task.task_id,
        "tenant_id": task.tenant_id,
        "workspace_id": task.workspace_id,
    }


def task_created_event(task: Task) -> TaskEvent:
    """TASK_CREATED: {title, priority, initial_state}"""
    return TaskEvent(
        **_base_fields(task),
        event_type=EventType.TASK_CREATED,
        event_data=TaskCreatedPayload(
            title=task.title,
            priority=task.priority,
            initial_state=task.state,
        ).model_dump(mode="json"),
    )


def task_assigned_event(task: Task, assignee_id: str) -> TaskEvent:
    """TASK_ASSIGNED: {assignee_id, previous_assignee}

    Args:
        task: 分配前的任务快照
        assignee_id: 新负责人
    """
    return TaskEvent(
        **_base_fields(task),
        event_type=EventType.TASK_ASSIGNED,
        event_data=TaskAssignedPayload(
            assignee_id=assignee_id,
            previous_assignee=task.assignee_id,
        ).model_dump(mode="json"),
    )


def task_state_changed_event(
    task: Task,
    from_state: TaskState,
    to_state: TaskState,
    changed_by: Role,
) -> TaskEvent:
    """TASK_STATE_CHANGED: {from_state, to_state, changed_by}"""
    return TaskEvent(
        **_base_fields(task),
        event_type=EventType.TASK_STATE_CHANGED,
        event_data=TaskStateChangedPayload(
            from_state=from_state,
            to_state=to_state,
            changed_by=changed_by,
        ).model_dump(mode="json"),
    )
