"""Event Payload 子类型

每类事件的 payload 完全由对应的变更决定。
"""

from pydantic import BaseModel

from .enums import Role, TaskPriority, TaskState


class TaskCreatedPayload(BaseModel):
    """TASK_CREATED 事件 payload"""

    title: str
    priority: TaskPriority
    initial_state: TaskState


class TaskAssignedPayload(BaseModel):
    """TASK_ASSIGNED 事件 payload"""

    assignee_id: str
    previous_assignee: str | None = None


class TaskStateChangedPayload(BaseModel):
    """TASK_STATE_CHANGED 事件 payload"""

    from_state: TaskState
    to_state: TaskState
    changed_by: Role
