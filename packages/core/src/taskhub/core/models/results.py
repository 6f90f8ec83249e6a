"""命令/查询结果模型 -- 与传输层无关的稳定字段契约"""

from pydantic import BaseModel, Field

from .enums import EventType, Role, TaskState
from .event import TaskEvent
from .task import Task


class CreateTaskResult(BaseModel):
    """CreateTask 结果（幂等缓存的即是其 JSON 序列化）"""

    task: Task


class AssignmentSummary(BaseModel):
    """分配事件摘要"""

    type: EventType = EventType.TASK_ASSIGNED
    previous_assignee: str | None
    new_assignee: str


class StateChangeSummary(BaseModel):
    """状态流转事件摘要"""

    type: EventType = EventType.TASK_STATE_CHANGED
    from_state: TaskState
    to_state: TaskState
    changed_by: Role


class AssignTaskResult(BaseModel):
    task: Task
    event: AssignmentSummary


class TransitionTaskResult(BaseModel):
    task: Task
    event: StateChangeSummary


class TaskDetail(BaseModel):
    """GetTask 结果 -- 任务 + 最新事件时间线（倒序）"""

    task: Task
    timeline: list[TaskEvent] = Field(default_factory=list)


class TaskPage(BaseModel):
    """ListTasks 结果 -- next_cursor 为 None 表示最后一页"""

    tasks: list[Task] = Field(default_factory=list)
    next_cursor: str | None = None


class EventList(BaseModel):
    """GetEvents 结果"""

    events: list[TaskEvent] = Field(default_factory=list)
    count: int = 0
