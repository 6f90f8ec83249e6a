"""TaskHub Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .commands import AssignTaskCommand, CreateTaskCommand, TransitionTaskCommand
from .enums import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    EventType,
    Role,
    TaskPriority,
    TaskState,
    parse_role,
    validate_transition,
)
from .event import TaskEvent
from .idempotency import IdempotencyLookup, IdempotencyRecord
from .payloads import (
    TaskAssignedPayload,
    TaskCreatedPayload,
    TaskStateChangedPayload,
)
from .results import (
    AssignmentSummary,
    AssignTaskResult,
    CreateTaskResult,
    EventList,
    StateChangeSummary,
    TaskDetail,
    TaskPage,
    TransitionTaskResult,
)
from .task import Task, validate_title

__all__ = [
    # 枚举
    "TaskState",
    "TaskPriority",
    "Role",
    "EventType",
    "parse_role",
    # 状态机
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "validate_transition",
    # Task
    "Task",
    "validate_title",
    # Event
    "TaskEvent",
    "TaskCreatedPayload",
    "TaskAssignedPayload",
    "TaskStateChangedPayload",
    # Idempotency
    "IdempotencyRecord",
    "IdempotencyLookup",
    # Commands
    "CreateTaskCommand",
    "AssignTaskCommand",
    "TransitionTaskCommand",
    # Results
    "CreateTaskResult",
    "AssignTaskResult",
    "TransitionTaskResult",
    "AssignmentSummary",
    "StateChangeSummary",
    "TaskDetail",
    "TaskPage",
    "EventList",
]
