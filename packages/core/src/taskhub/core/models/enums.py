"""枚举定义

包含 TaskState 状态机、TaskPriority、Role、EventType 枚举，
以及 VALID_TRANSITIONS 合法流转映射和 TERMINAL_STATES 终态集合。
"""

from enum import StrEnum


class TaskState(StrEnum):
    """Task 状态机"""

    # 活跃状态
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"

    # 终态
    DONE = "DONE"
    CANCELLED = "CANCELLED"


# 合法状态流转（与角色无关的流转表）
VALID_TRANSITIONS: dict[TaskState, set[TaskState]] = {
    TaskState.NEW: {TaskState.IN_PROGRESS, TaskState.CANCELLED},
    TaskState.IN_PROGRESS: {TaskState.DONE, TaskState.CANCELLED},
    # 终态不可再流转
    TaskState.DONE: set(),
    TaskState.CANCELLED: set(),
}

TERMINAL_STATES: set[TaskState] = {
    TaskState.DONE,
    TaskState.CANCELLED,
}


class TaskPriority(StrEnum):
    """任务优先级"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Role(StrEnum):
    """操作者角色（仅建模角色，不区分具体 agent 身份）"""

    AGENT = "agent"
    MANAGER = "manager"


class EventType(StrEnum):
    """事件类型"""

    TASK_CREATED = "TASK_CREATED"
    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_STATE_CHANGED = "TASK_STATE_CHANGED"


def validate_transition(from_state: TaskState, to_state: TaskState) -> bool:
    """验证状态流转是否合法

    Args:
        from_state: 当前状态
        to_state: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_state, set())
    return to_state in allowed


def parse_role(value: "Role | str | None") -> Role | None:
    """解析角色（大小写不敏感），未知角色返回 None"""
    if value is None:
        return None
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        return None
