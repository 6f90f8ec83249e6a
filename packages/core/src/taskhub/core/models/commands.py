"""写命令输入模型

标题等业务规则不在此校验，由 Task 聚合统一执行；
role 保留原始字符串，未知角色交给聚合判定为无权。
"""

from pydantic import BaseModel, Field

from .enums import Role, TaskPriority, TaskState


class CreateTaskCommand(BaseModel):
    """创建任务"""

    tenant_id: str
    workspace_id: str
    title: str
    priority: TaskPriority = TaskPriority.MEDIUM
    idempotency_key: str | None = Field(
        default=None,
        description="客户端幂等键，缺省时不去重",
    )


class AssignTaskCommand(BaseModel):
    """分配任务"""

    workspace_id: str
    task_id: str
    assignee_id: str
    role: Role | str
    expected_version: int


class TransitionTaskCommand(BaseModel):
    """任务状态流转"""

    workspace_id: str
    task_id: str
    to_state: TaskState
    role: Role | str
    expected_version: int
