"""Task 聚合 -- 任务实体 + 授权规则 + 状态流转规则

规则检查与状态变更分离：
- check_transition / check_assign 只做判定，失败抛出业务异常
- transitioned / assigned 返回版本 +1 的新实例（不修改原对象）
"""

from datetime import datetime

from pydantic import BaseModel, Field
from ulid import ULID

from ..config import TITLE_MAX_LENGTH
from ..errors import AuthorizationError, InvalidTransitionError, TaskValidationError
from .enums import (
    TERMINAL_STATES,
    Role,
    TaskPriority,
    TaskState,
    parse_role,
    validate_transition,
)


def validate_title(title: str | None) -> str:
    """校验并规范化标题

    Returns:
        trim 之后的标题

    Raises:
        TaskValidationError: 标题为空/全空白，或 trim 后超过 TITLE_MAX_LENGTH
    """
    if title is None or not title.strip():
        raise TaskValidationError("title is required")
    trimmed = title.strip()
    if len(trimmed) > TITLE_MAX_LENGTH:
        raise TaskValidationError(
            f"title must be at most {TITLE_MAX_LENGTH} characters"
        )
    return trimmed


class Task(BaseModel):
    """Task 数据模型

    version 从 1 开始，每次成功变更严格 +1。
    """

    task_id: str = Field(description="唯一标识，ULID 格式")
    tenant_id: str = Field(description="所属租户")
    workspace_id: str = Field(description="所属 workspace")
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH, description="任务标题")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    state: TaskState = Field(default=TaskState.NEW, description="当前状态")
    assignee_id: str | None = Field(default=None, description="负责人 ID")
    version: int = Field(default=1, ge=1, description="乐观锁版本号")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @classmethod
    def new(
        cls,
        *,
        tenant_id: str,
        workspace_id: str,
        title: str,
        now: datetime,
        priority: TaskPriority | None = None,
    ) -> "Task":
        """构造新任务（标题校验在此执行）"""
        return cls(
            task_id=str(ULID()),
            tenant_id=tenant_id,
            workspace_id=workspace_id,
            title=validate_title(title),
            priority=priority or TaskPriority.MEDIUM,
            state=TaskState.NEW,
            assignee_id=None,
            version=1,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def matches_version(self, version: int) -> bool:
        return self.version == version

    def check_transition(self, role: Role | str | None, to_state: TaskState) -> None:
        """判定 (role, to_state) 在当前状态下是否允许

        先查流转表（与角色无关），再套用角色规则。

        Raises:
            InvalidTransitionError: 流转表不允许
            AuthorizationError: 角色无权执行该流转
        """
        if not validate_transition(self.state, to_state):
            raise InvalidTransitionError()

        parsed = parse_role(role)

        if parsed == Role.AGENT:
            # 未分配时开始处理即视为认领
            if self.state == TaskState.NEW and to_state == TaskState.IN_PROGRESS:
                return
            if self.state == TaskState.IN_PROGRESS and to_state == TaskState.DONE:
                if self.assignee_id is None:
                    raise AuthorizationError("agent cannot complete unassigned task")
                return
            raise AuthorizationError("agent not authorized for this transition")

        if parsed == Role.MANAGER:
            if to_state == TaskState.CANCELLED:
                if self.state in (TaskState.NEW, TaskState.IN_PROGRESS):
                    return
                raise AuthorizationError("cannot cancel from this state")
            raise AuthorizationError("manager not authorized for this transition")

        raise AuthorizationError("unknown role")

    def check_assign(self, role: Role | str | None) -> None:
        """判定角色能否分配该任务

        Raises:
            AuthorizationError: 非 MANAGER，或任务已在终态
        """
        if parse_role(role) != Role.MANAGER:
            raise AuthorizationError("only manager can assign tasks")
        if self.is_terminal:
            raise AuthorizationError("cannot assign DONE or CANCELLED tasks")

    def transitioned(self, to_state: TaskState, now: datetime) -> "Task":
        """返回流转到 to_state 后的新版本"""
        return self.model_copy(
            update={
                "state": to_state,
                "version": self.version + 1,
                "updated_at": now,
            }
        )

    def assigned(self, assignee_id: str, now: datetime) -> "Task":
        """返回分配给 assignee_id 后的新版本（覆盖原负责人）"""
        return self.model_copy(
            update={
                "assignee_id": assignee_id,
                "version": self.version + 1,
                "updated_at": now,
            }
        )
