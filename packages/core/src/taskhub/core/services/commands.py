"""TaskCommandService -- 写命令编排

每个命令的流程：
1. 加载聚合（不存在或跨 workspace 一律 NotFound）
2. 授权判定（聚合规则）
3. 校验期望版本（快速失败）
4. 基于旧快照构造事件，应用变更（version + 1）
5. 单事务 CAS 写回任务行 + 追加事件

失败立即抛出，不做本地恢复或重试；CAS 是唯一的冲突检测点。
"""

import aiosqlite
import structlog

from ..errors import TaskNotFoundError, VersionConflictError
from ..models.commands import AssignTaskCommand, CreateTaskCommand, TransitionTaskCommand
from ..models.enums import parse_role
from ..models.results import (
    AssignmentSummary,
    AssignTaskResult,
    CreateTaskResult,
    StateChangeSummary,
    TransitionTaskResult,
)
from ..models.task import Task, validate_title
from ..outbox import task_assigned_event, task_created_event, task_state_changed_event
from ..store import StoreGroup
from ..store.transaction import create_task_with_event, update_task_with_event

log = structlog.get_logger()


class TaskCommandService:
    """任务写命令服务（CreateTask / AssignTask / TransitionTaskState）"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    async def create_task(self, command: CreateTaskCommand) -> tuple[CreateTaskResult, bool]:
        """创建任务（可选幂等键去重）

        Returns:
            (result, created) -- created=False 表示幂等命中，result 为缓存的原始响应

        Raises:
            TaskValidationError: 标题非法
        """
        title = validate_title(command.title)
        key = command.idempotency_key

        if key:
            cached = await self._lookup_cached(key)
            if cached is not None:
                return cached, False

        task = Task.new(
            tenant_id=command.tenant_id,
            workspace_id=command.workspace_id,
            title=title,
            priority=command.priority,
            now=self._stores.clock.now(),
        )
        result = CreateTaskResult(task=task)
        event = task_created_event(task)

        try:
            await create_task_with_event(
                self._stores,
                task,
                event,
                idempotency_key=key or None,
                response=result.model_dump_json() if key else None,
            )
        except aiosqlite.IntegrityError as e:
            if key and self._is_idempotency_conflict(e):
                # 并发重复请求：本次写入已整体回滚，回查并返回先写入者的结果
                cached = await self._lookup_cached(key)
                if cached is not None:
                    return cached, False
            raise

        log.info(
            "task_created",
            task_id=task.task_id,
            tenant_id=task.tenant_id,
            workspace_id=task.workspace_id,
            priority=task.priority.value,
        )
        return result, True

    async def assign_task(self, command: AssignTaskCommand) -> AssignTaskResult:
        """分配任务（仅 MANAGER，终态任务拒绝）

        Raises:
            TaskNotFoundError / AuthorizationError / VersionConflictError
        """
        task = await self._load(command.workspace_id, command.task_id)
        task.check_assign(command.role)
        self._ensure_version(task, command.expected_version)

        event = task_assigned_event(task, command.assignee_id)
        updated = task.assigned(command.assignee_id, self._stores.clock.now())
        await self._persist(updated, command.expected_version, event)

        log.info(
            "task_assigned",
            task_id=task.task_id,
            previous_assignee=task.assignee_id,
            new_assignee=command.assignee_id,
            version=updated.version,
        )
        return AssignTaskResult(
            task=updated,
            event=AssignmentSummary(
                previous_assignee=task.assignee_id,
                new_assignee=command.assignee_id,
            ),
        )

    async def transition_task_state(
        self, command: TransitionTaskCommand
    ) -> TransitionTaskResult:
        """状态流转（流转表 + 角色规则）

        Raises:
            TaskNotFoundError / InvalidTransitionError / AuthorizationError / VersionConflictError
        """
        task = await self._load(command.workspace_id, command.task_id)
        task.check_transition(command.role, command.to_state)
        self._ensure_version(task, command.expected_version)

        # check_transition 通过即保证角色合法
        role = parse_role(command.role)
        event = task_state_changed_event(task, task.state, command.to_state, role)
        updated = task.transitioned(command.to_state, self._stores.clock.now())
        await self._persist(updated, command.expected_version, event)

        log.info(
            "task_state_changed",
            task_id=task.task_id,
            from_state=task.state.value,
            to_state=command.to_state.value,
            changed_by=role.value,
            version=updated.version,
        )
        return TransitionTaskResult(
            task=updated,
            event=StateChangeSummary(
                from_state=task.state,
                to_state=command.to_state,
                changed_by=role,
            ),
        )

    async def _load(self, workspace_id: str, task_id: str) -> Task:
        task = await self._stores.task_store.find_by_id(task_id)
        if task is None or task.workspace_id != workspace_id:
            raise TaskNotFoundError(task_id)
        return task

    @staticmethod
    def _ensure_version(task: Task, expected_version: int) -> None:
        if not task.matches_version(expected_version):
            log.info(
                "task_version_conflict",
                task_id=task.task_id,
                expected_version=expected_version,
                current_version=task.version,
            )
            raise VersionConflictError(task.task_id, expected_version)

    async def _persist(self, updated: Task, expected_version: int, event) -> None:
        try:
            await update_task_with_event(self._stores, updated, expected_version, event)
        except VersionConflictError:
            # 读后被并发写者抢先：存储层 CAS 拒绝
            log.info(
                "task_version_conflict",
                task_id=updated.task_id,
                expected_version=expected_version,
                detected_by="storage",
            )
            raise

    async def _lookup_cached(self, key: str) -> CreateTaskResult | None:
        lookup = await self._stores.idempotency_store.find_by_key(key)
        if not lookup.found or lookup.response is None:
            return None
        log.info("idempotency_replayed", idempotency_key=key)
        return CreateTaskResult.model_validate_json(lookup.response)

    @staticmethod
    def _is_idempotency_conflict(error: Exception) -> bool:
        if not isinstance(error, aiosqlite.IntegrityError):
            return False
        return "idempotency_keys.key" in str(error)
