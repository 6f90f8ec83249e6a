"""Store Protocol 接口定义

定义 TaskStore、EventStore、IdempotencyStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
任何实现完整接口的存储引擎都可替换 SQLite 实现；
update_with_version 必须是真正的原子条件写。
"""

from typing import Protocol, runtime_checkable

from ..models.enums import TaskState
from ..models.event import TaskEvent
from ..models.idempotency import IdempotencyLookup, IdempotencyRecord
from ..models.results import TaskPage
from ..models.task import Task


@runtime_checkable
class TaskStore(Protocol):
    """Task 存储接口"""

    async def find_by_id(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    async def find_by_workspace(
        self,
        workspace_id: str,
        *,
        limit: int,
        state: TaskState | str | None = None,
        assignee_id: str | None = None,
        cursor: str | None = None,
    ) -> TaskPage:
        """按 workspace 分页查询，created_at 倒序"""
        ...

    async def create(self, task: Task) -> Task:
        """创建任务记录（task_id 已存在时失败）"""
        ...

    async def update_with_version(self, task: Task, expected_version: int) -> Task:
        """CAS 更新，版本不匹配时抛出 VersionConflictError"""
        ...

    async def list_all(self) -> list[Task]:
        """全部任务（审计回放）"""
        ...


@runtime_checkable
class EventStore(Protocol):
    """Event 存储接口

    事件表 append-only：只允许插入，不允许更新或删除。
    """

    async def save_event(self, event: TaskEvent) -> TaskEvent:
        """追加事件，分配 event_id（及缺省的 created_at）"""
        ...

    async def find_events_by_task_id(self, task_id: str, limit: int) -> list[TaskEvent]:
        """查询任务时间线，最新在前"""
        ...

    async def find_events_by_tenant(self, tenant_id: str, limit: int) -> list[TaskEvent]:
        """查询租户事件流，最新在前"""
        ...

    async def get_all_events(self) -> list[TaskEvent]:
        """全部事件，按追加顺序正序（审计回放）"""
        ...


@runtime_checkable
class IdempotencyStore(Protocol):
    """幂等记录存储接口"""

    async def find_by_key(self, key: str) -> IdempotencyLookup:
        """查询幂等键（过期视为不存在并清除）"""
        ...

    async def save(self, key: str, response: str) -> IdempotencyRecord:
        """写入幂等记录（固定有效期）"""
        ...

    async def purge_expired(self) -> int:
        """删除过期记录，返回条数"""
        ...
