"""TaskQueryService -- 只读投影（GetTask / ListTasks / GetEvents）

查询没有副作用；事件流是外部消费者的拉取接口（至少一次语义由消费者处理）。
"""

from ..config import (
    DEFAULT_PAGE_SIZE,
    EVENTS_LIMIT,
    EVENTS_MAX_LIMIT,
    MAX_PAGE_SIZE,
    TIMELINE_LIMIT,
)
from ..errors import TaskNotFoundError
from ..models.enums import TaskState
from ..models.results import EventList, TaskDetail, TaskPage
from ..store import StoreGroup


def normalize_page_size(limit: int | None) -> int:
    """缺省或非正数取默认值，超过上限截断"""
    if limit is None or limit < 1:
        return DEFAULT_PAGE_SIZE
    return min(limit, MAX_PAGE_SIZE)


def normalize_events_limit(limit: int | None) -> int:
    """缺省或非正数取默认值，超过上限截断"""
    if limit is None or limit < 1:
        return EVENTS_LIMIT
    return min(limit, EVENTS_MAX_LIMIT)


class TaskQueryService:
    """任务查询服务"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    async def get_task(self, workspace_id: str, task_id: str) -> TaskDetail:
        """查询任务详情 + 时间线（最新在前）

        跨 workspace 查询与不存在同样报 NotFound。
        """
        task = await self._stores.task_store.find_by_id(task_id)
        if task is None or task.workspace_id != workspace_id:
            raise TaskNotFoundError(task_id)

        timeline = await self._stores.event_store.find_events_by_task_id(
            task_id, TIMELINE_LIMIT
        )
        return TaskDetail(task=task, timeline=timeline)

    async def list_tasks(
        self,
        workspace_id: str,
        *,
        state: TaskState | None = None,
        assignee_id: str | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> TaskPage:
        """按 workspace 列出任务，created_at 倒序 + 游标分页

        游标只编码时间边界，不绑定筛选条件。
        """
        return await self._stores.task_store.find_by_workspace(
            workspace_id,
            limit=normalize_page_size(limit),
            state=state,
            assignee_id=assignee_id,
            cursor=cursor,
        )

    async def get_events(self, tenant_id: str, limit: int | None = None) -> EventList:
        """查询租户事件流（最新在前）"""
        events = await self._stores.event_store.find_events_by_tenant(
            tenant_id, normalize_events_limit(limit)
        )
        return EventList(events=events, count=len(events))
