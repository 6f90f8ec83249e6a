"""EventStore SQLite 实现

事件表 append-only：只允许插入，不允许更新或删除。
event_id 由 AUTOINCREMENT 按追加顺序分配，作为同一时间戳事件的排序依据。
"""

import asyncio
import json

import aiosqlite

from ..clock import MonotonicClock, format_ts, parse_ts
from ..models.enums import EventType
from ..models.event import TaskEvent

_EVENT_COLUMNS = (
    "event_id, task_id, tenant_id, workspace_id, event_type, event_data, created_at"
)


class SqliteEventStore:
    """EventStore 的 SQLite 实现"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        lock: asyncio.Lock | None = None,
        clock: MonotonicClock | None = None,
    ) -> None:
        self._conn = conn
        self._lock = lock or asyncio.Lock()
        self._clock = clock or MonotonicClock()

    async def save_event(self, event: TaskEvent) -> TaskEvent:
        """追加事件（append-only），补齐 event_id 与缺省的 created_at

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        created_at = event.created_at or self._clock.now()
        cursor = await self._conn.execute(
            """
            INSERT INTO task_events (task_id, tenant_id, workspace_id,
                                     event_type, event_data, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                event.task_id,
                event.tenant_id,
                event.workspace_id,
                event.event_type.value,
                json.dumps(event.event_data, ensure_ascii=False),
                format_ts(created_at),
            ),
        )
        return event.model_copy(
            update={"event_id": cursor.lastrowid, "created_at": created_at}
        )

    async def find_events_by_task_id(self, task_id: str, limit: int) -> list[TaskEvent]:
        """查询任务时间线，最新在前（created_at 倒序，event_id 倒序）"""
        async with self._lock:
            cursor = await self._conn.execute(
                f"""
                SELECT {_EVENT_COLUMNS} FROM task_events
                WHERE task_id = ?
                ORDER BY created_at DESC, event_id DESC
                LIMIT ?
                """,
                (task_id, limit),
            )
            rows = await cursor.fetchall()
        return [self._row_to_event(row) for row in rows]

    async def find_events_by_tenant(self, tenant_id: str, limit: int) -> list[TaskEvent]:
        """查询租户事件流，最新在前（供外部消费者拉取）"""
        async with self._lock:
            cursor = await self._conn.execute(
                f"""
                SELECT {_EVENT_COLUMNS} FROM task_events
                WHERE tenant_id = ?
                ORDER BY created_at DESC, event_id DESC
                LIMIT ?
                """,
                (tenant_id, limit),
            )
            rows = await cursor.fetchall()
        return [self._row_to_event(row) for row in rows]

    async def get_all_events(self) -> list[TaskEvent]:
        """查询所有事件，按追加顺序正序（用于审计回放）"""
        async with self._lock:
            cursor = await self._conn.execute(
                f"""
                SELECT {_EVENT_COLUMNS} FROM task_events
                ORDER BY task_id, created_at ASC, event_id ASC
                """
            )
            rows = await cursor.fetchall()
        return [self._row_to_event(row) for row in rows]

    @staticmethod
    def _row_to_event(row: aiosqlite.Row) -> TaskEvent:
        """将数据库行转换为 TaskEvent 模型"""
        event_data = json.loads(row[5]) if row[5] else {}
        return TaskEvent(
            event_id=row[0],
            task_id=row[1],
            tenant_id=row[2],
            workspace_id=row[3],
            event_type=EventType(row[4]),
            event_data=event_data,
            created_at=parse_ts(row[6]),
        )
