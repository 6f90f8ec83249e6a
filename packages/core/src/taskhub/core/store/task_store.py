"""TaskStore SQLite 实现

写方法（create / update_with_version）不自动提交，需在
StoreGroup.transaction() 内调用；读方法持有写锁，
不会读到其他命令尚未提交的半个工作单元。
"""

import asyncio

import aiosqlite
import structlog

from ..clock import format_ts, parse_ts
from ..cursor import decode_cursor, encode_cursor
from ..errors import VersionConflictError
from ..models.enums import TaskState
from ..models.results import TaskPage
from ..models.task import Task

log = structlog.get_logger()

_TASK_COLUMNS = (
    "task_id, tenant_id, workspace_id, title, priority, state, "
    "assignee_id, version, created_at, updated_at"
)


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection, lock: asyncio.Lock | None = None) -> None:
        self._conn = conn
        self._lock = lock or asyncio.Lock()

    async def create(self, task: Task) -> Task:
        """插入任务记录（task_id 已存在时抛出 IntegrityError）

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            f"""
            INSERT INTO tasks ({_TASK_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.task_id,
                task.tenant_id,
                task.workspace_id,
                task.title,
                task.priority.value,
                task.state.value,
                task.assignee_id,
                task.version,
                format_ts(task.created_at),
                format_ts(task.updated_at),
            ),
        )
        return task

    async def update_with_version(self, task: Task, expected_version: int) -> Task:
        """CAS 更新：仅当存储版本仍等于 expected_version 时写入

        单条条件 UPDATE 即冲突检测点，不做额外加锁、重试或合并。

        Raises:
            VersionConflictError: 没有匹配 (task_id, version=expected_version) 的行
        """
        cursor = await self._conn.execute(
            """
            UPDATE tasks
            SET title = ?, priority = ?, state = ?, assignee_id = ?,
                version = ?, updated_at = ?
            WHERE task_id = ? AND version = ?
            """,
            (
                task.title,
                task.priority.value,
                task.state.value,
                task.assignee_id,
                task.version,
                format_ts(task.updated_at),
                task.task_id,
                expected_version,
            ),
        )
        if cursor.rowcount == 0:
            raise VersionConflictError(task.task_id, expected_version)
        return task

    async def find_by_id(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        async with self._lock:
            cursor = await self._conn.execute(
                f"SELECT {_TASK_COLUMNS} FROM tasks WHERE task_id = ?",
                (task_id,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def find_by_workspace(
        self,
        workspace_id: str,
        *,
        limit: int,
        state: TaskState | str | None = None,
        assignee_id: str | None = None,
        cursor: str | None = None,
    ) -> TaskPage:
        """按 workspace 查询任务，created_at 倒序 + 游标分页

        多取一条（limit + 1）判断是否存在下一页；
        非法游标被忽略，从第一页开始。
        """
        query = f"SELECT {_TASK_COLUMNS} FROM tasks WHERE workspace_id = ?"
        params: list = [workspace_id]

        # 空字符串筛选条件等同于未传
        if state:
            query += " AND state = ?"
            params.append(str(state))

        if assignee_id:
            query += " AND assignee_id = ?"
            params.append(assignee_id)

        boundary = decode_cursor(cursor)
        if boundary is not None:
            query += " AND created_at < ?"
            params.append(boundary)

        query += " ORDER BY created_at DESC LIMIT ?"
        params.append(limit + 1)

        async with self._lock:
            db_cursor = await self._conn.execute(query, params)
            rows = await db_cursor.fetchall()

        tasks = [self._row_to_task(row) for row in rows[:limit]]
        next_cursor = None
        if len(rows) > limit and tasks:
            next_cursor = encode_cursor(tasks[-1].created_at)

        return TaskPage(tasks=tasks, next_cursor=next_cursor)

    async def list_all(self) -> list[Task]:
        """查询全部任务（用于审计回放比对）"""
        async with self._lock:
            cursor = await self._conn.execute(
                f"SELECT {_TASK_COLUMNS} FROM tasks ORDER BY created_at ASC"
            )
            rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            task_id=row[0],
            tenant_id=row[1],
            workspace_id=row[2],
            title=row[3],
            priority=row[4],
            state=row[5],
            assignee_id=row[6],
            version=row[7],
            created_at=parse_ts(row[8]),
            updated_at=parse_ts(row[9]),
        )
