"""事件 + 任务行原子事务封装（outbox）

在同一 SQLite 事务内原子提交任务行写入和事件追加：
任一半失败则整体回滚，读方不会观察到半个工作单元。
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import aiosqlite

from ..models.event import TaskEvent
from ..models.task import Task

if TYPE_CHECKING:
    from . import StoreGroup


@asynccontextmanager
async def atomic(conn: aiosqlite.Connection, lock: asyncio.Lock) -> AsyncIterator[None]:
    """单个工作单元：持锁期间独占共享连接，成功提交、失败回滚

    Raises:
        Exception: 块内任何异常在回滚后原样抛出
    """
    async with lock:
        try:
            yield
            await conn.commit()
        except BaseException:
            await conn.rollback()
            raise


async def create_task_with_event(
    stores: "StoreGroup",
    task: Task,
    event: TaskEvent,
    idempotency_key: str | None = None,
    response: str | None = None,
) -> TaskEvent:
    """单事务写入新任务 + TASK_CREATED 事件（+ 可选幂等记录）

    Args:
        stores: StoreGroup 实例
        task: 新任务
        event: TASK_CREATED 事件
        idempotency_key: 幂等键，非空时同事务写入幂等记录
        response: 幂等记录缓存的响应（JSON）

    Returns:
        已分配 event_id 的事件

    Raises:
        aiosqlite.IntegrityError: task_id 或幂等键已存在（事务已回滚）
    """
    async with stores.transaction():
        await stores.task_store.create(task)
        saved = await stores.event_store.save_event(event)
        if idempotency_key is not None and response is not None:
            await stores.idempotency_store.save(idempotency_key, response)
    return saved


async def update_task_with_event(
    stores: "StoreGroup",
    task: Task,
    expected_version: int,
    event: TaskEvent,
) -> TaskEvent:
    """单事务 CAS 更新任务行 + 追加事件

    Raises:
        VersionConflictError: 存储版本已不是 expected_version（事务已回滚，无事件写入）
    """
    async with stores.transaction():
        await stores.task_store.update_with_version(task, expected_version)
        saved = await stores.event_store.save_event(event)
    return saved
