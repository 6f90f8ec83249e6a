"""TaskHub Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
StoreGroup 由进程生命周期显式创建和关闭，不使用模块级单例。
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from ..clock import MonotonicClock
from ..config import IDEMPOTENCY_TTL_SECONDS
from .event_store import SqliteEventStore
from .idempotency_store import SqliteIdempotencyStore
from .protocols import EventStore, IdempotencyStore, TaskStore
from .sqlite_init import init_db
from .task_store import SqliteTaskStore
from .transaction import atomic, create_task_with_event, update_task_with_event


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接、写锁和时钟"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        clock: MonotonicClock | None = None,
        idempotency_ttl_seconds: int = IDEMPOTENCY_TTL_SECONDS,
    ) -> None:
        self.conn = conn
        self.clock = clock or MonotonicClock()
        self.lock = asyncio.Lock()
        self.task_store: TaskStore = SqliteTaskStore(conn, self.lock)
        self.event_store: EventStore = SqliteEventStore(conn, self.lock, self.clock)
        self.idempotency_store: IdempotencyStore = SqliteIdempotencyStore(
            conn,
            self.lock,
            self.clock,
            ttl_seconds=idempotency_ttl_seconds,
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """原子工作单元（见 transaction.atomic）"""
        async with atomic(self.conn, self.lock):
            yield

    async def close(self) -> None:
        await self.conn.close()


async def create_store_group(
    db_path: str,
    clock: MonotonicClock | None = None,
    idempotency_ttl_seconds: int = IDEMPOTENCY_TTL_SECONDS,
) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径
        clock: 可选时钟（测试注入）
        idempotency_ttl_seconds: 幂等记录有效期

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(
        conn=conn,
        clock=clock,
        idempotency_ttl_seconds=idempotency_ttl_seconds,
    )


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteTaskStore",
    "SqliteEventStore",
    "SqliteIdempotencyStore",
    "TaskStore",
    "EventStore",
    "IdempotencyStore",
    "init_db",
    "atomic",
    "create_task_with_event",
    "update_task_with_event",
]
