"""进程重启持久性测试

测试内容：
1. 创建任务 -> 关闭 StoreGroup -> 重新打开 -> 任务、事件、幂等记录完整
2. WAL 模式验证
3. SQLite 实现满足存储接口
"""

from pathlib import Path

import aiosqlite
from taskhub.core.models import CreateTaskCommand, EventType, TaskState
from taskhub.core.services import TaskCommandService
from taskhub.core.store import create_store_group
from taskhub.core.store.sqlite_init import init_db, verify_wal_mode


class TestDurability:
    """进程重启后任务不丢失"""

    async def test_data_survives_restart(self, tmp_path: Path):
        db_path = str(tmp_path / "durability.db")

        # 第一次打开：创建数据
        group1 = await create_store_group(db_path)
        result, _ = await TaskCommandService(group1).create_task(
            CreateTaskCommand(
                tenant_id="t1",
                workspace_id="w1",
                title="持久性测试任务",
                idempotency_key="dur-key-001",
            )
        )
        task_id = result.task.task_id
        await group1.close()

        # 第二次打开：验证数据
        group2 = await create_store_group(db_path)
        try:
            restored = await group2.task_store.find_by_id(task_id)
            assert restored is not None
            assert restored.title == "持久性测试任务"
            assert restored.state == TaskState.NEW

            events = await group2.event_store.find_events_by_task_id(task_id, 20)
            assert [e.event_type for e in events] == [EventType.TASK_CREATED]

            replayed, created = await TaskCommandService(group2).create_task(
                CreateTaskCommand(
                    tenant_id="t1",
                    workspace_id="w1",
                    title="持久性测试任务",
                    idempotency_key="dur-key-001",
                )
            )
            assert created is False
            assert replayed.task.task_id == task_id
        finally:
            await group2.close()

    async def test_wal_mode_enabled(self, tmp_path: Path):
        conn = await aiosqlite.connect(str(tmp_path / "wal.db"))
        await init_db(conn)
        assert await verify_wal_mode(conn) is True
        await conn.close()

    async def test_init_db_is_idempotent(self, db_conn):
        await init_db(db_conn)
        cursor = await db_conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
        )
        names = {row[0] for row in await cursor.fetchall()}
        assert {"tasks", "task_events", "idempotency_keys"} <= names


class TestStoreProtocols:
    """SQLite 实现满足存储接口"""

    async def test_sqlite_stores_satisfy_protocols(self, store_group):
        from taskhub.core.store import EventStore, IdempotencyStore, TaskStore

        assert isinstance(store_group.task_store, TaskStore)
        assert isinstance(store_group.event_store, EventStore)
        assert isinstance(store_group.idempotency_store, IdempotencyStore)
