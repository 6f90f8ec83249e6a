"""SQLite 数据库初始化

PRAGMA 配置 + 三张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id       TEXT PRIMARY KEY,
    tenant_id     TEXT NOT NULL,
    workspace_id  TEXT NOT NULL,
    title         TEXT NOT NULL,
    priority      TEXT NOT NULL DEFAULT 'MEDIUM',
    state         TEXT NOT NULL DEFAULT 'NEW',
    assignee_id   TEXT,
    version       INTEGER NOT NULL DEFAULT 1,
    created_at    TEXT NOT NULL,
    updated_at    TEXT NOT NULL
);
"""

_TASKS_INDEXES = [
    # ListTasks 主路径：workspace 内按 created_at 倒序
    "CREATE INDEX IF NOT EXISTS idx_tasks_workspace_created ON tasks(workspace_id, created_at DESC);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_tenant ON tasks(tenant_id);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_state ON tasks(state);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assignee ON tasks(assignee_id);",
]

# task_events 表 DDL（outbox，append-only）
_EVENTS_DDL = """
CREATE TABLE IF NOT EXISTS task_events (
    event_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    task_id       TEXT NOT NULL,
    tenant_id     TEXT NOT NULL,
    workspace_id  TEXT NOT NULL,
    event_type    TEXT NOT NULL,
    event_data    TEXT NOT NULL DEFAULT '{}',
    created_at    TEXT NOT NULL,

    FOREIGN KEY (task_id) REFERENCES tasks(task_id)
);
"""

_EVENTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_events_task ON task_events(task_id, created_at DESC, event_id DESC);",
    "CREATE INDEX IF NOT EXISTS idx_events_tenant ON task_events(tenant_id, created_at DESC, event_id DESC);",
]

# idempotency_keys 表 DDL
_IDEMPOTENCY_DDL = """
CREATE TABLE IF NOT EXISTS idempotency_keys (
    key         TEXT PRIMARY KEY,
    response    TEXT NOT NULL,
    created_at  TEXT NOT NULL,
    expires_at  TEXT NOT NULL
);
"""

_IDEMPOTENCY_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_idempotency_expires ON idempotency_keys(expires_at);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_TASKS_DDL)
    await conn.execute(_EVENTS_DDL)
    await conn.execute(_IDEMPOTENCY_DDL)

    # 创建索引
    for idx_sql in _TASKS_INDEXES + _EVENTS_INDEXES + _IDEMPOTENCY_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
