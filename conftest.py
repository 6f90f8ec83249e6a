"""全局 pytest 配置 -- 临时 SQLite 数据库 fixture + 测试环境变量隔离"""

from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio


@pytest.fixture(autouse=True)
def _isolate_taskhub_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """屏蔽宿主机上的 TASKHUB_* / Logfire 配置"""
    for key in (
        "TASKHUB_DATA_DIR",
        "TASKHUB_DB_PATH",
        "TASKHUB_LOG_FORMAT",
        "TASKHUB_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from taskhub.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()
