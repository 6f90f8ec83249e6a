"""apps/gateway 测试配置 -- FastAPI app + httpx AsyncClient fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskhub.core.store import create_store_group


@pytest_asyncio.fixture
async def app(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """创建测试用 FastAPI app 实例（手动初始化 StoreGroup，绕过 lifespan）"""
    monkeypatch.setenv("TASKHUB_DB_PATH", str(tmp_path / "sqlite" / "test.db"))

    from taskhub.gateway.main import create_app

    application = create_app()
    store_group = await create_store_group(str(tmp_path / "sqlite" / "test.db"))
    application.state.store_group = store_group

    yield application

    await store_group.close()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
