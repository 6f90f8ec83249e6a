"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import pytest_asyncio
from taskhub.core.clock import MonotonicClock
from taskhub.core.store import StoreGroup, create_store_group


class ManualTime:
    """可手动推进的时间源（注入 MonotonicClock）"""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest_asyncio.fixture
async def core_db_path(tmp_path: Path) -> Path:
    """核心层临时数据库路径"""
    return tmp_path / "core_test.db"


@pytest.fixture
def manual_time() -> ManualTime:
    return ManualTime(datetime(2026, 3, 1, 9, 0, tzinfo=UTC))


@pytest_asyncio.fixture
async def store_group(core_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """使用真实时钟的 StoreGroup"""
    group = await create_store_group(str(core_db_path))
    yield group
    await group.close()


@pytest_asyncio.fixture
async def timed_store_group(
    core_db_path: Path, manual_time: ManualTime
) -> AsyncGenerator[StoreGroup, None]:
    """使用手动时间源的 StoreGroup（过期 / 时间戳相关测试）"""
    group = await create_store_group(
        str(core_db_path),
        clock=MonotonicClock(manual_time),
    )
    yield group
    await group.close()
