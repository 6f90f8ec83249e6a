"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 异常映射 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from taskhub.core.config import IDEMPOTENCY_TTL_SECONDS, get_db_path
from taskhub.core.store import create_store_group

from .errors import register_error_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import events, health, tasks

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB，关闭时清理连接"""
    # 启动：初始化 Store（进程内共享一个连接 + 写锁 + 单调时钟）
    db_path = get_db_path()
    store_group = await create_store_group(
        db_path,
        idempotency_ttl_seconds=IDEMPOTENCY_TTL_SECONDS,
    )
    app.state.store_group = store_group
    log.info("store_initialized", db_path=str(db_path))

    yield

    # 关闭：清理数据库连接
    if hasattr(app.state, "store_group") and app.state.store_group:
        await app.state.store_group.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskHub Gateway",
        version="0.1.0",
        description="TaskHub 任务生命周期 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    # 业务异常 -> HTTP 状态码
    register_error_handlers(app)

    # 初始化日志
    setup_logging()
    setup_logfire()

    # 注册路由
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(events.router, tags=["events"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
