"""structlog 配置模块

dev 模式：pretty print 可读输出
json 模式：结构化 JSON 输出（每行一个事件，便于日志采集）
Logfire APM：LOGFIRE_SEND_TO_LOGFIRE 环境变量控制，false 时降级为纯本地日志。
"""

import logging
import os

import structlog

LOG_FORMATS = ("dev", "json")


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog 配置

    Args:
        log_format: 渲染模式，None 时读取 TASKHUB_LOG_FORMAT
            - "json": 结构化 JSON 输出（生产环境）
            - "dev" (默认): pretty print 可读输出
        log_level: 日志级别，None 时读取 TASKHUB_LOG_LEVEL（默认 INFO）
    """
    log_format = (log_format or os.environ.get("TASKHUB_LOG_FORMAT", "dev")).lower()
    log_level = (log_level or os.environ.get("TASKHUB_LOG_LEVEL", "INFO")).upper()

    unknown_format = log_format not in LOG_FORMATS
    if unknown_format:
        log_format = "dev"

    # 基础处理器链
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # 标准库 logging 统一走 structlog 渲染（uvicorn / aiosqlite 日志同样格式）
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    if unknown_format:
        structlog.get_logger().warning(
            "invalid_log_format",
            fallback="dev",
            allowed=list(LOG_FORMATS),
        )


def setup_logfire() -> None:
    """Logfire 可选初始化

    LOGFIRE_SEND_TO_LOGFIRE 环境变量控制：
    - "true": 启用 Logfire APM（需要 LOGFIRE_TOKEN）
    - "false" (默认): 降级为纯本地日志
    """
    send_to_logfire = os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower()
    if send_to_logfire != "true":
        return

    try:
        import logfire

        logfire.configure()
        logfire.instrument_fastapi()
    except Exception as e:
        # Logfire 不可用时不影响 API 运行
        structlog.get_logger().warning(
            "logfire_init_failed",
            error=str(e),
            message="Logfire 初始化失败，降级为纯本地日志",
        )
