"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、分页上限、时间线/事件条数上限、幂等记录有效期等可配置常量。
"""

import os
from pathlib import Path

import structlog

log = structlog.get_logger()


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKHUB_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKHUB_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskhub.db"),
    )


def _int_from_env(name: str, default: int) -> int:
    """读取整数型环境变量，非法值降级为默认值（不阻塞启动）"""
    val = os.environ.get(name)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        log.warning(
            "invalid_int_config",
            env_var=name,
            value=val,
            fallback=default,
        )
        return default


# 任务标题最大长度（trim 之后计算）
TITLE_MAX_LENGTH: int = 120

# ListTasks 默认/最大分页大小
DEFAULT_PAGE_SIZE: int = _int_from_env("TASKHUB_DEFAULT_PAGE_SIZE", 20)
MAX_PAGE_SIZE: int = _int_from_env("TASKHUB_MAX_PAGE_SIZE", 100)

# GetTask 附带的时间线条数上限
TIMELINE_LIMIT: int = _int_from_env("TASKHUB_TIMELINE_LIMIT", 20)

# GetEvents 默认条数上限
EVENTS_LIMIT: int = _int_from_env("TASKHUB_EVENTS_LIMIT", 50)

# GetEvents 单次最多返回条数，超过截断
EVENTS_MAX_LIMIT: int = _int_from_env("TASKHUB_EVENTS_MAX", 500)

# 幂等记录有效期（秒），默认 24 小时
IDEMPOTENCY_TTL_SECONDS: int = _int_from_env(
    "TASKHUB_IDEMPOTENCY_TTL_SECONDS", 24 * 60 * 60
)
