"""TaskHub Core Services -- 命令与查询处理"""

from .commands import TaskCommandService
from .queries import TaskQueryService, normalize_events_limit, normalize_page_size

__all__ = [
    "TaskCommandService",
    "TaskQueryService",
    "normalize_events_limit",
    "normalize_page_size",
]
