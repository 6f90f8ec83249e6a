"""TaskEvent Domain Model

事件表 append-only，不允许更新或删除。
event_id 由存储层按追加顺序分配（自增整数），
同一任务的时间线按 created_at 倒序、event_id 倒序排列。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .enums import EventType


class TaskEvent(BaseModel):
    """TaskEvent 数据模型

    event_id / created_at 在写入前可为空，由 EventStore.save_event 补齐。
    """

    event_id: int | None = Field(default=None, description="存储层分配的追加序号")
    task_id: str = Field(description="关联的 Task ID")
    tenant_id: str = Field(description="所属租户")
    workspace_id: str = Field(description="所属 workspace")
    event_type: EventType = Field(description="事件类型")
    event_data: dict[str, Any] = Field(default_factory=dict, description="结构化 payload")
    created_at: datetime | None = Field(default=None, description="事件时间戳")
