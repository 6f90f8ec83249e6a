"""IdempotencyRecord Domain Model

写入后只读，过期后查询视为不存在并被清除。
"""

from datetime import datetime

from pydantic import BaseModel, Field


class IdempotencyRecord(BaseModel):
    """幂等记录"""

    key: str = Field(description="客户端提供的幂等键")
    response: str = Field(description="首次执行结果的 JSON 序列化")
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class IdempotencyLookup(BaseModel):
    """find_by_key 返回值"""

    found: bool
    response: str | None = None
