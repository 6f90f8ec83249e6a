"""时间工具 -- 单调 UTC 时钟 + 定宽时间戳序列化

created_at 以定宽 ISO-8601（微秒精度、UTC）落盘，
字典序即时间序，游标分页直接使用字符串比较。
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta


def format_ts(ts: datetime) -> str:
    """序列化为定宽 UTC ISO-8601 字符串（始终带微秒）"""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC).isoformat(timespec="microseconds")


def parse_ts(value: str) -> datetime:
    """反序列化时间戳，无时区信息时按 UTC 处理"""
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts


class MonotonicClock:
    """进程内单调时钟

    同一进程内返回的时间戳严格递增：若系统时钟未前进（或回拨），
    在上一次结果上加 1 微秒。
    """

    def __init__(self, source: Callable[[], datetime] | None = None) -> None:
        self._source = source or (lambda: datetime.now(UTC))
        self._last: datetime | None = None

    def now(self) -> datetime:
        current = self._source()
        if self._last is not None and current <= self._last:
            current = self._last + timedelta(microseconds=1)
        self._last = current
        return current
