"""分页游标编解码

游标是上一页最后一条记录 created_at 的 base64url 编码，客户端视为不透明。
无法解码的游标被忽略（等同于未传游标），分页退化为从头开始。
"""

import base64
import binascii
from datetime import datetime

import structlog

from .clock import format_ts, parse_ts

log = structlog.get_logger()


def encode_cursor(created_at: datetime) -> str:
    """将页边界时间戳编码为不透明游标"""
    return base64.urlsafe_b64encode(format_ts(created_at).encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str | None) -> str | None:
    """解码游标为可比较的定宽时间戳字符串

    Returns:
        规范化后的时间戳字符串；游标缺失或非法时返回 None
    """
    if not cursor:
        return None
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
        return format_ts(parse_ts(raw))
    except (binascii.Error, UnicodeError, ValueError, OverflowError):
        log.warning("pagination_cursor_ignored", cursor=cursor[:64])
        return None
