"""IdempotencyStore SQLite 实现

记录写入后只读；过期记录在查询时视为不存在并被清除。
save 使用普通 INSERT：同一 key 并发写入时由主键约束拒绝后写者。
"""

import asyncio
from datetime import timedelta

import aiosqlite
import structlog

from ..clock import MonotonicClock, format_ts, parse_ts
from ..config import IDEMPOTENCY_TTL_SECONDS
from ..models.idempotency import IdempotencyLookup, IdempotencyRecord

log = structlog.get_logger()


class SqliteIdempotencyStore:
    """IdempotencyStore 的 SQLite 实现"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        lock: asyncio.Lock | None = None,
        clock: MonotonicClock | None = None,
        ttl_seconds: int = IDEMPOTENCY_TTL_SECONDS,
    ) -> None:
        self._conn = conn
        self._lock = lock or asyncio.Lock()
        self._clock = clock or MonotonicClock()
        self._ttl = timedelta(seconds=ttl_seconds)

    async def find_by_key(self, key: str) -> IdempotencyLookup:
        """查询幂等键；已过期的记录被删除并报告为不存在"""
        async with self._lock:
            cursor = await self._conn.execute(
                "SELECT response, expires_at FROM idempotency_keys WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
            if row is None:
                return IdempotencyLookup(found=False)

            if parse_ts(row[1]) <= self._clock.now():
                await self._conn.execute(
                    "DELETE FROM idempotency_keys WHERE key = ?",
                    (key,),
                )
                await self._conn.commit()
                log.info("idempotency_key_expired", idempotency_key=key)
                return IdempotencyLookup(found=False)

        return IdempotencyLookup(found=True, response=row[0])

    async def save(self, key: str, response: str) -> IdempotencyRecord:
        """写入幂等记录，有效期固定为 ttl

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        now = self._clock.now()
        record = IdempotencyRecord(
            key=key,
            response=response,
            created_at=now,
            expires_at=now + self._ttl,
        )
        await self._conn.execute(
            """
            INSERT INTO idempotency_keys (key, response, created_at, expires_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                record.key,
                record.response,
                format_ts(record.created_at),
                format_ts(record.expires_at),
            ),
        )
        return record

    async def purge_expired(self) -> int:
        """删除所有已过期记录

        Returns:
            删除条数
        """
        async with self._lock:
            cursor = await self._conn.execute(
                "DELETE FROM idempotency_keys WHERE expires_at <= ?",
                (format_ts(self._clock.now()),),
            )
            await self._conn.commit()
        return cursor.rowcount
