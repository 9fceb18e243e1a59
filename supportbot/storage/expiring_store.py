"""
Key/value store with per-key time-to-live, backed by Redis.

All session state goes through `ExpiringStore`. Every operation may raise
`StoreUnavailable` when Redis cannot be reached; callers one level up (the
session registry) are expected to degrade instead of failing the request.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Set

from redis.asyncio import Redis
from redis.exceptions import RedisError


class StoreUnavailable(RuntimeError):
    """Raised when the backing store could not complete an operation."""

    def __init__(self, operation: str, key: Optional[str] = None) -> None:
        self.operation = operation
        self.key = key
        target = f" on '{key}'" if key else ""
        super().__init__(f"Store unavailable during {operation}{target}")


@asynccontextmanager
async def _translate_errors(operation: str, key: Optional[str] = None) -> AsyncIterator[None]:
    try:
        yield
    except (RedisError, OSError) as exc:
        raise StoreUnavailable(operation, key) from exc


class ExpiringStore:
    """
    Thin adapter over a shared `redis.asyncio.Redis` client.

    Writes that do not pass an explicit TTL use `default_ttl`, so a key that
    keeps being written keeps living (sliding expiry) and an idle one
    disappears on its own.
    """

    def __init__(self, redis: Redis, *, default_ttl: int) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self._redis = redis
        self.default_ttl = default_ttl

    def _ttl(self, ttl_seconds: Optional[int]) -> int:
        return self.default_ttl if ttl_seconds is None else ttl_seconds

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        async with _translate_errors("set", key):
            await self._redis.set(key, value, ex=self._ttl(ttl_seconds))

    async def get(self, key: str) -> Optional[str]:
        async with _translate_errors("get", key):
            return await self._redis.get(key)

    async def append_to_list(self, key: str, value: str) -> int:
        """
        Insert at the head of the list; returns the new length.
        """
        async with _translate_errors("append_to_list", key):
            return await self._redis.lpush(key, value)

    async def trim_list(self, key: str, max_len: int) -> None:
        """
        Keep only the `max_len` most recently appended values.
        """
        if max_len <= 0:
            await self.delete(key)
            return
        async with _translate_errors("trim_list", key):
            await self._redis.ltrim(key, 0, max_len - 1)

    async def push_capped(
        self,
        key: str,
        value: str,
        *,
        max_len: int,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """
        Append, trim to `max_len` and reset the TTL in a single MULTI/EXEC
        so concurrent writers cannot observe or produce an over-long list.
        """
        if max_len <= 0:
            raise ValueError("max_len must be positive")
        async with _translate_errors("push_capped", key):
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.lpush(key, value)
                pipe.ltrim(key, 0, max_len - 1)
                pipe.expire(key, self._ttl(ttl_seconds))
                await pipe.execute()

    async def read_list(self, key: str) -> List[str]:
        """
        Return all list values oldest-first (the list itself is newest-first).
        """
        async with _translate_errors("read_list", key):
            values = await self._redis.lrange(key, 0, -1)
        return list(reversed(values))

    async def expire(self, key: str, ttl_seconds: Optional[int] = None) -> bool:
        async with _translate_errors("expire", key):
            return bool(await self._redis.expire(key, self._ttl(ttl_seconds)))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        async with _translate_errors("delete", keys[0]):
            return int(await self._redis.delete(*keys))

    async def keys_matching(self, prefix: str) -> Set[str]:
        """
        Keys starting with `prefix`. Uses KEYS, which is fine for a
        diagnostics count; switch to SCAN if the keyspace grows large.
        """
        async with _translate_errors("keys_matching", prefix):
            keys = await self._redis.keys(f"{prefix}*")
        return set(keys)

    async def is_available(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except (RedisError, OSError):
            return False


__all__ = ["ExpiringStore", "StoreUnavailable"]
