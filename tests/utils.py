from __future__ import annotations

import asyncio
import fnmatch
import time
from typing import Any, Callable, Optional, Sequence

from redis.exceptions import ConnectionError as RedisConnectionError

from supportbot.context import AppContext, build_app_context
from supportbot.models import ConversationTurn
from supportbot.provider import ModelOptions
from supportbot.settings import Settings


class FakeClock:
    """Monotonic clock the tests move by hand to drive key expiry."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryRedis:
    """
    Minimal async Redis double: strings, lists, TTLs and MULTI/EXEC pipelines.
    Expiry is evaluated lazily against `clock`.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        self._data: dict[str, str] = {}
        self._lists: dict[str, list[str]] = {}
        self._expires: dict[str, float] = {}

    def _exists(self, key: str) -> bool:
        return key in self._data or key in self._lists

    def _purge(self, key: str) -> None:
        deadline = self._expires.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._data.pop(key, None)
            self._lists.pop(key, None)
            self._expires.pop(key, None)

    async def ping(self) -> bool:
        return True

    async def get(self, key: str):
        self._purge(key)
        return self._data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None):
        self._lists.pop(key, None)
        self._data[key] = str(value)
        if ex is not None:
            self._expires[key] = self._clock() + ex
        else:
            self._expires.pop(key, None)
        return True

    async def expire(self, key: str, seconds: int) -> bool:
        self._purge(key)
        if not self._exists(key):
            return False
        self._expires[key] = self._clock() + seconds
        return True

    async def ttl(self, key: str) -> float:
        self._purge(key)
        if not self._exists(key):
            return -2
        deadline = self._expires.get(key)
        if deadline is None:
            return -1
        return deadline - self._clock()

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            self._purge(key)
            if self._exists(key):
                removed += 1
            self._data.pop(key, None)
            self._lists.pop(key, None)
            self._expires.pop(key, None)
        return removed

    async def keys(self, pattern: str):
        for key in list(self._expires):
            self._purge(key)
        names = list(self._data) + list(self._lists)
        return [k for k in names if fnmatch.fnmatchcase(k, pattern)]

    async def lpush(self, key: str, *values: str) -> int:
        self._purge(key)
        lst = self._lists.setdefault(key, [])
        for value in values:
            lst.insert(0, str(value))
        return len(lst)

    async def ltrim(self, key: str, start: int, stop: int) -> bool:
        self._purge(key)
        lst = self._lists.get(key)
        if lst is None:
            return True
        n = len(lst)
        s = start + n if start < 0 else start
        e = stop + n if stop < 0 else stop
        kept = lst[max(s, 0) : e + 1] if e >= 0 else []
        if kept:
            self._lists[key] = kept
        else:
            self._lists.pop(key, None)
            self._expires.pop(key, None)
        return True

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        self._purge(key)
        lst = self._lists.get(key, [])
        n = len(lst)
        s = start + n if start < 0 else start
        e = stop + n if stop < 0 else stop
        if e < 0 or s >= n:
            return []
        return list(lst[max(s, 0) : e + 1])

    def pipeline(self, transaction: bool = True) -> "_InMemoryPipeline":
        return _InMemoryPipeline(self)


class _InMemoryPipeline:
    def __init__(self, redis: InMemoryRedis) -> None:
        self._redis = redis
        self._ops: list[tuple[str, tuple[Any, ...]]] = []

    async def __aenter__(self) -> "_InMemoryPipeline":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        self._ops.clear()
        return False

    def _queue(self, name: str, *args: Any) -> "_InMemoryPipeline":
        self._ops.append((name, args))
        return self

    def lpush(self, key: str, *values: str) -> "_InMemoryPipeline":
        return self._queue("lpush", key, *values)

    def ltrim(self, key: str, start: int, stop: int) -> "_InMemoryPipeline":
        return self._queue("ltrim", key, start, stop)

    def expire(self, key: str, seconds: int) -> "_InMemoryPipeline":
        return self._queue("expire", key, seconds)

    async def execute(self) -> list[Any]:
        results = []
        for name, args in self._ops:
            results.append(await getattr(self._redis, name)(*args))
        self._ops.clear()
        return results


class UnavailableRedis:
    """Every command fails the way redis-py does when the server is down."""

    async def _fail(self, *args: Any, **kwargs: Any):
        raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    ping = get = set = expire = delete = keys = lpush = ltrim = lrange = _fail

    def pipeline(self, transaction: bool = True) -> "_FailingPipeline":
        return _FailingPipeline()


class _FailingPipeline:
    async def __aenter__(self) -> "_FailingPipeline":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False

    def lpush(self, *args: Any) -> "_FailingPipeline":
        return self

    def ltrim(self, *args: Any) -> "_FailingPipeline":
        return self

    def expire(self, *args: Any) -> "_FailingPipeline":
        return self

    async def execute(self):
        raise RedisConnectionError("Connection refused.")


class StubProvider:
    """ProviderClient double that records every call."""

    def __init__(
        self,
        name: str,
        reply: str = "Hi there, how can I help?",
        *,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.name = name
        self.options = ModelOptions(model=f"{name}-test-model")
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        new_message: str,
        options: ModelOptions | None = None,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "history": list(history),
                "new_message": new_message,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "escalation_keywords_raw": "urgent,human,manager",
        "provider_timeout": 2.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def build_test_context(
    redis: Any = None,
    providers: Sequence[Any] = (),
    **overrides: Any,
) -> AppContext:
    return build_app_context(
        make_settings(**overrides),
        redis if redis is not None else InMemoryRedis(),
        providers=list(providers),
    )


__all__ = [
    "FakeClock",
    "InMemoryRedis",
    "StubProvider",
    "UnavailableRedis",
    "build_test_context",
    "make_settings",
]
