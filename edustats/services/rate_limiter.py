"""Token-bucket rate limiting for write endpoints.

Each client owns a bucket of ``capacity`` tokens refilled at
``refill_rate`` tokens per second; a request spends one token and is
rejected when the bucket is empty.  Bursts up to the capacity pass, the
long-run rate is capped at the refill rate, and each bucket is just two
numbers (tokens, last refill time).

InMemoryRateLimiter keeps buckets per process.  RedisRateLimiter keeps
them in Redis so all API instances share one budget per client.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    limit: int
    retry_after: float  # seconds until the next token, 0 when allowed


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """capacity: burst size.  refill_rate: tokens per second."""

    capacity: int = 60
    refill_rate: float = 1.0


@runtime_checkable
class RateLimiter(Protocol):
    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult: ...
    async def reset(self, key: str) -> None: ...


class InMemoryRateLimiter:
    def __init__(self) -> None:
        # key -> (tokens_remaining, last_refill_monotonic)
        self._buckets: dict[str, tuple[float, float]] = {}

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        now = time.monotonic()
        tokens, last_refill = self._buckets.get(key, (float(config.capacity), now))

        tokens = min(config.capacity, tokens + (now - last_refill) * config.refill_rate)

        if tokens >= 1:
            tokens -= 1
            self._buckets[key] = (tokens, now)
            return RateLimitResult(
                allowed=True,
                remaining=int(tokens),
                limit=config.capacity,
                retry_after=0,
            )

        self._buckets[key] = (tokens, now)
        return RateLimitResult(
            allowed=False,
            remaining=0,
            limit=config.capacity,
            retry_after=(1 - tokens) / config.refill_rate,
        )

    async def reset(self, key: str) -> None:
        self._buckets.pop(key, None)


class RedisRateLimiter:
    """Shared token bucket; the read-refill-spend-write cycle runs in Lua
    so concurrent requests cannot both spend the same token."""

    # KEYS[1] bucket key; ARGV capacity, refill_rate, now (seconds)
    # returns {allowed 0|1, remaining, retry_after_ms}
    _LUA_SCRIPT = """
    local key = KEYS[1]
    local capacity = tonumber(ARGV[1])
    local refill_rate = tonumber(ARGV[2])
    local now = tonumber(ARGV[3])
    local ttl = math.ceil(capacity / refill_rate) + 60

    local bucket = redis.call('HMGET', key, 'tokens', 'last_refill')
    local tokens = tonumber(bucket[1])
    local last_refill = tonumber(bucket[2])
    if tokens == nil then
        tokens = capacity
        last_refill = now
    end

    tokens = math.min(capacity, tokens + (now - last_refill) * refill_rate)

    if tokens >= 1 then
        tokens = tokens - 1
        redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
        redis.call('EXPIRE', key, ttl)
        return {1, math.floor(tokens), 0}
    end

    redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
    redis.call('EXPIRE', key, ttl)
    return {0, 0, math.ceil((1 - tokens) / refill_rate * 1000)}
    """

    _PREFIX = "ratelimit:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._script = redis_client.register_script(self._LUA_SCRIPT)

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        allowed, remaining, retry_after_ms = await self._script(
            keys=[f"{self._PREFIX}{key}"],
            args=[config.capacity, config.refill_rate, time.time()],
        )
        return RateLimitResult(
            allowed=bool(allowed),
            remaining=int(remaining),
            limit=config.capacity,
            retry_after=retry_after_ms / 1000,
        )

    async def reset(self, key: str) -> None:
        await self._redis.delete(f"{self._PREFIX}{key}")
