"""Rate limiting as a route dependency.

Only routes that declare it are limited (the event and practice write
endpoints); health, metrics and report reads are not.  Buckets are keyed
by token subject when a bearer token is present, otherwise by client IP.
Every checked response carries X-RateLimit-Limit and
X-RateLimit-Remaining; a 429 also carries Retry-After.
"""

from __future__ import annotations

import logging

import jwt as pyjwt
from fastapi import HTTPException, Request, Response, status

from edustats.core.metrics import RATE_LIMIT_HITS
from edustats.db.redis import redis_pool
from edustats.services.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimiter,
    RedisRateLimiter,
)

logger = logging.getLogger(__name__)

if redis_pool is not None:
    _rate_limiter: RateLimiter = RedisRateLimiter(redis_pool)
else:
    _rate_limiter = InMemoryRateLimiter()


_DEFAULT_CONFIG = RateLimitConfig()


def require_rate_limit(config: RateLimitConfig = _DEFAULT_CONFIG):
    """Dependency factory: spend one token from the caller's bucket.

    Usage: dependencies=[Depends(require_rate_limit())]
    """

    async def _check(request: Request, response: Response) -> None:
        key = _build_key(request)
        result = await _rate_limiter.check(key, config)

        response.headers["X-RateLimit-Limit"] = str(result.limit)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)

        if not result.allowed:
            RATE_LIMIT_HITS.labels(
                key_type="user" if key.startswith("user:") else "ip"
            ).inc()
            logger.warning("Rate limit exceeded key=%s", key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded",
                headers={
                    "Retry-After": str(int(result.retry_after) + 1),
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

    return _check


def _build_key(request: Request) -> str:
    # The signature is not checked here; require_user does that.  A forged
    # sub only buys the forger a bucket of their own.
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        try:
            claims = pyjwt.decode(
                auth_header[7:], options={"verify_signature": False}
            )
        except pyjwt.InvalidTokenError:
            claims = {}
        sub = claims.get("sub")
        if sub:
            return f"user:{sub}"

    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"
