"""Health and readiness endpoints.

  /health (liveness):  always 200; `status` is "ok" or "degraded" and
                       `checks` reports each configured backing service.
  /ready (readiness):  503 while a configured database is unreachable.
                       Redis is not critical: rate limiting can fall
                       back to per-process buckets.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from edustats.db.engine import engine, ping_database
from edustats.db.redis import ping_redis, redis_pool

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    """Liveness check plus per-dependency status.

    A degraded dependency still answers 200 so the orchestrator does not
    restart a process that is merely impaired.
    """
    checks: dict[str, str] = {}
    overall = "ok"

    if redis_pool is not None:
        checks["redis"] = "ok" if await ping_redis() else "degraded"
    else:
        checks["redis"] = "not_configured"

    if engine is not None:
        checks["database"] = "ok" if await ping_database() else "degraded"
    else:
        checks["database"] = "not_configured"

    if "degraded" in checks.values():
        overall = "degraded"

    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if engine is not None and not await ping_database():
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
