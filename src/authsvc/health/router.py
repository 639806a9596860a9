"""Liveness, readiness and version probes."""

from fastapi import APIRouter, Depends, Request
from redis.asyncio import Redis
from sqlalchemy import text

from authsvc.database import Database
from authsvc.dependencies import get_database, get_redis

router = APIRouter()


async def _credential_store_status(database: Database) -> str:
    try:
        async with database.session() as db:
            await db.execute(text("SELECT 1"))
    except Exception as exc:
        return f"error: {exc}"
    return "ok"


async def _presence_store_status(redis: Redis) -> str:
    try:
        await redis.ping()
    except Exception as exc:
        return f"error: {exc}"
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    database: Database = Depends(get_database),  # noqa: B008
    redis: Redis = Depends(get_redis),  # noqa: B008
) -> dict[str, object]:
    """
    Probe both stores. Always 200; `status` is `degraded` when either check fails.

    Presence is best effort: a Redis outage reports degraded, not failed.
    """
    checks = {
        "database": await _credential_store_status(database),
        "redis": await _presence_store_status(redis),
    }
    status = "ready" if set(checks.values()) == {"ok"} else "degraded"
    return {"status": status, "checks": checks}


@router.get("/version")
async def version(request: Request) -> dict[str, str]:
    settings = request.app.state.settings
    return {"version": settings.app_version, "environment": settings.environment}
