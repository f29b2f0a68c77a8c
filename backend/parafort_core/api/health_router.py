from __future__ import annotations

import redis.asyncio as aioredis
import sqlalchemy
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from parafort_core.core.config import get_settings
from parafort_core.db.session import async_engine

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/healthz")
async def healthz() -> JSONResponse:
    settings = get_settings()
    checks: dict[str, str] = {}

    try:
        async with async_engine.connect() as conn:
            await conn.execute(sqlalchemy.text("SELECT 1"))
        checks["db"] = "ok"
    except Exception:
        checks["db"] = "unreachable"

    redis_ok = False
    if settings.redis_url:
        try:
            async with aioredis.from_url(settings.redis_url, socket_connect_timeout=2) as r:
                await r.ping()
            redis_ok = True
            checks["redis"] = "ok"
        except Exception:
            checks["redis"] = "unreachable"
    else:
        checks["redis"] = "not_configured"
        redis_ok = True

    checks["stripe"] = "configured" if settings.stripe_secret_key else "not_configured"

    healthy = checks["db"] == "ok" and redis_ok
    return JSONResponse(
        content={"status": "ok" if healthy else "degraded", "checks": checks},
        status_code=200 if healthy else 503,
    )
