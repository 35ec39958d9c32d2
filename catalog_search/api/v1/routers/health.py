# catalog_search/api/v1/routers/health.py
import asyncio
import time
import subprocess
from functools import lru_cache
from fastapi import APIRouter
from catalog_search.core.config import get_settings
from catalog_search.db import mongo
from catalog_search.db.redis import get_redis  # returns Redis instance or None

router = APIRouter(tags=["health"])
START_TIME = time.time()


@lru_cache
def _git_sha(short: bool = True) -> str:
    try:
        cmd = ["git", "rev-parse", "--short" if short else "HEAD"]
        return subprocess.check_output(cmd).decode().strip()
    except Exception:
        return "unknown"


@router.get("/health")
async def health():
    """
    Tolerant health check:
    - ping Mongo via Motor
    - Redis 'skipped' when not configured (cache only)
    - media host credentials present or not (imports degrade without them)
    """
    settings = get_settings()
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": settings.GIT_SHA if settings.GIT_SHA != "unknown" else await asyncio.to_thread(_git_sha),
        "uptime_seconds": int(time.time() - START_TIME),
    }

    # --- Mongo ---
    try:
        db = mongo.get_db()
        await db.command("ping")
        checks["mongodb"] = "ok"
    except Exception as e:
        checks["mongodb"] = f"error: {e}"

    # --- Redis (tolerant) ---
    try:
        r = get_redis()
        if r:
            await r.ping()
            checks["redis"] = "ok"
        else:
            checks["redis"] = "skipped"
    except Exception as e:
        checks["redis"] = f"error: {e}"

    # --- Media host: only the presence of credentials; not fatal
    checks["media_host_configured"] = settings.media_configured

    # Only Mongo and Redis decide the global status
    def _is_ok(v):
        return v in ("ok", "skipped")

    health_keys = ("mongodb", "redis")
    status = "ok" if all(_is_ok(checks.get(k)) for k in health_keys) else "error"

    return {"status": status, "checks": checks, "timestamp": int(time.time())}
