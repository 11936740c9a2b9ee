"""Health check endpoint.

Verifies the server is running, the database and Redis are reachable,
and reports how many live connections this process holds.
"""

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from volunteerhub import __version__
from volunteerhub.db.engine import engine

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except (SQLAlchemyError, OSError) as e:
        checks["database"] = f"error: {e}"

    from redis.exceptions import RedisError

    from volunteerhub.cache import get_redis

    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except RuntimeError:
        checks["redis"] = "disabled"
    except RedisError as e:
        checks["redis"] = f"error: {e}"

    status = "healthy" if checks["database"] == "ok" else "unhealthy"
    if status == "healthy" and checks["redis"] != "ok":
        status = "degraded"

    registry = request.app.state.registry
    return {
        "status": status,
        **checks,
        "live": {
            "users": registry.online_users(),
            "connections": registry.connection_count(),
        },
    }
