"""FastAPI application factory.

create_app() returns a configured FastAPI instance. Lifespan manages
startup/shutdown (Redis pool, database engine). Middleware, CORS,
routers and the realtime gateway are all wired here.

The gateway and its connection registry hang off app.state so tests can
swap in their own (e.g. bound to a throwaway database).
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from volunteerhub import __version__
from volunteerhub.api import api_router
from volunteerhub.config import settings
from volunteerhub.db.engine import async_session_factory, engine
from volunteerhub.realtime.gateway import RealtimeGateway
from volunteerhub.realtime.registry import ConnectionRegistry

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "volunteerhub.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from volunteerhub.cache import close_redis, init_redis
    try:
        await init_redis()
        logger.info("volunteerhub.redis_connected", url=settings.redis_url)
    except (RedisError, OSError) as e:
        # Redis only backs rate limiting; run without it.
        logger.warning("volunteerhub.redis_unavailable", error=str(e))

    yield

    logger.info(
        "volunteerhub.shutdown",
        live_connections=app.state.registry.connection_count(),
    )
    await close_redis()
    await engine.dispose()


async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the programming error, answer with a generic 500."""
    logger.exception(
        "http.unhandled_error",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="VolunteerHub",
        description="Messaging and notifications for the volunteer matching platform",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Realtime state ───────────────────────────────────────
    registry = ConnectionRegistry()
    app.state.registry = registry
    app.state.gateway = RealtimeGateway(registry, async_session_factory)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from volunteerhub.middleware.rate_limit import RateLimitMiddleware
    from volunteerhub.middleware.request_id import RequestIdMiddleware
    from volunteerhub.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(Exception, unhandled_error)

    # Mount API routes
    app.include_router(api_router)

    # Mount WebSocket route (live messaging)
    from volunteerhub.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: volunteerhub.main:app)
app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "volunteerhub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
