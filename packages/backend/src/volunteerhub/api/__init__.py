"""API route aggregation.

All routers registered here get mounted in main.py under /api/v1.

Auth is applied per handler via Depends(get_current_user), because the
handlers need the resolved User anyway. Health and auth routers are open.
"""

from fastapi import APIRouter

from volunteerhub.api.auth import router as auth_router
from volunteerhub.api.health import router as health_router
from volunteerhub.api.messages import router as messages_router
from volunteerhub.api.notifications import router as notifications_router

api_router = APIRouter(prefix="/api/v1")

# Open routes, no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes: handlers resolve the bearer token themselves
api_router.include_router(messages_router, tags=["messages"])
api_router.include_router(notifications_router, tags=["notifications"])
