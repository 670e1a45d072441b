"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: the session and the auth gate are applied at the include_router
level using FastAPI's dependencies parameter. Order matters: the request
first acquires its db session, then the gate verifies the token. FastAPI
caches dependencies per request, so the handlers' own Depends(get_db)
receive that same session. Health, auth and car routes are open.
"""

from fastapi import APIRouter, Depends

from motorpool.api.auth import router as auth_router
from motorpool.api.cars import router as cars_router
from motorpool.api.health import router as health_router
from motorpool.api.messages import router as messages_router
from motorpool.auth.dependencies import require_identity
from motorpool.db.engine import get_db

_scoped = [Depends(get_db)]
_protected = [Depends(get_db), Depends(require_identity)]

api_router = APIRouter()

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"], dependencies=_scoped)
api_router.include_router(cars_router, tags=["cars"], dependencies=_scoped)

# Protected routes — require a valid Bearer token
api_router.include_router(messages_router, tags=["messages"], dependencies=_protected)
