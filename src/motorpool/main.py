"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown of the process-wide state
(the database pool). Middleware, CORS, error handlers and routers are all
registered here.

Process-wide state lives on app.state and reaches requests through
dependencies:
- app.state.settings  — the Settings the app was built with
- app.state.tokens    — the TokenService (signing secret)
- app.state.database  — the Database (engine + pool)
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from motorpool import __version__
from motorpool.api import api_router
from motorpool.auth.jwt import TokenService
from motorpool.config import Settings, settings as default_settings
from motorpool.db.engine import Database
from motorpool.middleware.error_handler import register_error_handlers

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. A Database handed to create_app() belongs to the caller and
    is left open; one created here is drained on shutdown.
    """
    settings: Settings = app.state.settings
    owns_database = app.state.database is None
    if owns_database:
        app.state.database = Database.from_settings(settings)

    logger.info(
        "motorpool.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("motorpool.shutdown")
    if owns_database:
        await app.state.database.shutdown()
        app.state.database = None


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings

    app = FastAPI(
        title="Motorpool",
        description="Cars CRUD with soft delete, username/password auth and bearer tokens",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.tokens = TokenService.from_settings(settings)
    app.state.database = database

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler

    from motorpool.middleware.request_id import RequestIdMiddleware
    from motorpool.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: motorpool.main:app)
app = create_app()
