"""Async SQLAlchemy engine and the request-scoped session lifecycle.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

Each request checks out exactly ONE pooled connection, applies the fixed
session settings to it, and binds its AsyncSession to that connection. The
connection is owned by the session() context manager, so it goes back to the
pool exactly once whatever happens downstream: a normal return, an exception
in the handler, or task cancellation.

Binding the session to the connection (instead of letting the session
check out connections lazily) matters: after a commit, an unbound session
may continue on a different pooled connection that never saw the
session settings.
"""

import re
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession, create_async_engine

from motorpool.config import Settings
from motorpool.db.models import Base
from motorpool.errors import StorageError

logger = structlog.get_logger()

_TIME_ZONE_RE = re.compile(r"^[+-]\d{2}:\d{2}$")
_SQL_MODE_RE = re.compile(r"^[A-Z_,]+$")


def session_statements(dialect: str, sql_mode: str, time_zone: str) -> list[str]:
    """Statements that put a fresh connection into strict mode with a fixed offset.

    Values are interpolated (SET does not take bind parameters on every
    driver), so both are checked against a strict pattern first.
    """
    if not _TIME_ZONE_RE.match(time_zone):
        raise ValueError(f"session time zone must look like -08:00, got {time_zone!r}")
    if not _SQL_MODE_RE.match(sql_mode):
        raise ValueError(f"invalid sql_mode {sql_mode!r}")

    if dialect in ("mysql", "mariadb"):
        return [
            f"SET SESSION sql_mode = '{sql_mode}'",
            f"SET time_zone = '{time_zone}'",
        ]
    if dialect == "postgresql":
        # PostgreSQL is always strict about NOT NULL and invalid values;
        # the closest session knob is unambiguous date parsing.
        return [
            "SET SESSION datestyle = 'ISO, YMD'",
            f"SET SESSION TIME ZONE INTERVAL '{time_zone}' HOUR TO MINUTE",
        ]
    if dialect == "sqlite":
        # No session time zone in SQLite.
        return ["PRAGMA foreign_keys = ON"]
    raise ValueError(f"unsupported database dialect: {dialect}")


class Database:
    """Process-wide engine + pool. Created once at startup, disposed at shutdown."""

    def __init__(
        self,
        url: str,
        *,
        sql_mode: str = "TRADITIONAL",
        time_zone: str = "-08:00",
        echo: bool = False,
        **engine_kwargs,
    ):
        self.engine = create_async_engine(url, echo=echo, **engine_kwargs)
        self.statements = session_statements(
            self.engine.dialect.name, sql_mode, time_zone
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        url = settings.sqlalchemy_url
        engine_kwargs = {}
        if make_url(url).get_backend_name() != "sqlite":
            # Connection pool: min 5, max 20 connections by default.
            engine_kwargs = {
                "pool_size": settings.pool_size,
                "max_overflow": settings.max_overflow,
            }
        return cls(
            url,
            sql_mode=settings.session_sql_mode,
            time_zone=settings.session_time_zone,
            echo=settings.debug,
            **engine_kwargs,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """One pooled connection, configured, wrapped in a session, always released."""
        try:
            conn = await self.engine.connect()
        except (SQLAlchemyError, OSError) as e:
            logger.error("db.acquire_failed", error=str(e))
            raise StorageError("Database unavailable") from e

        try:
            await self._apply_session_settings(conn)
            async with AsyncSession(bind=conn, expire_on_commit=False) as session:
                yield session
        finally:
            await conn.close()

    async def _apply_session_settings(self, conn: AsyncConnection) -> None:
        try:
            for statement in self.statements:
                await conn.execute(text(statement))
            await conn.commit()
        except SQLAlchemyError as e:
            logger.error("db.session_settings_failed", error=str(e))
            raise StorageError("Could not apply session settings") from e

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Create missing tables (local runs and tests; production uses Alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def shutdown(self) -> None:
        """Drain the pool. Checked-out connections are closed as they come back."""
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields the request's session, releases it on the way out.

    Learn: FastAPI caches dependencies per request, so every Depends(get_db)
    in one request (router-level and handler-level) shares this one session.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
