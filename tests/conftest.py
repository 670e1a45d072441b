"""Test fixtures — a throwaway SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own Database over a fresh SQLite file in tmp_path
   (sqlite+aiosqlite), with the schema created up front.
2. The app is built with create_app(settings=..., database=...), so the
   real get_db and require_identity dependencies run unchanged.
3. httpx's ASGITransport drives the app in-process. It does not run the
   lifespan, which is fine: the test owns the Database and disposes it.

pool_events counts SQLAlchemy pool checkouts/checkins, which is how the
tests prove one acquire and one release per request.
"""

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event

from motorpool.config import Settings
from motorpool.db.engine import Database
from motorpool.main import create_app

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


@pytest.fixture()
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'motorpool.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        environment="development",
    )


@pytest_asyncio.fixture()
async def database(test_settings):
    db = Database.from_settings(test_settings)
    await db.create_all()
    try:
        yield db
    finally:
        await db.shutdown()


@pytest_asyncio.fixture()
async def db_session(database):
    """A request-style session for service-level tests."""
    async with database.session() as session:
        yield session


@pytest.fixture()
def pool_events(database):
    counts = {"checkout": 0, "checkin": 0}

    def on_checkout(dbapi_conn, record, proxy):
        counts["checkout"] += 1

    def on_checkin(dbapi_conn, record):
        counts["checkin"] += 1

    sync_engine = database.engine.sync_engine
    event.listen(sync_engine, "checkout", on_checkout)
    event.listen(sync_engine, "checkin", on_checkin)
    yield counts
    event.remove(sync_engine, "checkout", on_checkout)
    event.remove(sync_engine, "checkin", on_checkin)


@pytest.fixture()
def app(test_settings, database):
    return create_app(settings=test_settings, database=database)


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def register_user(client):
    """Register a user through the API; returns the issued token."""

    async def _register(username: str, password: str = "secret") -> str:
        r = await client.post(
            "/register", json={"username": username, "password": password}
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]["jwt"]

    return _register


@pytest_asyncio.fixture()
async def auth_headers(register_user):
    token = await register_user("alice")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def decode_token(test_settings):
    """Decode (and verify) a token issued by the test app."""

    def _decode(token: str) -> dict:
        return jwt.decode(token, test_settings.jwt_secret, algorithms=["HS256"])

    return _decode
