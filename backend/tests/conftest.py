"""
Pytest configuration and fixtures.

Tests run against a throwaway SQLite file; the schema is recreated
before every test.
"""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="forum-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from forum_api.core.database import Base, async_session_maker, engine  # noqa: E402
from forum_api.core.security import create_access_token  # noqa: E402
from forum_api.main import app  # noqa: E402
from forum_api.models import forum, user  # noqa: E402,F401
from forum_api.modules.forum import ForumService  # noqa: E402
from forum_api.modules.users import UserService  # noqa: E402


@pytest.fixture(autouse=True)
async def database():
    """Fresh schema per test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def db():
    async with async_session_maker() as session:
        yield session


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def make_user(db):
    async def _make(username: str):
        return await UserService(db).create_user(username)

    return _make


@pytest.fixture
def make_forum(db):
    async def _make(name: str, owner_id: str = "system"):
        return await ForumService(db).create_forum(name=name, user_id=owner_id)

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user_id: str) -> dict:
        return {"x-auth-token": create_access_token(user_id)}

    return _headers
