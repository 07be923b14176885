"""API test fixtures — in-memory SQLite, dependency override, ASGI client."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.routes import projects
from app.db.base import Base
from app.infrastructure.database import _enable_sqlite_foreign_keys, get_db
from app.main import app

from tests.services.conftest import make_records


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def client(test_session_factory):
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    projects._project_states.clear()
    projects._project_locks.clear()


@pytest.fixture
async def project_id(client):
    resp = await client.post("/api/v1/projects", json={"name": "Shop capture"})
    assert resp.status_code == 201
    return resp.json()["id"]


@pytest.fixture
def record_payload():
    return [r.model_dump(mode="json", by_alias=True) for r in make_records()]
