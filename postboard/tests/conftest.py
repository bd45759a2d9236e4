from typing import AsyncGenerator, Generator
import os

# Force test configuration for all imports
os.environ.setdefault("ENV", "test")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from postboard.adapters.notifications import FakeNotifier
from postboard.bootstrap import bootstrap
from postboard.db import metadata
from postboard.entrypoints.dependencies import get_bus
from postboard.main import app
from postboard.security import TokenConfig, TokenService, get_token_service
from postboard.service_layer.unit_of_work import SqlAlchemyUnitOfWork

@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"

@pytest.fixture()
def session_factory() -> Generator:
    """In-memory SQLite shared by every connection of a single test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    metadata.drop_all(engine)
    engine.dispose()

@pytest.fixture()
def token_service() -> TokenService:
    return TokenService(TokenConfig(secret_key="test-secret-key"))

@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()

@pytest.fixture()
def bus(session_factory, notifier):
    return bootstrap(uow=SqlAlchemyUnitOfWork(session_factory=session_factory), notifier=notifier)

@pytest.fixture()
async def async_client(bus, token_service) -> AsyncGenerator:
    """A client for making asynchronous requests to the app."""
    app.dependency_overrides[get_bus] = lambda: bus
    app.dependency_overrides[get_token_service] = lambda: token_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver", timeout=5.0) as ac:
        yield ac
    app.dependency_overrides.clear()

async def register(async_client: AsyncClient, name: str, email: str, password: str = "secret123") -> dict:
    response = await async_client.post(
        "/api/register", json={"name": name, "email": email, "password": password}
    )
    assert response.status_code == 201, response.text
    token = response.json()["access_token"]
    me = await async_client.get("/api/user/me", headers={"Authorization": f"Bearer {token}"})
    return {
        "name": name,
        "email": email,
        "password": password,
        "id": me.json()["id"],
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }

@pytest.fixture()
def make_user(async_client: AsyncClient):
    async def _make(name: str, email: str, password: str = "secret123") -> dict:
        return await register(async_client, name, email, password)
    return _make

@pytest.fixture()
async def user_a(async_client: AsyncClient) -> dict:
    return await register(async_client, "Alice", "alice@example.com")

@pytest.fixture()
async def user_b(async_client: AsyncClient) -> dict:
    return await register(async_client, "Bob", "bob@example.com")
