"""Integration-test fixtures (requires running PG + Redis, migrated to head).

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.mc_common.database import async_session_factory

PASSWORD = "TestPass123"


async def register_and_login(client: AsyncClient, admin: bool = False) -> dict[str, str]:
    """Create a fresh user and return its id and Bearer header."""
    uid = uuid.uuid4().hex[:8]
    username = f"{'admin' if admin else 'seller'}_{uid}"
    reg = await client.post("/api/v1/auth/register", json={
        "username": username,
        "name": f"Test {uid}",
        "email": f"{username}@example.com",
        "password": PASSWORD,
    })
    user_id = reg.json()["data"]["user_id"]
    if admin:
        # No public endpoint grants admin; promote directly
        async with async_session_factory() as db:
            await db.execute(
                text("UPDATE users SET is_admin = TRUE WHERE id = CAST(:id AS UUID)"),
                {"id": user_id},
            )
            await db.commit()
    login = await client.post("/api/v1/auth/login", json={
        "username": username,
        "password": PASSWORD,
    })
    token = login.json()["data"]["access_token"]
    return {"user_id": user_id, "Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def seller(client: AsyncClient) -> dict[str, str]:
    return await register_and_login(client)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def other_user(client: AsyncClient) -> dict[str, str]:
    return await register_and_login(client)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def admin(client: AsyncClient) -> dict[str, str]:
    return await register_and_login(client, admin=True)


def auth(user: dict[str, str]) -> dict[str, str]:
    return {"Authorization": user["Authorization"]}
