import hashlib

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.anyio


async def register_user(async_client: AsyncClient, name: str, email: str, password: str):
    return await async_client.post(
        "/api/register",
        json={"name": name, "email": email, "password": password},
    )


async def test_register_user(async_client: AsyncClient, notifier):
    response = await register_user(async_client, "Test", "test@example.com", "123456")

    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert notifier.outbox[0].to == "test@example.com"


async def test_register_user_already_exists(async_client: AsyncClient, user_a: dict):
    response = await register_user(
        async_client, "Again", user_a["email"].upper(), user_a["password"]
    )

    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "", "email": "x@example.com", "password": "123456"},
        {"name": "X", "email": "not-an-email", "password": "123456"},
        {"name": "X", "email": "x@example.com", "password": "12345"},
    ],
)
async def test_register_user_rejects_invalid_input(async_client: AsyncClient, payload):
    response = await async_client.post("/api/register", json=payload)

    assert response.status_code == 422


async def test_login_user_not_exists(async_client: AsyncClient):
    response = await async_client.post(
        "/api/token",
        data={"username": "email@email.com", "password": "1234tired."},
    )

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_login_wrong_password(async_client: AsyncClient, user_a: dict):
    response = await async_client.post(
        "/api/token", json={"email": user_a["email"], "password": "wrong-password"}
    )

    assert response.status_code == 401


async def test_login_user_with_form(async_client: AsyncClient, user_a: dict):
    response = await async_client.post(
        "/api/token",
        data={"username": user_a["email"], "password": user_a["password"]},
    )

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


async def test_login_user_with_json(async_client: AsyncClient, user_a: dict, token_service):
    response = await async_client.post(
        "/api/token", json={"email": user_a["email"], "password": user_a["password"]}
    )

    assert response.status_code == 200
    assert token_service.verify(response.json()["access_token"]) == user_a["id"]


async def test_login_requires_credentials(async_client: AsyncClient):
    response = await async_client.post("/api/token", json={"email": "a@example.com"})

    assert response.status_code == 400


async def test_get_current_user(async_client: AsyncClient, user_a: dict):
    response = await async_client.get("/api/user/me", headers=user_a["headers"])

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == user_a["id"]
    assert body["name"] == "Alice"
    assert body["email"] == "alice@example.com"
    digest = hashlib.md5(b"alice@example.com").hexdigest()
    assert body["avatar"] == f"https://www.gravatar.com/avatar/{digest}?s=200&r=pg&d=mm"
    assert "password" not in body


async def test_get_current_user_without_token(async_client: AsyncClient):
    response = await async_client.get("/api/user/me")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_root_reports_liveness(async_client: AsyncClient):
    response = await async_client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Server is running"}
