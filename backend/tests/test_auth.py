"""End-to-end tests for authentication endpoints."""

from datetime import timedelta
from typing import Any, cast
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from api.deps import get_db
from app import create_app
from core import create_access_token, verify_password
from models import User
from services.accounts import register_account
from services.errors import ConflictError


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def build_payload() -> dict[str, str | None]:
    suffix = uuid4().hex[:8]
    return {
        "username": f"alice_{suffix}",
        "email": f"alice_{suffix}@example.com",
        "password": "Sup3rSecret!",
        "display_name": "Alice",
    }


@pytest.mark.asyncio
async def test_register_creates_user(async_client, db_session: AsyncSession):
    payload = build_payload()
    response = await async_client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201
    data = response.json()
    assert isinstance(data["id"], int)
    assert data["username"] == payload["username"]
    assert data["email"] == payload["email"]
    assert data["display_name"] == "Alice"
    assert "password_hash" not in data

    result = await db_session.execute(
        select(User).where(_eq(User.username, payload["username"]))
    )
    user = result.scalar_one()
    assert user.password_hash != payload["password"]
    assert verify_password(str(payload["password"]), user.password_hash)


@pytest.mark.asyncio
async def test_register_returns_usable_access_token(async_client):
    payload = build_payload()
    response = await async_client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "bearer"
    assert "access_token" in response.cookies
    async_client.cookies.clear()

    me = await async_client.get(
        "/api/v1/me",
        headers={"Authorization": f"Bearer {data['access_token']}"},
    )

    assert me.status_code == 200
    assert me.json()["username"] == payload["username"]


@pytest.mark.asyncio
async def test_register_succeeds_on_default_app(session_maker):
    application = create_app()

    async def override_get_db():
        async with session_maker() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/api/v1/auth/register", json=build_payload())

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_register_alice_returns_generated_id(db_session: AsyncSession):
    user = await register_account(db_session, username="alice", password="Sup3rSecret!")

    assert user.id is not None
    assert user.username == "alice"
    assert user.email is None


@pytest.mark.asyncio
async def test_register_without_email(async_client):
    payload = build_payload()
    payload.pop("email")
    response = await async_client.post("/api/v1/auth/register", json=payload)

    assert response.status_code == 201
    assert response.json()["email"] is None


@pytest.mark.asyncio
async def test_register_normalizes_email_to_lowercase(async_client):
    payload = build_payload()
    payload["email"] = "Mixed.Case+alias@Example.COM"
    response = await async_client.post("/api/v1/auth/register", json=payload)

    assert response.status_code == 201
    assert response.json()["email"] == "mixed.case+alias@example.com"


@pytest.mark.asyncio
async def test_register_rejects_email_like_username(async_client):
    payload = build_payload()
    payload["username"] = "not_allowed@example.com"

    response = await async_client.post("/api/v1/auth/register", json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_conflict(async_client):
    payload = build_payload()
    await async_client.post("/api/v1/auth/register", json=payload)
    response = await async_client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_conflict_for_case_variant_email(async_client):
    payload = build_payload()
    payload["email"] = "User.Mixed@Example.com"
    first = await async_client.post("/api/v1/auth/register", json=payload)
    assert first.status_code == 201

    second_payload = build_payload()
    second_payload["email"] = "user.mixed@example.com"
    second = await async_client.post("/api/v1/auth/register", json=second_payload)
    assert second.status_code == 409


@pytest.mark.asyncio
async def test_register_account_raises_conflict_for_taken_username(db_session: AsyncSession):
    await register_account(db_session, username="taken_name", password="Sup3rSecret!")

    with pytest.raises(ConflictError):
        await register_account(db_session, username="taken_name", password="Another1Pass!")


@pytest.mark.asyncio
async def test_login_with_username_sets_cookie(async_client):
    payload = build_payload()
    await async_client.post("/api/v1/auth/register", json=payload)

    response = await async_client.post(
        "/api/v1/auth/login",
        json={"username": payload["username"], "password": payload["password"]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert "access_token" in response.cookies


@pytest.mark.asyncio
async def test_login_with_email_identifier(async_client):
    payload = build_payload()
    await async_client.post("/api/v1/auth/register", json=payload)

    response = await async_client.post(
        "/api/v1/auth/login",
        json={"username": str(payload["email"]).upper(), "password": payload["password"]},
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_rejects_wrong_password(async_client):
    payload = build_payload()
    await async_client.post("/api/v1/auth/register", json=payload)

    response = await async_client.post(
        "/api/v1/auth/login",
        json={"username": payload["username"], "password": "WrongPassword!"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_rejects_unknown_user(async_client):
    response = await async_client.post(
        "/api/v1/auth/login",
        json={"username": "nobody_here", "password": "Sup3rSecret!"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_bearer_token_authenticates_requests(async_client):
    payload = build_payload()
    await async_client.post("/api/v1/auth/register", json=payload)
    login = await async_client.post(
        "/api/v1/auth/login",
        json={"username": payload["username"], "password": payload["password"]},
    )
    token = login.json()["access_token"]
    async_client.cookies.clear()

    response = await async_client.get(
        "/api/v1/me",
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 200
    assert response.json()["username"] == payload["username"]


@pytest.mark.asyncio
async def test_expired_token_is_rejected(async_client, db_session: AsyncSession):
    user = await register_account(db_session, username="expired_user", password="Sup3rSecret!")
    token = create_access_token(str(user.id), expires_delta=timedelta(seconds=-5))

    response = await async_client.get(
        "/api/v1/me",
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_for_unknown_user_is_rejected(async_client):
    token = create_access_token("999999")

    response = await async_client.get(
        "/api/v1/me",
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_clears_cookie(async_client):
    payload = build_payload()
    await async_client.post("/api/v1/auth/register", json=payload)
    await async_client.post(
        "/api/v1/auth/login",
        json={"username": payload["username"], "password": payload["password"]},
    )

    response = await async_client.post("/api/v1/auth/logout")
    assert response.status_code == 200
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("access_token=")
    assert "Max-Age=0" in set_cookie


@pytest.mark.asyncio
async def test_health_endpoint(async_client):
    response = await async_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
