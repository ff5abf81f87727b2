"""
Tests for registration, the forgot-password check and the access guard.
"""

from datetime import timedelta

import bcrypt
import pytest
from httpx import AsyncClient
from jose import jwt
from sqlalchemy import select

from eventhub.core.config import get_settings
from eventhub.core.security import (
    AuthContext, create_refresh_token, verify_refresh_token,
)
from eventhub.models.user import User


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient, session_factory):
    """Successful registration stores a hashed password."""
    response = await client.post("/api/register", json={
        "email": "new@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 201
    assert response.json() == {"success": True, "message": "User registered"}

    async with session_factory() as session:
        user = (await session.execute(select(User).where(User.email == "new@example.com"))).scalar_one()
    assert user.role == "user"
    assert user.hashed_password != "securepassword123"
    assert bcrypt.checkpw(b"securepassword123", user.hashed_password.encode("utf-8"))


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user):
    """Duplicate email returns 409."""
    response = await client.post("/api/register", json={
        "email": "test@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Email already registered"}


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient):
    """Password under 8 chars returns 400."""
    response = await client.post("/api/register", json={
        "email": "weak@example.com",
        "password": "short",
    })
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "password" in response.json()["message"]


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient):
    response = await client.post("/api/register", json={
        "email": "not-an-email",
        "password": "securepassword123",
    })
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_forgot_password_known_email(client: AsyncClient, test_user):
    response = await client.post("/api/forgot-password", json={"email": "test@example.com"})
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Email verified",
        "userId": test_user.user_id,
        "showError": False,
    }


@pytest.mark.asyncio
async def test_forgot_password_unknown_email(client: AsyncClient):
    response = await client.post("/api/forgot-password", json={"email": "nobody@example.com"})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is False
    assert data["message"] == "Email not found"
    assert data["userId"] is None
    assert data["showError"] is True


@pytest.mark.asyncio
async def test_forgot_password_missing_email(client: AsyncClient):
    response = await client.post("/api/forgot-password", json={})
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Email Required"}


@pytest.mark.asyncio
@pytest.mark.parametrize("email", ["plainaddress", "two@@example.com", "spaces in@example.com", "a@b"])
async def test_forgot_password_bad_format(client: AsyncClient, email):
    response = await client.post("/api/forgot-password", json={"email": email})
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid email format"}


def test_verify_refresh_token_round_trip():
    token = create_refresh_token("owner@example.com", "owner")
    result = verify_refresh_token(token)
    assert result.success is True
    assert result.payload["role"] == "owner"
    assert result.payload["user_email"] == "owner@example.com"


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_verify_refresh_token_rejects_garbage(token):
    result = verify_refresh_token(token)
    assert result.success is False
    assert result.payload == {}


def test_verify_refresh_token_rejects_wrong_key():
    token = jwt.encode({"role": "admin", "type": "refresh"}, "some-other-key", algorithm="HS256")
    assert verify_refresh_token(token).success is False


def test_verify_refresh_token_rejects_access_tokens():
    settings = get_settings()
    token = jwt.encode({"role": "admin", "type": "access"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    assert verify_refresh_token(token).success is False


def test_verify_refresh_token_rejects_expired():
    token = create_refresh_token("admin@example.com", "admin", expires_delta=timedelta(minutes=-1))
    assert verify_refresh_token(token).success is False


@pytest.mark.parametrize("role, allowed", [
    ("admin", True),
    ("owner", True),
    ("user", False),
    ("Admin", False),
])
def test_event_manager_roles(role, allowed):
    assert AuthContext(email="x@example.com", role=role).can_manage_events is allowed
