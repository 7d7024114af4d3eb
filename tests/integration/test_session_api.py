"""Integration tests: anonymous sessions via API."""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from cpn.db.models import User


class TestSessionApi:
    @pytest.mark.asyncio
    async def test_create_without_token_mints_one(self, client: AsyncClient):
        response = await client.post("/api/session")
        assert response.status_code == 201
        data = response.json()
        uuid.UUID(data["sessionToken"])
        uuid.UUID(data["userId"])
        assert response.cookies.get("cpn_session_token") == data["sessionToken"]

    @pytest.mark.asyncio
    async def test_cookie_identifies_user_afterwards(self, client: AsyncClient):
        created = (await client.post("/api/session")).json()
        # The client jar now carries the cookie
        response = await client.get("/api/session")
        assert response.status_code == 200
        assert response.json()["userId"] == created["userId"]

    @pytest.mark.asyncio
    async def test_client_minted_token_is_kept(self, client: AsyncClient):
        token = str(uuid.uuid4())
        response = await client.post("/api/session", headers={"x-session-token": token})
        assert response.status_code == 201
        assert response.json()["sessionToken"] == token

    @pytest.mark.asyncio
    async def test_existing_token_returns_same_user(self, client: AsyncClient):
        token = str(uuid.uuid4())
        first = (await client.post("/api/session", headers={"x-session-token": token})).json()
        response = await client.post("/api/session", headers={"x-session-token": token})
        assert response.status_code == 200
        assert response.json() == first

    @pytest.mark.asyncio
    async def test_invalid_token_replaced(self, client: AsyncClient):
        response = await client.post("/api/session", headers={"x-session-token": "garbage"})
        assert response.status_code == 201
        token = response.json()["sessionToken"]
        assert token != "garbage"
        uuid.UUID(token)

    @pytest.mark.asyncio
    async def test_bearer_token_accepted(self, client: AsyncClient):
        token = str(uuid.uuid4())
        await client.post("/api/session", headers={"x-session-token": token})
        response = await client.get("/api/session", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["sessionToken"] == token

    @pytest.mark.asyncio
    async def test_get_without_token(self, client: AsyncClient):
        response = await client.get("/api/session")
        assert response.status_code == 401
        assert response.json() == {"error": "No session found"}

    @pytest.mark.asyncio
    async def test_get_unknown_token(self, client: AsyncClient):
        response = await client.get("/api/session", headers={"x-session-token": str(uuid.uuid4())})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid session"}

    @pytest.mark.asyncio
    async def test_new_users_are_anonymous_free_tier(self, client: AsyncClient, db_session):
        data = (await client.post("/api/session")).json()
        result = await db_session.execute(select(User).where(User.id == data["userId"]))
        user = result.scalar_one()
        assert user.is_anonymous is True
        assert user.subscription_tier == "free"
        assert user.session_token == data["sessionToken"]
