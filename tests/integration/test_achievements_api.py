"""Integration tests: achievements and progress via API."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

FIRST_ENTRY = {
    "achievementType": "milestone",
    "achievementId": "first_entry",
    "tier": "bronze",
    "title": "First Entry",
    "description": "Log your first data entry",
    "icon": "star",
    "points": 10,
}


class TestAchievementsApi:
    @pytest.mark.asyncio
    async def test_empty(self, session_client: AsyncClient):
        response = await session_client.get("/api/achievements")
        assert response.status_code == 200
        assert response.json() == {"achievements": [], "totalPoints": 0}

    @pytest.mark.asyncio
    async def test_unlock(self, session_client: AsyncClient):
        response = await session_client.post("/api/achievements", json=FIRST_ENTRY)
        assert response.status_code == 201
        achievement = response.json()
        assert achievement["achievementId"] == "first_entry"
        assert achievement["points"] == 10
        assert achievement["unlockedAt"] is not None

    @pytest.mark.asyncio
    async def test_unlock_twice_rejected(self, session_client: AsyncClient):
        await session_client.post("/api/achievements", json=FIRST_ENTRY)
        response = await session_client.post("/api/achievements", json=FIRST_ENTRY)
        assert response.status_code == 400
        assert response.json() == {"error": "Achievement already unlocked"}

    @pytest.mark.asyncio
    async def test_total_points(self, session_client: AsyncClient):
        await session_client.post("/api/achievements", json=FIRST_ENTRY)
        await session_client.post(
            "/api/achievements",
            json={**FIRST_ENTRY, "achievementId": "ten_entries", "title": "Ten Entries", "points": 25},
        )
        data = (await session_client.get("/api/achievements")).json()
        assert len(data["achievements"]) == 2
        assert data["totalPoints"] == 35

    @pytest.mark.asyncio
    async def test_missing_field_rejected(self, session_client: AsyncClient):
        body = {k: v for k, v in FIRST_ENTRY.items() if k != "title"}
        response = await session_client.post("/api/achievements", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "title is required"}

    @pytest.mark.asyncio
    async def test_achievements_are_per_user(
        self, session_client: AsyncClient, other_session_client: AsyncClient
    ):
        await session_client.post("/api/achievements", json=FIRST_ENTRY)
        response = await other_session_client.post("/api/achievements", json=FIRST_ENTRY)
        assert response.status_code == 201
        assert (await other_session_client.get("/api/achievements")).json()["totalPoints"] == 10


class TestAchievementProgressApi:
    @pytest.mark.asyncio
    async def test_upsert_progress(self, session_client: AsyncClient):
        body = {"achievementType": "entries", "currentValue": 3, "targetValue": 10}
        response = await session_client.put("/api/achievements/progress", json=body)
        assert response.status_code == 200
        assert response.json()["currentValue"] == 3

        response = await session_client.put("/api/achievements/progress", json={**body, "currentValue": 7})
        assert response.json()["currentValue"] == 7

        progress = (await session_client.get("/api/achievements/progress")).json()
        assert len(progress) == 1
        assert progress[0]["achievementType"] == "entries"
        assert progress[0]["targetValue"] == 10

    @pytest.mark.asyncio
    async def test_zero_progress_is_valid(self, session_client: AsyncClient):
        body = {"achievementType": "entries", "currentValue": 0, "targetValue": 10}
        response = await session_client.put("/api/achievements/progress", json=body)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_fields(self, session_client: AsyncClient):
        response = await session_client.put("/api/achievements/progress", json={"achievementType": "entries"})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    @pytest.mark.asyncio
    async def test_empty_progress(self, session_client: AsyncClient):
        assert (await session_client.get("/api/achievements/progress")).json() == []
