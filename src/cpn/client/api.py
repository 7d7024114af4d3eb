"""
HTTP client for the CPN API.

Wraps one ``httpx.AsyncClient`` and maps the camelCase JSON surface onto the
same pydantic models the server uses. The session token is attached to every
request as ``x-session-token``; where it comes from is up to the caller
(usually ``SessionResolver.get_session_token``).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import structlog

from cpn.entries.schemas import DataEntry, DataEntryCreate, DataEntryUpdate
from cpn.girls.schemas import Girl, GirlCreate, GirlUpdate
from cpn.leaderboards.schemas import LeaderboardGroupResponse, LeaderboardMember, LeaderboardRanking
from cpn.metrics.schemas import LeaderboardStats
from cpn.schemas import CamelModel

logger = structlog.get_logger()

SESSION_HEADER = "x-session-token"

TokenProvider = Callable[[], "str | None"]
Payload = CamelModel | dict[str, Any]


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _dump(payload: Payload, *, partial: bool = False) -> dict[str, Any]:
    """Serialize a request body. Partial updates send only the fields that were set."""
    if isinstance(payload, CamelModel):
        return payload.model_dump(mode="json", by_alias=True, exclude_unset=partial)
    return payload


class CpnApiClient:
    """
    Client for the CPN REST API.

    Args:
        base_url: Server root, e.g. ``http://localhost:8000``.
        token_provider: Called before each request; its token is sent in the
            ``x-session-token`` header. May be set after construction.
        timeout: Request timeout; httpx's default applies when omitted.
        transport: Optional httpx transport (``httpx.ASGITransport`` in tests).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        token_provider: TokenProvider | None = None,
        timeout: httpx.Timeout | float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.token_provider = token_provider
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            options: dict[str, Any] = {
                "base_url": self.base_url,
                "headers": {"Accept": "application/json"},
            }
            if self._timeout is not None:
                options["timeout"] = self._timeout
            if self._transport is not None:
                options["transport"] = self._transport
            self._client = httpx.AsyncClient(**options)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> CpnApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            ApiError: On any non-2xx response, carrying the server's ``error`` message,
                or on a 2xx response whose body is not JSON.
            httpx.HTTPError: On transport failures.
        """
        if token is None and self.token_provider is not None:
            token = self.token_provider()
        headers = {SESSION_HEADER: token} if token else {}

        client = await self._get_client()
        response = await client.request(method, path, json=json, params=params, headers=headers)

        if response.is_error:
            try:
                message = response.json().get("error", response.reason_phrase)
            except (ValueError, AttributeError):
                message = response.reason_phrase
            logger.debug("api_request_failed", method=method, path=path, status=response.status_code)
            raise ApiError(response.status_code, message)

        try:
            return response.json()
        except ValueError:
            logger.warning("api_response_undecodable", method=method, path=path, status=response.status_code)
            raise ApiError(response.status_code, "Invalid response body") from None

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def create_session(self, token: str | None = None) -> dict[str, str]:
        """POST /api/session. A client-minted token is registered as-is."""
        return await self._request("POST", "/api/session", token=token)

    async def get_session(self, token: str | None = None) -> dict[str, str]:
        """GET /api/session. Raises ApiError(401) for unknown tokens."""
        return await self._request("GET", "/api/session", token=token)

    # ------------------------------------------------------------------
    # Girls
    # ------------------------------------------------------------------

    async def list_girls(self) -> list[Girl]:
        data = await self._request("GET", "/api/girls")
        return [Girl.model_validate(g) for g in data]

    async def create_girl(self, girl: GirlCreate | dict[str, Any]) -> Girl:
        return Girl.model_validate(await self._request("POST", "/api/girls", json=_dump(girl)))

    async def get_girl(self, girl_id: str) -> Girl:
        return Girl.model_validate(await self._request("GET", f"/api/girls/{girl_id}"))

    async def update_girl(self, girl_id: str, updates: GirlUpdate | dict[str, Any]) -> Girl:
        data = await self._request("PUT", f"/api/girls/{girl_id}", json=_dump(updates, partial=True))
        return Girl.model_validate(data)

    async def delete_girl(self, girl_id: str) -> None:
        await self._request("DELETE", f"/api/girls/{girl_id}")

    # ------------------------------------------------------------------
    # Data entries
    # ------------------------------------------------------------------

    async def list_data_entries(self, girl_id: str | None = None) -> list[DataEntry]:
        params = {"girlId": girl_id} if girl_id else None
        data = await self._request("GET", "/api/data-entries", params=params)
        return [DataEntry.model_validate(e) for e in data]

    async def create_data_entry(self, entry: DataEntryCreate | dict[str, Any]) -> DataEntry:
        return DataEntry.model_validate(await self._request("POST", "/api/data-entries", json=_dump(entry)))

    async def update_data_entry(self, entry_id: str, updates: DataEntryUpdate | dict[str, Any]) -> DataEntry:
        data = await self._request("PUT", f"/api/data-entries/{entry_id}", json=_dump(updates, partial=True))
        return DataEntry.model_validate(data)

    async def delete_data_entry(self, entry_id: str) -> None:
        await self._request("DELETE", f"/api/data-entries/{entry_id}")

    # ------------------------------------------------------------------
    # Leaderboards
    # ------------------------------------------------------------------

    async def list_groups(self) -> list[LeaderboardGroupResponse]:
        data = await self._request("GET", "/api/leaderboards")
        return [LeaderboardGroupResponse.model_validate(g) for g in data]

    async def create_group(self, name: str, username: str | None = None) -> LeaderboardGroupResponse:
        body: dict[str, Any] = {"name": name}
        if username:
            body["username"] = username
        return LeaderboardGroupResponse.model_validate(await self._request("POST", "/api/leaderboards", json=body))

    async def join_group(self, invite_token: str, username: str) -> LeaderboardMember:
        data = await self._request(
            "POST", "/api/leaderboards/join", json={"inviteToken": invite_token, "username": username}
        )
        return LeaderboardMember.model_validate(data)

    async def get_group_members(self, group_id: str) -> list[LeaderboardMember]:
        data = await self._request("GET", f"/api/leaderboards/{group_id}")
        return [LeaderboardMember.model_validate(m) for m in data]

    async def update_group_stats(self, group_id: str, stats: LeaderboardStats) -> None:
        await self._request("PUT", f"/api/leaderboards/{group_id}", json={"stats": _dump(stats)})

    async def leave_group(self, group_id: str) -> None:
        await self._request("DELETE", f"/api/leaderboards/{group_id}")

    async def get_rankings(self, group_id: str, sort_by: str = "efficiency") -> list[LeaderboardRanking]:
        data = await self._request("GET", f"/api/leaderboards/{group_id}/rankings", params={"sortBy": sort_by})
        return [LeaderboardRanking.model_validate(r) for r in data]
