"""Client session resolution.

The cookie store is the canonical home of the session token. A token found
only in local storage (written by older clients) is moved into the cookie
store the first time it is read and removed from local storage.

Tokens never expire and are never rotated. Anyone holding a token acts as
that user; the app is not security-sensitive, so this is accepted.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import structlog

from cpn.client.api import ApiError, CpnApiClient
from cpn.client.storage import KeyValueStorage

logger = structlog.get_logger()

SESSION_TOKEN_KEY = "cpn_session_token"


@dataclass(frozen=True)
class Session:
    user_id: str
    session_token: str


class SessionError(Exception):
    """No session could be established."""


class SessionBackend(Protocol):
    async def create_user(self, token: str) -> Session: ...

    async def find_user(self, token: str) -> Session | None: ...


def _session_from(data: Any) -> Session:
    try:
        return Session(user_id=data["userId"], session_token=data["sessionToken"])
    except (KeyError, TypeError):
        raise ApiError(200, "Invalid session response") from None


class HttpSessionBackend:
    """Session backend over the API's /api/session endpoints."""

    def __init__(self, api: CpnApiClient):
        self.api = api

    async def create_user(self, token: str) -> Session:
        return _session_from(await self.api.create_session(token))

    async def find_user(self, token: str) -> Session | None:
        try:
            data = await self.api.get_session(token)
        except ApiError as e:
            if e.status_code == 401:
                return None
            raise
        return _session_from(data)


class SessionResolver:
    """Get-or-create the per-client identity."""

    def __init__(
        self,
        cookies: KeyValueStorage,
        backend: SessionBackend,
        local_storage: KeyValueStorage | None = None,
    ):
        self.cookies = cookies
        self.backend = backend
        self.local_storage = local_storage

    def get_session_token(self) -> str | None:
        """Return the stored token without creating one."""
        token = self.cookies.get_item(SESSION_TOKEN_KEY)
        if token:
            return token

        if self.local_storage is None:
            return None
        legacy = self.local_storage.get_item(SESSION_TOKEN_KEY)
        if not legacy:
            return None

        self.cookies.set_item(SESSION_TOKEN_KEY, legacy)
        self.local_storage.remove_item(SESSION_TOKEN_KEY)
        logger.info("session_token_moved_to_cookie_store")
        return legacy

    def clear_session(self) -> None:
        self.cookies.remove_item(SESSION_TOKEN_KEY)
        if self.local_storage is not None:
            self.local_storage.remove_item(SESSION_TOKEN_KEY)

    async def _create(self) -> Session:
        token = str(uuid.uuid4())
        try:
            session = await self.backend.create_user(token)
        except (ApiError, httpx.HTTPError) as e:
            raise SessionError("Failed to create user session") from e
        self.cookies.set_item(SESSION_TOKEN_KEY, session.session_token)
        logger.info("session_created", user_id=session.user_id)
        return session

    async def get_or_create_session(self) -> Session:
        """
        Return the current session, minting a new identity when there is none.

        A stored token that no longer maps to a user is cleared and replaced
        once; the replacement is never looked up again.

        Raises:
            SessionError: If the remote user could not be created.
        """
        token = self.get_session_token()
        if not token:
            return await self._create()

        try:
            session = await self.backend.find_user(token)
        except (ApiError, httpx.HTTPError) as e:
            logger.warning("session_lookup_failed", error=str(e))
            session = None

        if session is not None:
            return session

        logger.info("session_token_stale")
        self.clear_session()
        return await self._create()
