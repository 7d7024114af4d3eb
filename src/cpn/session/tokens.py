"""Session token extraction.

The token is an opaque per-client identity, not a cryptographic credential:
it never expires and is never rotated, so anyone holding it acts as that user.
"""

from __future__ import annotations

import uuid

from starlette.requests import Request

from cpn.config import get_settings


def extract_session_token(request: Request) -> str | None:
    """Resolve the session token from cookie, then Bearer header, then x-session-token."""
    token = request.cookies.get(get_settings().session_cookie_name)
    if token:
        return token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        bearer = auth_header[len("Bearer "):].strip()
        if bearer:
            return bearer

    return request.headers.get("x-session-token") or None


def new_session_token() -> str:
    return str(uuid.uuid4())


def is_valid_session_token(token: str) -> bool:
    """Tokens are UUID strings; anything else is rejected at creation time."""
    try:
        uuid.UUID(token)
    except ValueError:
        return False
    return True
