"""Unit tests for session token extraction."""

import uuid

from starlette.requests import Request

from cpn.session.tokens import extract_session_token, is_valid_session_token, new_session_token


def _request(headers: dict[str, str]) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestExtractSessionToken:
    def test_cookie_wins(self):
        request = _request({
            "Cookie": "cpn_session_token=from-cookie",
            "Authorization": "Bearer from-bearer",
            "x-session-token": "from-header",
        })
        assert extract_session_token(request) == "from-cookie"

    def test_bearer_before_custom_header(self):
        request = _request({"Authorization": "Bearer from-bearer", "x-session-token": "from-header"})
        assert extract_session_token(request) == "from-bearer"

    def test_custom_header(self):
        assert extract_session_token(_request({"x-session-token": "from-header"})) == "from-header"

    def test_non_bearer_authorization_ignored(self):
        request = _request({"Authorization": "Basic dXNlcjpwYXNz"})
        assert extract_session_token(request) is None

    def test_empty_bearer_falls_through(self):
        request = _request({"Authorization": "Bearer ", "x-session-token": "from-header"})
        assert extract_session_token(request) == "from-header"

    def test_nothing_sent(self):
        assert extract_session_token(_request({})) is None


class TestTokenFormat:
    def test_new_tokens_are_uuids(self):
        token = new_session_token()
        assert str(uuid.UUID(token)) == token

    def test_validation(self):
        assert is_valid_session_token(str(uuid.uuid4()))
        assert not is_valid_session_token("not-a-token")
        assert not is_valid_session_token("")
