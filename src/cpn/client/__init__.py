"""Async Python client for the CPN API.

Typical wiring::

    api = CpnApiClient("http://localhost:8000")
    resolver = SessionResolver(FileStorage(Path.home() / ".cpn" / "cookies.json"), HttpSessionBackend(api))
    api.token_provider = resolver.get_session_token
    store = AppStore(api)
    await store.load(resolver)
"""

from cpn.client.api import ApiError, CpnApiClient
from cpn.client.migration import MigrationResult, MigrationStatus, StorageMigrator
from cpn.client.session import HttpSessionBackend, Session, SessionError, SessionResolver
from cpn.client.storage import FileStorage, KeyValueStorage, MemoryStorage
from cpn.client.store import AppState, AppStore, app_reducer

__all__ = [
    "ApiError",
    "AppState",
    "AppStore",
    "CpnApiClient",
    "FileStorage",
    "HttpSessionBackend",
    "KeyValueStorage",
    "MemoryStorage",
    "MigrationResult",
    "MigrationStatus",
    "Session",
    "SessionError",
    "SessionResolver",
    "StorageMigrator",
    "app_reducer",
]
