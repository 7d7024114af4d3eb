"""Unit tests for the local storage migration."""

import json
from datetime import date

import pytest

from cpn.client.api import ApiError
from cpn.client.migration import (
    DATA_ENTRIES_STORAGE_KEY,
    GIRLS_STORAGE_KEY,
    MIGRATION_FLAG_KEY,
    MigrationResult,
    StorageMigrator,
)
from cpn.client.session import Session, SessionError
from cpn.client.storage import MemoryStorage
from cpn.entries.schemas import DataEntry
from cpn.girls.schemas import Girl

LOCAL_GIRLS = [
    {"id": "local-1", "name": "Alice", "age": 25, "nationality": "Canadian", "rating": 8},
    {"id": "local-2", "name": "Beth", "age": 30, "nationality": "Irish", "rating": 6, "isActive": False},
]

LOCAL_ENTRIES = [
    {"id": "e1", "girlId": "local-1", "date": "2024-01-05T18:30:00.000Z",
     "amountSpent": 100, "durationMinutes": 60, "numberOfNuts": 2},
    {"id": "e2", "girlId": "local-2", "date": "2024-01-06",
     "amountSpent": 40, "durationMinutes": 30, "numberOfNuts": 1},
    {"id": "e3", "girlId": "ghost", "date": "2024-01-07",
     "amountSpent": 10, "durationMinutes": 10, "numberOfNuts": 1},
]


class FakeApi:
    def __init__(self, fail_girl: str | None = None, fail_entry_girl: str | None = None):
        self.fail_girl = fail_girl
        self.fail_entry_girl = fail_entry_girl
        self.girls: list[dict] = []
        self.entries: list[dict] = []

    async def create_girl(self, payload: dict) -> Girl:
        if payload["name"] == self.fail_girl:
            raise ApiError(500, "Failed to create girl")
        self.girls.append(payload)
        return Girl(id=f"remote-{len(self.girls)}", name=payload["name"], age=payload["age"],
                    nationality=payload["nationality"], rating=payload["rating"])

    async def create_data_entry(self, payload: dict) -> DataEntry:
        if payload["girlId"] == self.fail_entry_girl:
            raise ApiError(500, "Failed to create data entry")
        self.entries.append(payload)
        return DataEntry(id=f"entry-{len(self.entries)}", girl_id=payload["girlId"],
                         date=date.fromisoformat(payload["date"]))


class FakeResolver:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = 0

    async def get_or_create_session(self) -> Session:
        self.calls += 1
        if self.fail:
            raise SessionError("Failed to create user session")
        return Session(user_id="user-1", session_token="tok")


def _storage(girls=LOCAL_GIRLS, entries=LOCAL_ENTRIES) -> MemoryStorage:
    storage = MemoryStorage()
    if girls is not None:
        storage.set_item(GIRLS_STORAGE_KEY, json.dumps(girls))
    if entries is not None:
        storage.set_item(DATA_ENTRIES_STORAGE_KEY, json.dumps(entries))
    return storage


class TestCheckStatus:
    def test_counts_local_data(self):
        status = StorageMigrator(_storage(), FakeApi(), FakeResolver()).check_status()
        assert status.has_local_data
        assert not status.is_migrated
        assert status.girls_count == 2
        assert status.entries_count == 3

    def test_empty_storage(self):
        status = StorageMigrator(MemoryStorage(), FakeApi(), FakeResolver()).check_status()
        assert not status.has_local_data
        assert status.girls_count == 0

    def test_unparseable_collection_counts_as_empty(self):
        storage = MemoryStorage({GIRLS_STORAGE_KEY: "not json", DATA_ENTRIES_STORAGE_KEY: '{"a": 1}'})
        status = StorageMigrator(storage, FakeApi(), FakeResolver()).check_status()
        assert not status.has_local_data


class TestMigrate:
    @pytest.mark.asyncio
    async def test_migrates_and_remaps_girl_ids(self):
        storage = _storage()
        api = FakeApi()
        result = await StorageMigrator(storage, api, FakeResolver()).migrate()

        assert result == MigrationResult(success=True, girls_migrated=2, entries_migrated=2, entries_skipped=1)
        assert [e["girlId"] for e in api.entries] == ["remote-1", "remote-2"]
        assert storage.get_item(MIGRATION_FLAG_KEY) == "true"

    @pytest.mark.asyncio
    async def test_payloads(self):
        api = FakeApi()
        await StorageMigrator(_storage(), api, FakeResolver()).migrate()

        assert api.girls[0]["isActive"] is True
        assert api.girls[1]["isActive"] is False
        assert "id" not in api.girls[0]
        assert api.entries[0]["date"] == "2024-01-05"
        assert api.entries[0]["amountSpent"] == 100

    @pytest.mark.asyncio
    async def test_already_migrated_is_noop(self):
        storage = _storage()
        storage.set_item(MIGRATION_FLAG_KEY, "true")
        api = FakeApi()
        resolver = FakeResolver()
        result = await StorageMigrator(storage, api, resolver).migrate()
        assert result == MigrationResult(success=True)
        assert api.girls == []
        assert resolver.calls == 0

    @pytest.mark.asyncio
    async def test_nothing_to_migrate(self):
        storage = MemoryStorage()
        result = await StorageMigrator(storage, FakeApi(), FakeResolver()).migrate()
        assert result == MigrationResult(success=True)
        assert storage.get_item(MIGRATION_FLAG_KEY) is None

    @pytest.mark.asyncio
    async def test_session_failure(self):
        storage = _storage()
        result = await StorageMigrator(storage, FakeApi(), FakeResolver(fail=True)).migrate()
        assert not result.success
        assert result.error == "Failed to create user session"
        assert storage.get_item(MIGRATION_FLAG_KEY) is None

    @pytest.mark.asyncio
    async def test_failed_girl_aborts_without_flag(self):
        storage = _storage()
        api = FakeApi(fail_girl="Beth")
        result = await StorageMigrator(storage, api, FakeResolver()).migrate()
        assert not result.success
        assert result.girls_migrated == 1
        assert result.error == "Failed to migrate girl: Beth"
        assert api.entries == []
        assert storage.get_item(MIGRATION_FLAG_KEY) is None

    @pytest.mark.asyncio
    async def test_failed_entry_is_skipped(self):
        storage = _storage()
        result = await StorageMigrator(storage, FakeApi(fail_entry_girl="remote-1"), FakeResolver()).migrate()
        assert result.success
        assert result.entries_migrated == 1
        assert result.entries_skipped == 2
        assert storage.get_item(MIGRATION_FLAG_KEY) == "true"


class TestHousekeeping:
    def test_clear_local_data_marks_migrated(self):
        storage = _storage()
        migrator = StorageMigrator(storage, FakeApi(), FakeResolver())
        migrator.clear_local_data()
        assert storage.get_item(GIRLS_STORAGE_KEY) is None
        assert storage.get_item(DATA_ENTRIES_STORAGE_KEY) is None
        assert migrator.is_migrated()

    def test_reset_flag(self):
        storage = _storage()
        storage.set_item(MIGRATION_FLAG_KEY, "true")
        migrator = StorageMigrator(storage, FakeApi(), FakeResolver())
        migrator.reset_migration_flag()
        assert not migrator.is_migrated()
