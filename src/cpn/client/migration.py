"""One-time migration of locally stored girls and entries to the API.

Older clients kept everything in local storage under ``cpn_girls`` and
``cpn_data_entries``. ``StorageMigrator.migrate`` recreates those records
remotely, remapping each local girl id to the id the server assigns, and then
sets ``cpn_migrated_to_db`` so it never runs again.

Migration is not resumable: if it stops after some girls were created but
before the flag is set, running it again creates those girls a second time.
There is no deduplication.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from cpn.client.api import ApiError, CpnApiClient
from cpn.client.session import SessionError, SessionResolver
from cpn.client.storage import KeyValueStorage

logger = structlog.get_logger()

GIRLS_STORAGE_KEY = "cpn_girls"
DATA_ENTRIES_STORAGE_KEY = "cpn_data_entries"
MIGRATION_FLAG_KEY = "cpn_migrated_to_db"

_GIRL_FIELDS = ("name", "age", "nationality", "rating", "ethnicity", "hairColor", "location")
_ENTRY_FIELDS = ("amountSpent", "durationMinutes", "numberOfNuts")


@dataclass(frozen=True)
class MigrationStatus:
    has_local_data: bool
    is_migrated: bool
    girls_count: int
    entries_count: int


@dataclass(frozen=True)
class MigrationResult:
    success: bool
    girls_migrated: int = 0
    entries_migrated: int = 0
    entries_skipped: int = 0
    error: str | None = None


def _girl_payload(girl: dict[str, Any]) -> dict[str, Any]:
    payload = {field: girl.get(field) for field in _GIRL_FIELDS}
    is_active = girl.get("isActive")
    payload["isActive"] = True if is_active is None else is_active
    return payload


def _entry_payload(entry: dict[str, Any], girl_id: str) -> dict[str, Any]:
    payload = {field: entry.get(field) for field in _ENTRY_FIELDS}
    payload["girlId"] = girl_id
    # Local entries may carry full ISO timestamps; the API takes a calendar date.
    payload["date"] = str(entry.get("date") or "")[:10]
    return payload


class StorageMigrator:
    """Moves a browser-era local dataset into the signed-in user's remote store."""

    def __init__(
        self,
        local_storage: KeyValueStorage,
        api: CpnApiClient,
        session_resolver: SessionResolver,
    ):
        self.local_storage = local_storage
        self.api = api
        self.session_resolver = session_resolver

    def _read_collection(self, key: str) -> list[dict[str, Any]]:
        """Parse a stored JSON array. Anything unreadable counts as empty."""
        raw = self.local_storage.get_item(key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("local_storage_parse_failed", key=key, error=str(e))
            return []
        if not isinstance(data, list):
            logger.error("local_storage_parse_failed", key=key, error="expected a JSON array")
            return []
        return [item for item in data if isinstance(item, dict)]

    def is_migrated(self) -> bool:
        return self.local_storage.get_item(MIGRATION_FLAG_KEY) == "true"

    def check_status(self) -> MigrationStatus:
        """Report what is stored locally. Never modifies storage."""
        girls = self._read_collection(GIRLS_STORAGE_KEY)
        entries = self._read_collection(DATA_ENTRIES_STORAGE_KEY)
        return MigrationStatus(
            has_local_data=bool(girls or entries),
            is_migrated=self.is_migrated(),
            girls_count=len(girls),
            entries_count=len(entries),
        )

    async def migrate(self) -> MigrationResult:
        """
        Recreate local girls and entries remotely.

        A failed girl aborts the run with ``success=False`` and leaves the
        flag unset. A failed entry, or one whose girl was never migrated, is
        logged and skipped.
        """
        if self.is_migrated():
            return MigrationResult(success=True)

        try:
            await self.session_resolver.get_or_create_session()
        except SessionError as e:
            logger.error("migration_session_failed", error=str(e))
            return MigrationResult(success=False, error=str(e))

        girls = self._read_collection(GIRLS_STORAGE_KEY)
        entries = self._read_collection(DATA_ENTRIES_STORAGE_KEY)
        if not girls and not entries:
            return MigrationResult(success=True)

        girl_ids: dict[str, str] = {}
        for girl in girls:
            try:
                created = await self.api.create_girl(_girl_payload(girl))
            except (ApiError, httpx.HTTPError, ValidationError) as e:
                logger.error("migration_girl_failed", name=girl.get("name"), error=str(e))
                return MigrationResult(
                    success=False,
                    girls_migrated=len(girl_ids),
                    error=f"Failed to migrate girl: {girl.get('name')}",
                )
            girl_ids[str(girl.get("id"))] = created.id

        migrated = skipped = 0
        for entry in entries:
            new_girl_id = girl_ids.get(str(entry.get("girlId")))
            if new_girl_id is None:
                logger.warning("migration_entry_skipped", entry_id=entry.get("id"), girl_id=entry.get("girlId"))
                skipped += 1
                continue
            try:
                await self.api.create_data_entry(_entry_payload(entry, new_girl_id))
            except (ApiError, httpx.HTTPError, ValidationError) as e:
                logger.error("migration_entry_failed", entry_id=entry.get("id"), error=str(e))
                skipped += 1
                continue
            migrated += 1

        self.local_storage.set_item(MIGRATION_FLAG_KEY, "true")
        logger.info(
            "migration_completed",
            girls_migrated=len(girl_ids),
            entries_migrated=migrated,
            entries_skipped=skipped,
        )
        return MigrationResult(
            success=True,
            girls_migrated=len(girl_ids),
            entries_migrated=migrated,
            entries_skipped=skipped,
        )

    def clear_local_data(self) -> None:
        """Discard the local dataset and mark migration done ("start fresh"). Irreversible."""
        self.local_storage.remove_item(GIRLS_STORAGE_KEY)
        self.local_storage.remove_item(DATA_ENTRIES_STORAGE_KEY)
        self.local_storage.set_item(MIGRATION_FLAG_KEY, "true")

    def reset_migration_flag(self) -> None:
        self.local_storage.remove_item(MIGRATION_FLAG_KEY)
