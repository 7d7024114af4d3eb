"""Client state store.

``app_reducer`` is a pure function from (state, action) to a new state; every
action that touches girls or entries recomputes the derived metrics before it
returns, so a published state is never stale. ``AppStore`` owns the current
state, notifies subscribers, and pairs each API call with the matching action.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import Any, Union

import httpx
import structlog
from pydantic import ValidationError

from cpn.client.api import ApiError, CpnApiClient
from cpn.client.session import SessionError, SessionResolver
from cpn.entries.schemas import DataEntry, DataEntryCreate, DataEntryUpdate
from cpn.girls.schemas import Girl, GirlCreate, GirlUpdate
from cpn.metrics.calculations import girls_with_metrics, global_stats
from cpn.metrics.schemas import GirlWithMetrics, GlobalStats

logger = structlog.get_logger()


@dataclass(frozen=True)
class AppState:
    girls: tuple[Girl, ...] = ()
    data_entries: tuple[DataEntry, ...] = ()
    girls_with_metrics: tuple[GirlWithMetrics, ...] = ()
    global_stats: GlobalStats = field(default_factory=GlobalStats)
    is_loading: bool = True


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SetLoading:
    is_loading: bool


@dataclass(frozen=True)
class LoadData:
    girls: tuple[Girl, ...]
    data_entries: tuple[DataEntry, ...]


@dataclass(frozen=True)
class AddGirl:
    girl: Girl


@dataclass(frozen=True)
class UpdateGirl:
    girl: Girl


@dataclass(frozen=True)
class DeleteGirl:
    girl_id: str


@dataclass(frozen=True)
class AddDataEntry:
    entry: DataEntry


@dataclass(frozen=True)
class UpdateDataEntry:
    entry: DataEntry


@dataclass(frozen=True)
class DeleteDataEntry:
    entry_id: str


Action = Union[
    SetLoading, LoadData, AddGirl, UpdateGirl, DeleteGirl, AddDataEntry, UpdateDataEntry, DeleteDataEntry
]


def _with_data(
    state: AppState,
    girls: Iterable[Girl],
    entries: Iterable[DataEntry],
    **changes: Any,
) -> AppState:
    girls = tuple(girls)
    entries = tuple(entries)
    return replace(
        state,
        girls=girls,
        data_entries=entries,
        girls_with_metrics=tuple(girls_with_metrics(girls, entries)),
        global_stats=global_stats(girls, entries),
        **changes,
    )


def app_reducer(state: AppState, action: Action) -> AppState:
    """Apply one action. Unknown actions return the state unchanged."""
    if isinstance(action, SetLoading):
        return replace(state, is_loading=action.is_loading)

    if isinstance(action, LoadData):
        return _with_data(state, action.girls, action.data_entries, is_loading=False)

    if isinstance(action, AddGirl):
        return _with_data(state, (*state.girls, action.girl), state.data_entries)

    if isinstance(action, UpdateGirl):
        girls = (action.girl if g.id == action.girl.id else g for g in state.girls)
        return _with_data(state, girls, state.data_entries)

    if isinstance(action, DeleteGirl):
        # Entries of a deleted girl go with her.
        return _with_data(
            state,
            (g for g in state.girls if g.id != action.girl_id),
            (e for e in state.data_entries if e.girl_id != action.girl_id),
        )

    if isinstance(action, AddDataEntry):
        return _with_data(state, state.girls, (*state.data_entries, action.entry))

    if isinstance(action, UpdateDataEntry):
        entries = (action.entry if e.id == action.entry.id else e for e in state.data_entries)
        return _with_data(state, state.girls, entries)

    if isinstance(action, DeleteDataEntry):
        return _with_data(state, state.girls, (e for e in state.data_entries if e.id != action.entry_id))

    return state


Listener = Callable[[AppState], None]


class AppStore:
    """Holds the app state for one client and keeps it in step with the API."""

    def __init__(self, api: CpnApiClient, state: AppState | None = None):
        self.api = api
        self._state = state or AppState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        self._state = app_reducer(self._state, action)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def load(self, resolver: SessionResolver | None = None) -> AppState:
        """
        Resolve the session, then fetch girls and entries.

        Always ends with ``is_loading=False``: a missing session, a 401, a
        transport error or a body that does not decode loads empty collections
        instead of raising.
        """
        if resolver is not None:
            try:
                await resolver.get_or_create_session()
            except SessionError as e:
                logger.error("session_initialization_failed", error=str(e))

        try:
            girls = await self.api.list_girls()
            entries = await self.api.list_data_entries()
        except ApiError as e:
            if e.status_code == 401:
                logger.info("no_session_found_loading_empty_data")
            else:
                logger.error("initial_load_failed", status=e.status_code, error=e.message)
            return self.dispatch(LoadData(girls=(), data_entries=()))
        except (httpx.HTTPError, ValidationError) as e:
            logger.error("initial_load_failed", error=str(e))
            return self.dispatch(LoadData(girls=(), data_entries=()))

        return self.dispatch(LoadData(girls=tuple(girls), data_entries=tuple(entries)))

    # ------------------------------------------------------------------
    # Girls
    # ------------------------------------------------------------------

    async def add_girl(self, data: GirlCreate | dict[str, Any]) -> Girl:
        """Create a girl remotely and add it. Errors propagate to the caller."""
        try:
            girl = await self.api.create_girl(data)
        except (ApiError, httpx.HTTPError, ValidationError) as e:
            logger.error("add_girl_failed", error=str(e))
            raise
        self.dispatch(AddGirl(girl))
        return girl

    async def update_girl(self, girl_id: str, updates: GirlUpdate | dict[str, Any]) -> Girl | None:
        try:
            girl = await self.api.update_girl(girl_id, updates)
        except (ApiError, httpx.HTTPError, ValidationError) as e:
            logger.error("update_girl_failed", girl_id=girl_id, error=str(e))
            return None
        self.dispatch(UpdateGirl(girl))
        return girl

    async def delete_girl(self, girl_id: str) -> bool:
        try:
            await self.api.delete_girl(girl_id)
        except (ApiError, httpx.HTTPError, ValidationError) as e:
            logger.error("delete_girl_failed", girl_id=girl_id, error=str(e))
            return False
        self.dispatch(DeleteGirl(girl_id))
        return True

    def get_girl_by_id(self, girl_id: str) -> Girl | None:
        return next((g for g in self._state.girls if g.id == girl_id), None)

    def get_girl_with_metrics(self, girl_id: str) -> GirlWithMetrics | None:
        return next((g for g in self._state.girls_with_metrics if g.id == girl_id), None)

    # ------------------------------------------------------------------
    # Data entries
    # ------------------------------------------------------------------

    async def add_data_entry(self, data: DataEntryCreate | dict[str, Any]) -> DataEntry:
        """Create an entry remotely and add it. Errors propagate to the caller."""
        try:
            entry = await self.api.create_data_entry(data)
        except (ApiError, httpx.HTTPError, ValidationError) as e:
            logger.error("add_data_entry_failed", error=str(e))
            raise
        self.dispatch(AddDataEntry(entry))
        return entry

    async def update_data_entry(
        self, entry_id: str, updates: DataEntryUpdate | dict[str, Any]
    ) -> DataEntry | None:
        try:
            entry = await self.api.update_data_entry(entry_id, updates)
        except (ApiError, httpx.HTTPError, ValidationError) as e:
            logger.error("update_data_entry_failed", entry_id=entry_id, error=str(e))
            return None
        self.dispatch(UpdateDataEntry(entry))
        return entry

    async def delete_data_entry(self, entry_id: str) -> bool:
        try:
            await self.api.delete_data_entry(entry_id)
        except (ApiError, httpx.HTTPError, ValidationError) as e:
            logger.error("delete_data_entry_failed", entry_id=entry_id, error=str(e))
            return False
        self.dispatch(DeleteDataEntry(entry_id))
        return True

    def get_entries_by_girl_id(self, girl_id: str) -> list[DataEntry]:
        """A girl's entries, newest date first."""
        entries = [e for e in self._state.data_entries if e.girl_id == girl_id]
        return sorted(entries, key=lambda e: e.date, reverse=True)
