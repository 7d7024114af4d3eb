"""Unit tests for the client state reducer and store."""

from datetime import date

import pytest

from cpn.client.api import ApiError
from cpn.client.store import (
    AddDataEntry,
    AddGirl,
    AppState,
    AppStore,
    DeleteDataEntry,
    DeleteGirl,
    LoadData,
    SetLoading,
    UpdateDataEntry,
    UpdateGirl,
    app_reducer,
)
from cpn.entries.schemas import DataEntry
from cpn.girls.schemas import Girl


def _girl(girl_id: str, name: str = "Alice", rating: float = 8.0) -> Girl:
    return Girl(id=girl_id, name=name, age=25, nationality="Canadian", rating=rating)


def _entry(entry_id: str, girl_id: str, day: int = 1, spent: float = 100, nuts: int = 2) -> DataEntry:
    return DataEntry(
        id=entry_id,
        girl_id=girl_id,
        date=date(2024, 1, day),
        amount_spent=spent,
        duration_minutes=60,
        number_of_nuts=nuts,
    )


@pytest.fixture
def loaded() -> AppState:
    return app_reducer(
        AppState(),
        LoadData(
            girls=(_girl("g1"), _girl("g2", name="Beth", rating=6.0)),
            data_entries=(_entry("e1", "g1"), _entry("e2", "g2", spent=50, nuts=1)),
        ),
    )


class TestReducer:
    def test_initial_state(self):
        state = AppState()
        assert state.is_loading
        assert state.girls == ()
        assert state.global_stats.total_girls == 0

    def test_load_computes_metrics(self, loaded: AppState):
        assert not loaded.is_loading
        assert loaded.global_stats.total_girls == 2
        assert loaded.global_stats.total_spent == 150
        assert loaded.global_stats.average_rating == 7
        by_id = {g.id: g for g in loaded.girls_with_metrics}
        assert by_id["g1"].metrics.cost_per_nut == 50
        assert by_id["g2"].metrics.cost_per_nut == 50

    def test_set_loading(self, loaded: AppState):
        state = app_reducer(loaded, SetLoading(True))
        assert state.is_loading
        assert state.girls == loaded.girls

    def test_add_girl(self, loaded: AppState):
        state = app_reducer(loaded, AddGirl(_girl("g3", name="Cara")))
        assert [g.id for g in state.girls] == ["g1", "g2", "g3"]
        assert state.global_stats.total_girls == 3
        assert state.girls_with_metrics[-1].metrics.total_entries == 0

    def test_update_girl(self, loaded: AppState):
        state = app_reducer(loaded, UpdateGirl(_girl("g1", name="Alicia", rating=10.0)))
        assert state.girls[0].name == "Alicia"
        assert state.girls_with_metrics[0].name == "Alicia"
        assert state.global_stats.average_rating == 8

    def test_delete_girl_removes_her_entries(self, loaded: AppState):
        state = app_reducer(loaded, DeleteGirl("g1"))
        assert [g.id for g in state.girls] == ["g2"]
        assert [e.id for e in state.data_entries] == ["e2"]
        assert state.global_stats.total_spent == 50

    def test_add_entry_updates_metrics(self, loaded: AppState):
        state = app_reducer(loaded, AddDataEntry(_entry("e3", "g1", day=2, spent=20, nuts=2)))
        g1 = next(g for g in state.girls_with_metrics if g.id == "g1")
        assert g1.metrics.total_spent == 120
        assert g1.metrics.total_nuts == 4
        assert state.global_stats.total_nuts == 5

    def test_update_entry(self, loaded: AppState):
        state = app_reducer(loaded, UpdateDataEntry(_entry("e1", "g1", spent=10, nuts=1)))
        assert state.global_stats.total_spent == 60

    def test_delete_entry(self, loaded: AppState):
        state = app_reducer(loaded, DeleteDataEntry("e2"))
        assert [e.id for e in state.data_entries] == ["e1"]
        assert state.global_stats.total_nuts == 2

    def test_reducer_does_not_mutate(self, loaded: AppState):
        app_reducer(loaded, DeleteGirl("g1"))
        assert len(loaded.girls) == 2

    def test_unknown_action_is_ignored(self, loaded: AppState):
        assert app_reducer(loaded, object()) is loaded  # type: ignore[arg-type]


class FakeApi:
    """Stands in for CpnApiClient with canned responses."""

    def __init__(self, girls=None, entries=None, error: Exception | None = None):
        self.girls = list(girls or [])
        self.entries = list(entries or [])
        self.error = error

    async def list_girls(self):
        if self.error:
            raise self.error
        return self.girls

    async def list_data_entries(self):
        return self.entries

    async def create_girl(self, data):
        if self.error:
            raise self.error
        return _girl("new", name=data["name"])

    async def delete_girl(self, girl_id):
        if self.error:
            raise self.error

    async def update_data_entry(self, entry_id, updates):
        if self.error:
            raise self.error
        return _entry(entry_id, "g1", spent=updates["amountSpent"])


class TestAppStore:
    @pytest.mark.asyncio
    async def test_load(self):
        store = AppStore(FakeApi(girls=[_girl("g1")], entries=[_entry("e1", "g1")]))
        state = await store.load()
        assert not state.is_loading
        assert store.get_girl_with_metrics("g1").metrics.total_entries == 1

    @pytest.mark.asyncio
    async def test_load_without_session_yields_empty_data(self):
        store = AppStore(FakeApi(error=ApiError(401, "No session found")))
        state = await store.load()
        assert not state.is_loading
        assert state.girls == ()

    @pytest.mark.asyncio
    async def test_load_failure_yields_empty_data(self):
        store = AppStore(FakeApi(error=ApiError(500, "Failed to fetch girls")))
        state = await store.load()
        assert not state.is_loading
        assert state.data_entries == ()

    @pytest.mark.asyncio
    async def test_subscribers_notified(self):
        store = AppStore(FakeApi())
        seen: list[AppState] = []
        unsubscribe = store.subscribe(seen.append)
        await store.add_girl({"name": "Dana"})
        unsubscribe()
        await store.add_girl({"name": "Erin"})
        assert len(seen) == 1
        assert seen[0].girls[0].name == "Dana"

    @pytest.mark.asyncio
    async def test_add_girl_propagates_errors(self):
        store = AppStore(FakeApi(error=ApiError(400, "name is required")), state=AppState(is_loading=False))
        with pytest.raises(ApiError):
            await store.add_girl({"name": ""})
        assert store.state.girls == ()

    @pytest.mark.asyncio
    async def test_delete_girl_failure_keeps_state(self):
        state = app_reducer(AppState(), LoadData(girls=(_girl("g1"),), data_entries=()))
        store = AppStore(FakeApi(error=ApiError(404, "Girl not found")), state=state)
        assert await store.delete_girl("g1") is False
        assert store.get_girl_by_id("g1") is not None

    @pytest.mark.asyncio
    async def test_update_entry(self):
        state = app_reducer(AppState(), LoadData(girls=(_girl("g1"),), data_entries=(_entry("e1", "g1"),)))
        store = AppStore(FakeApi(), state=state)
        entry = await store.update_data_entry("e1", {"amountSpent": 5})
        assert entry is not None
        assert store.state.global_stats.total_spent == 5

    def test_entries_by_girl_newest_first(self):
        entries = (_entry("e1", "g1", day=1), _entry("e2", "g1", day=3), _entry("e3", "g2", day=2))
        store = AppStore(FakeApi(), state=app_reducer(AppState(), LoadData(girls=(), data_entries=entries)))
        assert [e.id for e in store.get_entries_by_girl_id("g1")] == ["e2", "e1"]
