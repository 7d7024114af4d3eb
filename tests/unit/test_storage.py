"""Unit tests for client key/value storage."""

import json

from cpn.client.storage import FileStorage, MemoryStorage


class TestMemoryStorage:
    def test_set_get_remove(self):
        storage = MemoryStorage()
        assert storage.get_item("k") is None
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"
        assert "k" in storage
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_remove_missing_key_is_noop(self):
        MemoryStorage().remove_item("missing")

    def test_initial_items_are_copied(self):
        initial = {"a": "1"}
        storage = MemoryStorage(initial)
        storage.set_item("b", "2")
        assert initial == {"a": "1"}


class TestFileStorage:
    def test_persists_between_instances(self, tmp_path):
        path = tmp_path / "store.json"
        FileStorage(path).set_item("token", "abc")
        assert FileStorage(path).get_item("token") == "abc"
        assert json.loads(path.read_text()) == {"token": "abc"}

    def test_remove_persists(self, tmp_path):
        path = tmp_path / "store.json"
        storage = FileStorage(path)
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.remove_item("a")
        assert json.loads(path.read_text()) == {"b": "2"}

    def test_missing_file_is_empty(self, tmp_path):
        storage = FileStorage(tmp_path / "nested" / "store.json")
        assert storage.get_item("anything") is None
        storage.set_item("k", "v")
        assert (tmp_path / "nested" / "store.json").exists()

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        assert FileStorage(path).get_item("k") is None

    def test_non_object_file_is_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]")
        assert FileStorage(path).get_item("k") is None

    def test_no_temp_files_left_behind(self, tmp_path):
        storage = FileStorage(tmp_path / "store.json")
        for i in range(3):
            storage.set_item(str(i), str(i))
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]
