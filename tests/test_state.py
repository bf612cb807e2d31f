"""
Unit tests for the persistent key-value stores.
"""

import json

import pytest

from prompt_config.common.exceptions import StoreError
from prompt_config.common.state import JsonFileStore, KeyValueStore, MemoryStore


@pytest.fixture(params=["memory", "file"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    return JsonFileStore(tmp_path / "nested" / "state.json")


def test_stores_satisfy_protocol(tmp_path):
    assert isinstance(MemoryStore(), KeyValueStore)
    assert isinstance(JsonFileStore(tmp_path / "state.json"), KeyValueStore)


def test_absent_keys_are_omitted(any_store):
    assert any_store.get(["config_cache", "config_cache_time"]) == {}


def test_set_overwrites_all_given_keys(any_store):
    any_store.set({"config_cache": {"a": 1}, "config_cache_time": 0})
    any_store.set({"config_cache": {"a": 2}, "config_cache_time": 5})

    assert any_store.get(["config_cache", "config_cache_time"]) == {
        "config_cache": {"a": 2},
        "config_cache_time": 5,
    }


def test_set_keeps_unrelated_keys(any_store):
    any_store.set({"other": "x"})
    any_store.set({"config_cache": [1, 2]})

    assert any_store.get(["other", "config_cache"]) == {"other": "x", "config_cache": [1, 2]}


def test_delete(any_store):
    any_store.set({"config_cache": None, "config_cache_time": 1, "other": "x"})
    any_store.delete(["config_cache", "config_cache_time", "missing"])

    assert any_store.get(["config_cache", "config_cache_time", "other"]) == {"other": "x"}


class TestJsonFileStore:
    """File-specific behaviour."""

    def test_writes_single_json_document(self, tmp_path):
        path = tmp_path / "state.json"
        JsonFileStore(path).set({"config_cache": {"a": 1}, "config_cache_time": 42})

        assert json.loads(path.read_text(encoding="utf-8")) == {
            "config_cache": {"a": 1},
            "config_cache_time": 42,
        }
        assert not path.with_suffix(".json.tmp").exists()

    def test_survives_new_instance(self, tmp_path):
        path = tmp_path / "state.json"
        JsonFileStore(path).set({"config_cache": "payload"})

        assert JsonFileStore(path).get(["config_cache"]) == {"config_cache": "payload"}

    def test_corrupt_file_raises_store_error(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{broken", encoding="utf-8")

        with pytest.raises(StoreError) as exc_info:
            JsonFileStore(path).get(["config_cache"])
        assert exc_info.value.path == str(path)

    def test_non_object_file_raises_store_error(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        with pytest.raises(StoreError):
            JsonFileStore(path).get(["config_cache"])

    def test_set_replaces_corrupt_file(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{broken", encoding="utf-8")
        store = JsonFileStore(path)

        store.set({"config_cache": 1})

        assert store.get(["config_cache"]) == {"config_cache": 1}

    def test_writes_leave_no_temp_files(self, tmp_path):
        path = tmp_path / "state.json"
        store = JsonFileStore(path)

        for i in range(3):
            store.set({"config_cache_time": i})

        assert list(tmp_path.glob("*.tmp")) == []
        assert store.get(["config_cache_time"]) == {"config_cache_time": 2}

    def test_failed_write_cleans_up_temp_file(self, tmp_path, monkeypatch):
        path = tmp_path / "state.json"
        store = JsonFileStore(path)
        store.set({"config_cache": "old"})

        def failing_replace(src, dst):
            raise OSError("read-only filesystem")

        with monkeypatch.context() as patched:
            patched.setattr("prompt_config.common.state.os.replace", failing_replace)
            with pytest.raises(StoreError):
                store.set({"config_cache": "new"})

        assert list(tmp_path.glob("*.tmp")) == []
        assert store.get(["config_cache"]) == {"config_cache": "old"}
