import json

import pytest
from sqlmodel import Session

from roi_analyzer.adapters.config import AppConfig
from roi_analyzer.adapters.file_store import JsonFileKeyValueStore
from roi_analyzer.adapters.memory_store import InMemoryKeyValueStore
from roi_analyzer.adapters.sql_store import KeyValueRow, SqlKeyValueStore
from roi_analyzer.adapters.storage import build_key_value_store
from roi_analyzer.domain.ports import StorageError, StorageQuotaExceeded
from roi_analyzer.repos.scenarios_repo import ScenarioStore
from tests.fixtures.snapshots import fourplex_example


@pytest.fixture(params=["memory", "file", "sql"])
def kv(request, tmp_path):
    if request.param == "memory":
        return InMemoryKeyValueStore()
    if request.param == "file":
        return JsonFileKeyValueStore(tmp_path / "nested" / "store.json")
    return SqlKeyValueStore(f"sqlite:///{tmp_path / 'store.db'}")


def test_backend_get_set_replace_delete(kv):
    assert kv.get("k") is None

    kv.set("k", "one")
    assert kv.get("k") == "one"

    kv.set("k", "two")
    kv.set("other", "x")
    assert kv.get("k") == "two"
    assert kv.get("other") == "x"

    kv.delete("k")
    assert kv.get("k") is None
    assert kv.get("other") == "x"
    kv.delete("missing")


def test_scenario_store_works_over_every_backend(kv, captured_logger):
    store = ScenarioStore(kv, "scenarios", logger=captured_logger)
    saved = store.save_new("A", fourplex_example())

    reopened = ScenarioStore(kv, "scenarios", logger=captured_logger)
    assert reopened.find(saved.id).data == fourplex_example()
    assert reopened.diverged is False


def test_memory_quota_counts_other_keys():
    kv = InMemoryKeyValueStore(max_bytes=10)
    kv.set("a", "12345")
    kv.set("a", "1234567890")  # replacing a key only counts the new value

    with pytest.raises(StorageQuotaExceeded):
        kv.set("b", "1")
    assert kv.get("b") is None


def test_file_store_leaves_no_temp_files(tmp_path):
    path = tmp_path / "store.json"
    kv = JsonFileKeyValueStore(path)
    kv.set("k", "v")
    kv.set("k", "w")

    assert json.loads(path.read_text()) == {"k": "w"}
    assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_file_store_corrupt_file_raises_storage_error(tmp_path, content):
    path = tmp_path / "store.json"
    path.write_text(content)

    with pytest.raises(StorageError):
        JsonFileKeyValueStore(path).get("k")


def test_scenario_store_over_corrupt_file_degrades_to_empty(tmp_path, captured_logger):
    path = tmp_path / "store.json"
    path.write_text("{broken")

    store = ScenarioStore(JsonFileKeyValueStore(path), "scenarios", logger=captured_logger)

    assert store.all() == []
    assert [r.getMessage() for r in captured_logger.records] == ["scenarios_read_failed"]

    # the first write moves the corrupt file aside and starts a fresh one
    saved = store.save_new("A", fourplex_example())
    assert store.diverged is False
    assert (tmp_path / "store.json.corrupt").read_text() == "{broken"

    reopened = ScenarioStore(JsonFileKeyValueStore(path), "scenarios", logger=captured_logger)
    assert [s.id for s in reopened.all()] == [saved.id]


def test_scenario_store_over_non_utf8_file_degrades_to_empty(tmp_path, captured_logger):
    path = tmp_path / "store.json"
    path.write_bytes(b'{"scenarios": "\xff\xfe broken"}')

    with pytest.raises(StorageError):
        JsonFileKeyValueStore(path).get("scenarios")

    store = ScenarioStore(JsonFileKeyValueStore(path), "scenarios", logger=captured_logger)
    assert store.all() == []
    assert [r.getMessage() for r in captured_logger.records] == ["scenarios_read_failed"]

    store.save_new("A", fourplex_example())
    assert store.diverged is False
    assert (tmp_path / "store.json.corrupt").exists()


def test_file_store_unreadable_path_still_fails_writes(tmp_path):
    # a directory is not a corrupt file, so nothing is moved aside
    kv = JsonFileKeyValueStore(tmp_path)
    with pytest.raises(StorageError):
        kv.set("k", "v")
    assert tmp_path.is_dir()


def test_sql_store_stamps_timezone_aware_update_time(tmp_path):
    kv = SqlKeyValueStore(f"sqlite:///{tmp_path / 'store.db'}")
    kv.set("k", "one")
    kv.set("k", "two")

    with Session(kv.engine) as session:
        row = session.get(KeyValueRow, "k")
        assert row.value == "two"
        assert row.updated_at is not None


def test_empty_file_reads_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("")
    assert JsonFileKeyValueStore(path).get("k") is None


def test_build_key_value_store_picks_backend(tmp_path):
    mem = build_key_value_store(AppConfig(STORE_BACKEND="memory", STORE_MAX_BYTES=100))
    assert isinstance(mem, InMemoryKeyValueStore)
    assert mem.max_bytes == 100

    f = build_key_value_store(AppConfig(STORE_BACKEND="file", STORE_PATH=str(tmp_path / "s.json")))
    assert isinstance(f, JsonFileKeyValueStore)

    sql = build_key_value_store(AppConfig(STORE_BACKEND="SQL", DB_URI=f"sqlite:///{tmp_path / 's.db'}"))
    assert isinstance(sql, SqlKeyValueStore)


def test_config_reads_env(monkeypatch):
    monkeypatch.setenv("ROI_STORE_BACKEND", "memory")
    monkeypatch.setenv("ROI_SCENARIOS_KEY", "custom.key")
    monkeypatch.setenv("ROI_LOG_LEVEL", "debug")

    cfg = AppConfig()
    assert cfg.STORE_BACKEND == "memory"
    assert cfg.SCENARIOS_KEY == "custom.key"
    assert cfg.LOG_LEVEL == "DEBUG"


def test_config_rejects_non_positive_quota():
    with pytest.raises(ValueError):
        AppConfig(STORE_MAX_BYTES=0)
