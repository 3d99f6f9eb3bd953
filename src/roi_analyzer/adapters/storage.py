from roi_analyzer.adapters.config import AppConfig
from roi_analyzer.adapters.file_store import JsonFileKeyValueStore
from roi_analyzer.adapters.memory_store import InMemoryKeyValueStore
from roi_analyzer.adapters.sql_store import SqlKeyValueStore
from roi_analyzer.domain.ports import KeyValueStore


def build_key_value_store(cfg: AppConfig) -> KeyValueStore:
    if cfg.STORE_BACKEND == "memory":
        return InMemoryKeyValueStore(max_bytes=cfg.STORE_MAX_BYTES)
    if cfg.STORE_BACKEND == "sql":
        return SqlKeyValueStore(cfg.DB_URI)
    return JsonFileKeyValueStore(cfg.STORE_PATH)
