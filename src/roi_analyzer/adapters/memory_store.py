from roi_analyzer.domain.ports import KeyValueStore, StorageQuotaExceeded


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store. `max_bytes` caps the total size of all values,
    the same way browser storage rejects writes past its quota.
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self.max_bytes = max_bytes

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            others = sum(len(v.encode("utf-8")) for k, v in self._items.items() if k != key)
            size = others + len(value.encode("utf-8"))
            if size > self.max_bytes:
                raise StorageQuotaExceeded(
                    f"write of {size} bytes exceeds quota of {self.max_bytes} bytes"
                )
        self._items[key] = value

    def delete(self, key: str) -> None:
        self._items.pop(key, None)
