# src/roi_analyzer/domain/ports.py
from __future__ import annotations

from typing import Protocol, Sequence

from roi_analyzer.domain.property import InputSnapshot
from roi_analyzer.domain.scenario import Scenario


# ----------------------------
# Storage errors
# ----------------------------

class StorageError(Exception):
    """Raised by a key-value backend when a read or write cannot complete."""


class StorageQuotaExceeded(StorageError):
    """Raised when a write would exceed the backend's size limit."""


# ----------------------------
# Key-value persistence
# ----------------------------

class KeyValueStore(Protocol):
    """
    Single-slot string storage (browser localStorage, a JSON file, a SQL row).

    `set` must replace the whole value atomically.
    """

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


# ----------------------------
# Scenario persistence
# ----------------------------

class ScenarioRepository(Protocol):
    def load_all(self) -> list[Scenario]:
        ...

    def save_new(self, name: str, data: InputSnapshot) -> Scenario:
        ...

    def update(self, scenario_id: int, data: InputSnapshot) -> bool:
        ...

    def delete(self, scenario_id: int) -> bool:
        ...

    def find(self, scenario_id: int) -> Scenario | None:
        ...

    def all(self) -> Sequence[Scenario]:
        ...
