from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError

from roi_analyzer.adapters.config import config
from roi_analyzer.adapters.logging_utils import get_logger
from roi_analyzer.domain.ports import KeyValueStore, ScenarioRepository, StorageError
from roi_analyzer.domain.property import InputSnapshot
from roi_analyzer.domain.scenario import Scenario


class ScenarioStore(ScenarioRepository):
    """
    CRUD over named InputSnapshots kept as ONE JSON array under one key.

    - The collection is read once on construction (and on explicit load_all()).
    - Every mutation rewrites the whole collection.
    - Storage faults never reach the caller: reads degrade to an empty
      collection, failed writes keep the in-memory change and set `diverged`.
    - Records that fail to parse are kept as raw JSON and written back
      unchanged after the parsed ones, so a save never erases them.

    Single-writer only: two stores over the same key will overwrite each other.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        key: str | None = None,
        *,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.backend = backend
        self.key = key or config.SCENARIOS_KEY
        self.logger = logger or get_logger(__name__)
        self._clock = clock
        self._scenarios: list[Scenario] = []
        self._unparsed: list[Any] = []
        self._last_id = 0
        self.diverged = False
        self.load_all()

    # -----------------------------
    # reads
    # -----------------------------

    def load_all(self) -> list[Scenario]:
        self._scenarios, self._unparsed = self._read()
        raw_ids = [
            item["id"] for item in self._unparsed
            if isinstance(item, dict) and isinstance(item.get("id"), int) and not isinstance(item["id"], bool)
        ]
        self._last_id = max([self._last_id] + [s.id for s in self._scenarios] + raw_ids)
        return self.all()

    def all(self) -> list[Scenario]:
        return [s.model_copy(deep=True) for s in self._scenarios]

    def find(self, scenario_id: int) -> Scenario | None:
        idx = self._index_of(scenario_id)
        if idx is None:
            return None
        return self._scenarios[idx].model_copy(deep=True)

    # -----------------------------
    # mutations
    # -----------------------------

    def save_new(self, name: str, data: InputSnapshot) -> Scenario:
        now = self._clock()
        scenario = Scenario(
            id=self._next_id(now),
            name=name,
            created_at=datetime.fromtimestamp(now, tz=timezone.utc),
            data=data.model_copy(deep=True),
        )
        self._scenarios.append(scenario)
        self._persist("save_new", scenario.id)
        return scenario.model_copy(deep=True)

    def update(self, scenario_id: int, data: InputSnapshot) -> bool:
        idx = self._index_of(scenario_id)
        if idx is None:
            return False
        self._scenarios[idx] = self._scenarios[idx].model_copy(
            update={"data": data.model_copy(deep=True)}
        )
        self._persist("update", scenario_id)
        return True

    def rename(self, scenario_id: int, name: str) -> bool:
        idx = self._index_of(scenario_id)
        if idx is None:
            return False
        self._scenarios[idx] = self._scenarios[idx].model_copy(update={"name": name})
        self._persist("rename", scenario_id)
        return True

    def delete(self, scenario_id: int) -> bool:
        idx = self._index_of(scenario_id)
        if idx is None:
            return False
        del self._scenarios[idx]
        self._persist("delete", scenario_id)
        return True

    # -----------------------------
    # internals
    # -----------------------------

    def _index_of(self, scenario_id: int) -> int | None:
        for i, s in enumerate(self._scenarios):
            if s.id == scenario_id:
                return i
        return None

    def _next_id(self, now: float) -> int:
        # time-derived, but bumped past the last id so same-millisecond saves never collide
        new_id = max(int(now * 1000), self._last_id + 1)
        self._last_id = new_id
        return new_id

    def _warn(self, event: str, **context: Any) -> None:
        self.logger.warning(event, extra={"context": {"key": self.key, **context}})

    def _read(self) -> tuple[list[Scenario], list[Any]]:
        try:
            raw = self.backend.get(self.key)
        except StorageError as e:
            self._warn("scenarios_read_failed", error=str(e))
            return [], []

        if raw is None:
            return [], []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            self._warn("scenarios_corrupt", error=str(e))
            return [], []

        if not isinstance(items, list):
            self._warn("scenarios_corrupt", error=f"expected a list, got {type(items).__name__}")
            return [], []

        out: list[Scenario] = []
        unparsed: list[Any] = []
        seen: set[int] = set()
        for pos, item in enumerate(items):
            if not isinstance(item, dict):
                self._warn("scenario_record_skipped", position=pos, error="not an object")
                unparsed.append(item)
                continue
            try:
                scenario = Scenario.model_validate(item)
            except ValidationError as e:
                self._warn("scenario_record_skipped", position=pos, error=str(e))
                unparsed.append(item)
                continue
            if scenario.id in seen:
                self._warn("scenario_record_skipped", position=pos, error=f"duplicate id {scenario.id}")
                unparsed.append(item)
                continue
            seen.add(scenario.id)
            out.append(scenario)
        return out, unparsed

    def _persist(self, op: str, scenario_id: int) -> bool:
        payload = json.dumps([s.to_record() for s in self._scenarios] + self._unparsed)
        try:
            self.backend.set(self.key, payload)
        except StorageError as e:
            self.diverged = True
            self.logger.error(
                "scenarios_write_failed",
                extra={"context": {"key": self.key, "op": op, "scenario_id": scenario_id, "error": str(e)}},
            )
            return False
        self.diverged = False
        return True
