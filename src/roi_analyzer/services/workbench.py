from __future__ import annotations

from datetime import datetime
from typing import Any

from roi_analyzer.adapters.logging_utils import get_logger
from roi_analyzer.analysis.finance import compute
from roi_analyzer.analysis.report import format_report
from roi_analyzer.domain.metrics import MetricsSnapshot
from roi_analyzer.domain.property import (
    NUMERIC_FIELDS,
    FlatFee,
    InputSnapshot,
    ManagementMode,
    PercentFee,
    Unit,
)
from roi_analyzer.domain.scenario import Scenario
from roi_analyzer.repos.scenarios_repo import ScenarioStore

logger = get_logger(__name__)

_TEXT_FIELDS = ("address", "listing_id")
_UNIT_FIELDS = ("bedrooms", "bathrooms", "rent")


class AnalyzerSession:
    """
    The live form: one editable InputSnapshot, the (ephemeral) selected
    scenario, and the store it saves to.

    Metrics are never cached; `metrics` recomputes from the current input.
    """

    def __init__(self, store: ScenarioStore, current: InputSnapshot | None = None) -> None:
        self.store = store
        self.current = current.model_copy(deep=True) if current is not None else InputSnapshot()
        self.selected_id: int | None = None

    # -----------------------------
    # outputs
    # -----------------------------

    @property
    def metrics(self) -> MetricsSnapshot:
        return compute(self.current)

    def report(self, generated_at: datetime | None = None) -> str:
        return format_report(self.current, self.metrics, generated_at=generated_at)

    @property
    def selected(self) -> Scenario | None:
        if self.selected_id is None:
            return None
        return self.store.find(self.selected_id)

    # -----------------------------
    # field edits
    # -----------------------------

    def set_field(self, name: str, value: Any) -> None:
        if name not in NUMERIC_FIELDS and name not in _TEXT_FIELDS:
            raise KeyError(f"unknown input field: {name}")
        # validate through the model so the same coercion applies as on load
        data = self.current.model_dump()
        data[name] = value
        self.current = InputSnapshot.model_validate(data)

    def set_management_mode(self, mode: ManagementMode) -> None:
        """Switch the active fee mode. Both stored values are kept."""
        self.current = self.current.model_copy(
            update={"management_mode": "flat" if mode == "flat" else "percent"}
        )

    def set_management_fee(self, fee: PercentFee | FlatFee) -> None:
        self.current = self.current.with_management_fee(fee)

    # -----------------------------
    # rent roll
    # -----------------------------

    def add_unit(self, bedrooms: Any = 1, bathrooms: Any = 1, rent: Any = 0) -> Unit:
        next_id = max((u.id for u in self.current.units), default=0) + 1
        unit = Unit(id=next_id, bedrooms=bedrooms, bathrooms=bathrooms, rent=rent)
        self.current.units.append(unit)
        return unit.model_copy()

    def update_unit(self, unit_id: int, **fields: Any) -> bool:
        unknown = set(fields) - set(_UNIT_FIELDS)
        if unknown:
            raise KeyError(f"unknown unit field(s): {', '.join(sorted(unknown))}")
        for i, u in enumerate(self.current.units):
            if u.id == unit_id:
                self.current.units[i] = Unit.model_validate({**u.model_dump(), **fields})
                return True
        return False

    def remove_unit(self, unit_id: int) -> bool:
        before = len(self.current.units)
        self.current.units = [u for u in self.current.units if u.id != unit_id]
        return len(self.current.units) != before

    # -----------------------------
    # scenarios
    # -----------------------------

    def new_analysis(self) -> None:
        self.current = InputSnapshot()
        self.selected_id = None

    def select(self, scenario_id: int) -> bool:
        scenario = self.store.find(scenario_id)
        if scenario is None:
            return False
        self.current = scenario.data.model_copy(deep=True)
        self.selected_id = scenario.id
        return True

    def save_as_new(self, name: str) -> Scenario:
        scenario = self.store.save_new(name, self.current)
        self.selected_id = scenario.id
        logger.info("scenario_saved", extra={"context": {"scenario_id": scenario.id, "scenario_name": name}})
        return scenario

    def save(self, name: str | None = None) -> Scenario | None:
        """
        Update the selected scenario in place, or save a new one when nothing
        is selected (which needs a name). Returns the saved scenario.
        """
        if self.selected_id is not None:
            if self.store.update(self.selected_id, self.current):
                if name:
                    self.store.rename(self.selected_id, name)
                return self.store.find(self.selected_id)
            # selected scenario is gone from the store
            self.selected_id = None
        if not name:
            return None
        return self.save_as_new(name)

    def delete(self, scenario_id: int) -> bool:
        removed = self.store.delete(scenario_id)
        if removed and self.selected_id == scenario_id:
            self.selected_id = None
        return removed
