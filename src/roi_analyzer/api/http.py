# src/roi_analyzer/api/http.py
from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, HTTPException

from roi_analyzer.adapters.config import config
from roi_analyzer.adapters.logging_utils import get_logger
from roi_analyzer.adapters.storage import build_key_value_store
from roi_analyzer.analysis.finance import compute
from roi_analyzer.analysis.report import format_report
from roi_analyzer.domain.property import InputSnapshot
from roi_analyzer.repos.scenarios_repo import ScenarioStore
from roi_analyzer.services.validation import parse_input
from .schemas import MetricsResponse, ReportResponse, ScenarioCreate, ScenarioSummary, ScenarioUpdate

logger = get_logger(__name__)

app = FastAPI(title="Multifamily ROI Analyzer")


@lru_cache(maxsize=1)
def get_store() -> ScenarioStore:
    """
    One store per process, built from config on first use.
    Tests swap it out via app.dependency_overrides.
    """
    logger.info("scenario_store_init", extra={"context": {"backend": config.STORE_BACKEND}})
    return ScenarioStore(build_key_value_store(config), config.SCENARIOS_KEY)


def _not_found(scenario_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"scenario {scenario_id} not found")


def _require_persisted(store: ScenarioStore) -> None:
    # the change is only held in memory; the client must not treat it as saved
    if store.diverged:
        raise HTTPException(status_code=503, detail="scenario storage write failed; change not persisted")


# -----------------------------
# Analysis
# -----------------------------

@app.get("/defaults")
def defaults() -> dict[str, Any]:
    return InputSnapshot().to_record()


@app.post("/compute", response_model=MetricsResponse)
def compute_endpoint(payload: dict[str, Any]) -> MetricsResponse:
    snapshot = parse_input(payload)
    metrics = compute(snapshot)
    return MetricsResponse(management_fee=snapshot.management_fee, **metrics.as_dict())


@app.post("/report", response_model=ReportResponse)
def report_endpoint(payload: dict[str, Any]) -> ReportResponse:
    snapshot = parse_input(payload)
    return ReportResponse(report=format_report(snapshot, generated_at=datetime.now(timezone.utc)))


# -----------------------------
# Scenarios
# -----------------------------

@app.get("/scenarios", response_model=list[ScenarioSummary])
def list_scenarios(store: ScenarioStore = Depends(get_store)) -> list[ScenarioSummary]:
    return [ScenarioSummary(id=s.id, name=s.name, created_at=s.created_at) for s in store.all()]


@app.post("/scenarios", status_code=201)
def create_scenario(body: ScenarioCreate, store: ScenarioStore = Depends(get_store)) -> dict[str, Any]:
    scenario = store.save_new(body.name, parse_input(body.data))
    _require_persisted(store)
    return scenario.to_record()


@app.get("/scenarios/{scenario_id}")
def get_scenario(scenario_id: int, store: ScenarioStore = Depends(get_store)) -> dict[str, Any]:
    scenario = store.find(scenario_id)
    if scenario is None:
        raise _not_found(scenario_id)
    return scenario.to_record()


@app.put("/scenarios/{scenario_id}")
def update_scenario(
    scenario_id: int,
    body: ScenarioUpdate,
    store: ScenarioStore = Depends(get_store),
) -> dict[str, Any]:
    if store.find(scenario_id) is None:
        raise _not_found(scenario_id)
    if body.data is not None:
        store.update(scenario_id, parse_input(body.data))
    if body.name is not None:
        store.rename(scenario_id, body.name)
    _require_persisted(store)
    scenario = store.find(scenario_id)
    if scenario is None:
        raise _not_found(scenario_id)
    return scenario.to_record()


@app.delete("/scenarios/{scenario_id}", status_code=204)
def delete_scenario(scenario_id: int, store: ScenarioStore = Depends(get_store)) -> None:
    if not store.delete(scenario_id):
        raise _not_found(scenario_id)
    _require_persisted(store)
