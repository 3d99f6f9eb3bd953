# src/roi_analyzer/api/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from roi_analyzer.domain.metrics import DscrStatus
from roi_analyzer.domain.property import ManagementFee


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --------------------------------------------
# Analysis
# --------------------------------------------

class MetricsResponse(_CamelModel):
    """
    Wire shape of MetricsSnapshot plus the active management fee
    (tagged by mode) that produced it.
    """
    management_fee: ManagementFee

    unit_count: int
    total_monthly_rent: float
    potential_gross_income: float
    vacancy_loss: float
    effective_gross_income: float

    property_tax_annual: float
    management_annual: float
    total_operating_expenses: float

    loan_amount: float
    monthly_rate: float
    number_of_payments: float
    monthly_mortgage: float
    annual_debt_service: float

    net_operating_income: float
    annual_cash_flow: float
    monthly_cash_flow: float
    total_initial_investment: float
    cash_on_cash_roi: float
    cap_rate: float
    gross_rent_multiplier: float
    opex_ratio: float
    dscr: float
    dscr_status: DscrStatus


class ReportResponse(BaseModel):
    report: str


# --------------------------------------------
# Scenarios
# --------------------------------------------

class ScenarioCreate(_CamelModel):
    """
    `data` stays a raw dict so it goes through the same lenient
    coercion as any form payload.
    """
    name: str
    data: dict[str, Any] = {}


class ScenarioUpdate(_CamelModel):
    name: str | None = None
    data: dict[str, Any] | None = None


class ScenarioSummary(_CamelModel):
    id: int
    name: str
    created_at: datetime
