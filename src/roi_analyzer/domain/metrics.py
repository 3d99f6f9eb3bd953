from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Literal

# Lender DSCR bands. Anything under the minimum is typically not financeable.
DSCR_LENDER_MIN = 1.20
DSCR_STRONG = 1.35

DscrStatus = Literal["N/A", "Below Lender Min.", "Borderline", "Strong"]


def dscr_status(dscr: float) -> DscrStatus:
    """
    Bucket a DSCR value:
      0            -> "N/A" (no debt, or nothing to cover)
      < 1.20       -> "Below Lender Min."
      [1.20, 1.35) -> "Borderline"
      >= 1.35      -> "Strong"
    """
    if dscr == 0:
        return "N/A"
    if dscr < DSCR_LENDER_MIN:
        return "Below Lender Min."
    if dscr < DSCR_STRONG:
        return "Borderline"
    return "Strong"


@dataclass(frozen=True)
class MetricsSnapshot:
    # income (annual unless noted)
    unit_count: int
    total_monthly_rent: float
    potential_gross_income: float
    vacancy_loss: float
    effective_gross_income: float

    # expenses (annual)
    property_tax_annual: float
    management_annual: float
    total_operating_expenses: float

    # financing
    loan_amount: float
    monthly_rate: float
    number_of_payments: float
    monthly_mortgage: float
    annual_debt_service: float

    # performance
    net_operating_income: float
    annual_cash_flow: float
    monthly_cash_flow: float
    total_initial_investment: float
    cash_on_cash_roi: float      # percent
    cap_rate: float              # percent
    gross_rent_multiplier: float
    opex_ratio: float            # percent of PGI
    dscr: float
    dscr_status: DscrStatus

    def as_dict(self) -> dict:
        return asdict(self)
