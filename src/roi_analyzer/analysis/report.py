from __future__ import annotations

from datetime import datetime, timezone

from roi_analyzer.analysis.finance import compute
from roi_analyzer.domain.metrics import MetricsSnapshot
from roi_analyzer.domain.property import InputSnapshot, Unit

REPORT_TITLE = "MULTIFAMILY ROI ANALYSIS"
_RULE = "=" * 48
_SECTION_RULE = "-" * 48


def _money(v: float) -> str:
    if v < 0:
        return f"-${abs(v):,.2f}"
    return f"${v:,.2f}"


def _pct(v: float) -> str:
    return f"{v:.2f}%"


def _num(v: float) -> str:
    return f"{v:g}"


def _line(label: str, value: str) -> str:
    return f"  {label + ':':<28}{value}"


def _section(title: str, rows: list[tuple[str, str]]) -> list[str]:
    out = ["", title.upper(), _SECTION_RULE]
    out.extend(_line(label, value) for label, value in rows)
    return out


def _unit_row(index: int, unit: Unit) -> tuple[str, str]:
    return (
        f"Unit {index}",
        f"{_num(unit.bedrooms)} bd / {_num(unit.bathrooms)} ba @ {_money(unit.rent)}/mo",
    )


def format_report(
    snapshot: InputSnapshot,
    metrics: MetricsSnapshot | None = None,
    generated_at: datetime | None = None,
) -> str:
    """
    Render the analysis as a fixed plain-text template.

    Section order (kept stable so the same inputs always give the same text):
      Property & Assumptions, Acquisition, Financing, Income, Expenses,
      Debt & Cash Flow, Key Performance Indicators, Unit Mix
    """
    m = metrics if metrics is not None else compute(snapshot)
    ts = (generated_at or datetime.now(timezone.utc)).astimezone(timezone.utc)

    fee = snapshot.management_fee
    if fee.mode == "flat":
        mgmt_desc = f"Flat {_money(fee.value)}/yr"
    else:
        mgmt_desc = f"{_pct(fee.value)} of PGI"

    lines = [_RULE, REPORT_TITLE, f"Generated: {ts.strftime('%Y-%m-%d %H:%M UTC')}", _RULE]

    lines += _section("Property & Assumptions", [
        ("Address", snapshot.address or "-"),
        ("Listing ID", snapshot.listing_id or "-"),
        ("Units", str(m.unit_count)),
        ("Vacancy Rate", _pct(snapshot.vacancy_rate)),
        ("Property Tax Rate", _pct(snapshot.property_tax_rate)),
        ("Management", mgmt_desc),
    ])
    lines += _section("Acquisition", [
        ("Purchase Price", _money(snapshot.purchase_price)),
        ("Down Payment", _money(snapshot.down_payment)),
        ("Closing Costs", _money(snapshot.closing_costs)),
        ("Initial CapEx", _money(snapshot.initial_capex)),
        ("Total Initial Investment", _money(m.total_initial_investment)),
    ])
    lines += _section("Financing", [
        ("Loan Amount", _money(m.loan_amount)),
        ("Interest Rate", _pct(snapshot.interest_rate)),
        ("Loan Term", f"{_num(snapshot.loan_term)} years"),
        ("Monthly Mortgage", _money(m.monthly_mortgage)),
    ])
    lines += _section("Income", [
        ("Total Monthly Rent", _money(m.total_monthly_rent)),
        ("Potential Gross Income", _money(m.potential_gross_income)),
        ("Vacancy Loss", _money(m.vacancy_loss)),
        ("Effective Gross Income", _money(m.effective_gross_income)),
    ])
    lines += _section("Expenses", [
        ("Management", _money(m.management_annual)),
        ("Maintenance", _money(snapshot.maintenance)),
        ("Property Tax", _money(m.property_tax_annual)),
        ("Insurance", _money(snapshot.insurance)),
        ("Other / HOA", _money(snapshot.other_expenses)),
        ("Total Operating Expenses", _money(m.total_operating_expenses)),
    ])
    lines += _section("Debt & Cash Flow", [
        ("Net Operating Income", _money(m.net_operating_income)),
        ("Annual Debt Service", _money(m.annual_debt_service)),
        ("Annual Cash Flow", _money(m.annual_cash_flow)),
        ("Monthly Cash Flow", _money(m.monthly_cash_flow)),
    ])
    lines += _section("Key Performance Indicators", [
        ("Cash-on-Cash ROI", _pct(m.cash_on_cash_roi)),
        ("Cap Rate", _pct(m.cap_rate)),
        ("DSCR", f"{m.dscr:.2f} ({m.dscr_status})"),
        ("Gross Rent Multiplier", f"{m.gross_rent_multiplier:.2f}"),
        ("OpEx Ratio", _pct(m.opex_ratio)),
    ])

    unit_rows = [_unit_row(i, u) for i, u in enumerate(snapshot.units, start=1)]
    if not unit_rows:
        unit_rows = [("Units", "none")]
    lines += _section("Unit Mix", unit_rows)

    lines.append(_RULE)
    return "\n".join(lines) + "\n"
