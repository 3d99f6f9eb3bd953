from roi_analyzer.domain.metrics import MetricsSnapshot, dscr_status
from roi_analyzer.domain.property import FlatFee, InputSnapshot


def _monthly_mortgage_payment(principal: float, monthly_rate: float, n_payments: float) -> float:
    """
    Standard fixed-rate amortization formula:
    M = P * [ r(1+r)^n / ((1+r)^n - 1) ]
    P = loan principal
    r = monthly interest rate
    n = number of payments (months)

    No loan (P <= 0) or no payments (n <= 0) means no payment.
    """
    if principal <= 0 or n_payments <= 0:
        return 0.0

    if monthly_rate == 0:
        return principal / n_payments

    if 1 + monthly_rate <= 0:
        return 0.0

    try:
        growth = (1 + monthly_rate) ** n_payments
    except OverflowError:
        # (1+r)^n -> inf, the payment converges to interest-only
        return principal * monthly_rate

    denom = growth - 1
    if denom == 0:
        return 0.0
    return principal * (monthly_rate * growth) / denom


def _aggregate_rent(snapshot: InputSnapshot) -> float:
    """
    Total scheduled rent per month across the rent roll.
    """
    return sum((u.rent or 0.0) for u in snapshot.units)


def _management_annual(snapshot: InputSnapshot, pgi: float) -> float:
    """
    Percent mode is charged on PGI, not EGI (not vacancy-adjusted).
    Flat mode is used verbatim.
    """
    fee = snapshot.management_fee
    if isinstance(fee, FlatFee):
        return fee.value
    return pgi * fee.value / 100.0


def compute(snapshot: InputSnapshot) -> MetricsSnapshot:
    """
    Core underwriting brain: InputSnapshot -> MetricsSnapshot.

    Pure and total. Every ratio is guarded and reads 0 when its
    denominator is non-positive.
    """

    # --- income side ---
    total_monthly_rent = _aggregate_rent(snapshot)
    pgi = total_monthly_rent * 12.0
    vacancy_loss = pgi * snapshot.vacancy_rate / 100.0
    egi = pgi - vacancy_loss

    # --- operating expenses ---
    property_tax_annual = snapshot.purchase_price * snapshot.property_tax_rate / 100.0
    management_annual = _management_annual(snapshot, pgi)

    # --- financing basics ---
    # loan amount is not clamped; a down payment above price just means no loan
    loan_amount = snapshot.purchase_price - snapshot.down_payment
    monthly_rate = snapshot.interest_rate / 100.0 / 12.0
    n_payments = snapshot.loan_term * 12

    mortgage_monthly = _monthly_mortgage_payment(loan_amount, monthly_rate, n_payments)
    annual_debt_service = mortgage_monthly * 12.0

    total_opex = (
        management_annual
        + snapshot.maintenance
        + property_tax_annual
        + snapshot.insurance
        + snapshot.other_expenses
    )

    # --- NOI (Net Operating Income) ---
    # NOI is income after vacancy + operating expenses, BEFORE debt.
    noi = egi - total_opex
    annual_cash_flow = noi - annual_debt_service

    total_initial_investment = (
        snapshot.down_payment + snapshot.closing_costs + snapshot.initial_capex
    )

    # --- Cash on Cash Return ---
    cash_on_cash = 0.0
    if total_initial_investment > 0:
        cash_on_cash = annual_cash_flow / total_initial_investment * 100.0

    # --- Cap Rate ---
    cap_rate = 0.0
    if snapshot.purchase_price > 0:
        cap_rate = noi / snapshot.purchase_price * 100.0

    grm = 0.0
    opex_ratio = 0.0
    if pgi > 0:
        grm = snapshot.purchase_price / pgi
        opex_ratio = total_opex / pgi * 100.0

    # --- DSCR (Debt Service Coverage Ratio) ---
    dscr = 0.0
    if annual_debt_service > 0:
        dscr = noi / annual_debt_service

    return MetricsSnapshot(
        unit_count=len(snapshot.units),
        total_monthly_rent=total_monthly_rent,
        potential_gross_income=pgi,
        vacancy_loss=vacancy_loss,
        effective_gross_income=egi,

        property_tax_annual=property_tax_annual,
        management_annual=management_annual,
        total_operating_expenses=total_opex,

        loan_amount=loan_amount,
        monthly_rate=monthly_rate,
        number_of_payments=n_payments,
        monthly_mortgage=mortgage_monthly,
        annual_debt_service=annual_debt_service,

        net_operating_income=noi,
        annual_cash_flow=annual_cash_flow,
        monthly_cash_flow=annual_cash_flow / 12.0,
        total_initial_investment=total_initial_investment,
        cash_on_cash_roi=cash_on_cash,
        cap_rate=cap_rate,
        gross_rent_multiplier=grm,
        opex_ratio=opex_ratio,
        dscr=dscr,
        dscr_status=dscr_status(dscr),
    )
