# tests/fixtures/snapshots.py

from roi_analyzer.domain.property import InputSnapshot, Unit


def fourplex_example() -> InputSnapshot:
    """
    500k fourplex, 25% down at 6.5% / 30y, 8% management on PGI.
    Expected: NOI 34,442, DSCR ~1.21 ("Borderline"), CoC ~4.14%.
    """
    return InputSnapshot(
        address="742 Evergreen Terrace",
        listing_id="MLS-1001",
        purchase_price=500_000,
        down_payment=125_000,
        interest_rate=6.5,
        loan_term=30,
        closing_costs=15_000,
        initial_capex=5_000,
        vacancy_rate=5,
        maintenance=2_500,
        other_expenses=500,
        property_tax_rate=1.25,
        insurance=1_200,
        management_mode="percent",
        management_percent=8,
        management_flat=0,
        units=[
            Unit(id=1, bedrooms=2, bathrooms=1, rent=1200),
            Unit(id=2, bedrooms=2, bathrooms=1, rent=1200),
            Unit(id=3, bedrooms=1, bathrooms=1, rent=950),
            Unit(id=4, bedrooms=1, bathrooms=1, rent=950),
        ],
    )


def bare_snapshot(**overrides) -> InputSnapshot:
    """
    Everything zeroed except what the caller passes in. Handy for
    isolating one formula at a time.
    """
    fields = dict(
        purchase_price=0,
        down_payment=0,
        interest_rate=0,
        loan_term=0,
        closing_costs=0,
        initial_capex=0,
        vacancy_rate=0,
        maintenance=0,
        other_expenses=0,
        property_tax_rate=0,
        insurance=0,
        management_mode="percent",
        management_percent=0,
        management_flat=0,
        units=[],
    )
    fields.update(overrides)
    return InputSnapshot(**fields)


def rent_roll(*rents: float) -> list[Unit]:
    return [Unit(id=i, bedrooms=1, bathrooms=1, rent=r) for i, r in enumerate(rents, start=1)]
