import pytest

from roi_analyzer.domain.property import (
    FlatFee,
    InputSnapshot,
    PercentFee,
    Unit,
    coerce_number,
    default_units,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (250000, 250000.0),
        (6.5, 6.5),
        ("250000", 250000.0),
        ("$250,000", 250000.0),
        ("6.5%", 6.5),
        ("  1 200 ", 1200.0),
        ("", 0.0),
        ("abc", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ("-3", -3.0),
        ([1, 2], 0.0),
    ],
)
def test_coerce_number(raw, expected):
    assert coerce_number(raw) == expected


def test_defaults_are_the_sample_fourplex():
    snap = InputSnapshot()

    assert snap.purchase_price == 500_000
    assert snap.down_payment == 125_000
    assert snap.interest_rate == 6.5
    assert snap.management_mode == "percent"
    assert snap.management_percent == 8
    assert snap.management_flat == 0
    assert [u.rent for u in snap.units] == [1200, 1200, 950, 950]


def test_default_units_are_fresh_lists():
    a = InputSnapshot()
    b = InputSnapshot()
    a.units.append(Unit(id=5, rent=100))

    assert len(b.units) == 4
    assert len(default_units()) == 4


def test_camel_and_snake_keys_both_load():
    camel = InputSnapshot.model_validate({"purchasePrice": "300000", "managementMode": "flat"})
    snake = InputSnapshot.model_validate({"purchase_price": 300000, "management_mode": "FLAT"})

    assert camel.purchase_price == snake.purchase_price == 300_000
    assert camel.management_mode == snake.management_mode == "flat"


def test_unknown_management_mode_falls_back_to_percent():
    assert InputSnapshot(management_mode="weekly").management_mode == "percent"
    assert InputSnapshot(management_mode=None).management_mode == "percent"


def test_garbage_numbers_become_zero_not_errors():
    snap = InputSnapshot.model_validate(
        {"purchasePrice": "lots", "interestRate": None, "loanTerm": "thirty", "units": "nope"}
    )

    assert snap.purchase_price == 0
    assert snap.interest_rate == 0
    assert snap.loan_term == 0
    assert snap.units == []


def test_partial_record_takes_defaults_for_missing_fields():
    snap = InputSnapshot.model_validate({"address": "1 Main St", "purchasePrice": 410000})

    assert snap.address == "1 Main St"
    assert snap.purchase_price == 410_000
    assert snap.insurance == InputSnapshot().insurance
    assert len(snap.units) == 4


def test_management_fee_union_reflects_active_mode():
    snap = InputSnapshot(management_percent=7, management_flat=2400)

    assert snap.management_fee == PercentFee(value=7)

    flat = snap.model_copy(update={"management_mode": "flat"})
    assert flat.management_fee == FlatFee(value=2400)


def test_with_management_fee_preserves_inactive_value():
    snap = InputSnapshot(management_percent=7, management_flat=2400)

    flat = snap.with_management_fee(FlatFee(value=3000))
    assert flat.management_mode == "flat"
    assert flat.management_flat == 3000
    assert flat.management_percent == 7

    pct = flat.with_management_fee(PercentFee(value=9))
    assert pct.management_mode == "percent"
    assert pct.management_percent == 9
    assert pct.management_flat == 3000


def test_record_uses_camel_case_keys_and_keeps_both_fee_fields():
    record = InputSnapshot(management_mode="flat", management_flat=1800).to_record()

    assert record["managementMode"] == "flat"
    assert record["managementFlat"] == 1800
    assert record["managementPercent"] == 8
    assert record["listingId"] == ""
    assert record["units"][0] == {"id": 1, "bedrooms": 2.0, "bathrooms": 1.0, "rent": 1200.0}


def test_unit_coerces_fields():
    u = Unit.model_validate({"id": "7", "bedrooms": "2", "bathrooms": "1.5", "rent": "$1,100"})
    assert (u.id, u.bedrooms, u.bathrooms, u.rent) == (7, 2.0, 1.5, 1100.0)
