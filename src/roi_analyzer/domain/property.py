# src/roi_analyzer/domain/property.py
from __future__ import annotations

import math
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ManagementMode = Literal["percent", "flat"]

# Every numeric input field on InputSnapshot. Percent fields are whole numbers
# (6.5 means 6.5%) and are only divided by 100 inside the engine.
NUMERIC_FIELDS = (
    "purchase_price",
    "down_payment",
    "interest_rate",
    "loan_term",
    "closing_costs",
    "initial_capex",
    "vacancy_rate",
    "maintenance",
    "other_expenses",
    "property_tax_rate",
    "insurance",
    "management_percent",
    "management_flat",
)

PERCENT_FIELDS = (
    "interest_rate",
    "vacancy_rate",
    "property_tax_rate",
    "management_percent",
)


def coerce_number(val: Any) -> float:
    """
    Lenient numeric coercion used for every form field.

    Accepts:
      - 250000 / 6.5
      - "250000", "$250,000", "6.5%", " 1 200 "
    Anything else (None, "", "abc", NaN, inf) becomes 0.0.
    """
    if val is None or isinstance(val, bool):
        return 0.0
    if isinstance(val, (int, float)):
        f = float(val)
    elif isinstance(val, str):
        s = val.strip().replace("$", "").replace(",", "").replace(" ", "")
        if s.endswith("%"):
            s = s[:-1]
        if not s:
            return 0.0
        try:
            f = float(s)
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(f):
        return 0.0
    return f


class _SnapshotModel(BaseModel):
    # camelCase on the wire / in storage, snake_case in Python
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Unit(_SnapshotModel):
    id: int = 0
    bedrooms: float = 0.0
    bathrooms: float = 0.0
    rent: float = Field(default=0.0, description="Monthly rent")

    @field_validator("bedrooms", "bathrooms", "rent", mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> float:
        return coerce_number(v)

    @field_validator("id", mode="before")
    @classmethod
    def _int_id(cls, v: Any) -> int:
        return int(coerce_number(v))


class PercentFee(BaseModel):
    mode: Literal["percent"] = "percent"
    value: float = 0.0


class FlatFee(BaseModel):
    mode: Literal["flat"] = "flat"
    value: float = 0.0


ManagementFee = Annotated[Union[PercentFee, FlatFee], Field(discriminator="mode")]


def default_units() -> list[Unit]:
    return [
        Unit(id=1, bedrooms=2, bathrooms=1, rent=1200),
        Unit(id=2, bedrooms=2, bathrooms=1, rent=1200),
        Unit(id=3, bedrooms=1, bathrooms=1, rent=950),
        Unit(id=4, bedrooms=1, bathrooms=1, rent=950),
    ]


class InputSnapshot(_SnapshotModel):
    """
    The full assumption set behind one analysis.

    Defaults double as the fallback for any field missing from a persisted
    scenario, so older records load without a schema version.
    """
    address: str = ""
    listing_id: str = ""

    purchase_price: float = 500_000.0
    down_payment: float = 125_000.0
    interest_rate: float = Field(default=6.5, description="Annual rate, whole percent")
    loan_term: float = Field(default=30.0, description="Years")
    closing_costs: float = 15_000.0
    initial_capex: float = 5_000.0

    vacancy_rate: float = Field(default=5.0, description="Whole percent of PGI")
    maintenance: float = Field(default=2_500.0, description="Annual")
    other_expenses: float = Field(default=500.0, description="Annual other / HOA")
    property_tax_rate: float = Field(default=1.25, description="Whole percent of price")
    insurance: float = Field(default=1_200.0, description="Annual")

    # Both values are kept; only the active mode's value is used.
    management_mode: ManagementMode = "percent"
    management_percent: float = 8.0
    management_flat: float = 0.0

    units: list[Unit] = Field(default_factory=default_units)

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> float:
        return coerce_number(v)

    @field_validator("address", "listing_id", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("management_mode", mode="before")
    @classmethod
    def _mode(cls, v: Any) -> str:
        s = str(v or "").strip().lower()
        return "flat" if s == "flat" else "percent"

    @field_validator("units", mode="before")
    @classmethod
    def _units(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [u for u in v if isinstance(u, (dict, Unit))]
        return []

    @property
    def management_fee(self) -> PercentFee | FlatFee:
        if self.management_mode == "flat":
            return FlatFee(value=self.management_flat)
        return PercentFee(value=self.management_percent)

    def with_management_fee(self, fee: PercentFee | FlatFee) -> "InputSnapshot":
        """
        Return a copy with `fee` active. The inactive mode's value is untouched.
        """
        if isinstance(fee, FlatFee):
            return self.model_copy(
                update={"management_mode": "flat", "management_flat": coerce_number(fee.value)},
                deep=True,
            )
        return self.model_copy(
            update={"management_mode": "percent", "management_percent": coerce_number(fee.value)},
            deep=True,
        )

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
