# src/roi_analyzer/services/validation.py

from typing import Any

from roi_analyzer.domain.property import InputSnapshot, coerce_number

# Form labels / legacy keys -> InputSnapshot field names
_KEY_ALIASES = {
    "price": "purchase_price",
    "list_price": "purchase_price",
    "downpayment": "down_payment",
    "rate": "interest_rate",
    "interest_rate_annual": "interest_rate",
    "term": "loan_term",
    "loan_term_years": "loan_term",
    "capex": "initial_capex",
    "vacancy": "vacancy_rate",
    "hoa": "other_expenses",
    "other": "other_expenses",
    "tax_rate": "property_tax_rate",
    "mls": "listing_id",
    "mls_number": "listing_id",
}


def _assign_unit_ids(units: list[Any]) -> list[dict[str, Any]]:
    """
    Keep unit ids unique within the property. Units with a missing, zero or
    repeated id get the next free id; the rest keep theirs.
    """
    out: list[dict[str, Any]] = []
    used: set[int] = set()
    pending: list[dict[str, Any]] = []

    for u in units:
        if not isinstance(u, dict):
            continue
        item = dict(u)
        uid = int(coerce_number(item.get("id")))
        if uid > 0 and uid not in used:
            item["id"] = uid
            used.add(uid)
        else:
            item["id"] = 0
            pending.append(item)
        out.append(item)

    next_id = max(used, default=0)
    for item in pending:
        next_id += 1
        item["id"] = next_id
    return out


def prepare_input_payload(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize a raw form payload before it becomes an InputSnapshot.

    Responsibilities:
      - Map a few common alternate keys onto field names.
      - Keep `units` as list[dict] with unique ids.
    Numeric coercion itself happens on the model; nothing here rejects input.
    """
    cleaned: dict[str, Any] = {}
    for k, v in raw.items():
        cleaned[_KEY_ALIASES.get(k, k)] = v

    units = cleaned.get("units")
    if isinstance(units, list):
        cleaned["units"] = _assign_unit_ids(units)

    return cleaned


def parse_input(raw: dict[str, Any] | None) -> InputSnapshot:
    if not raw:
        return InputSnapshot()
    return InputSnapshot.model_validate(prepare_input_payload(raw))
