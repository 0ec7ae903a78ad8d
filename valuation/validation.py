"""
Estimate Request Validation

Field-level checks run before any index lookup. Every failing field is
reported with a reason; nothing is coerced into a guessed value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from valuation.mortgage import VALID_AMORTIZATION_YEARS
from valuation.tables import EARLIEST_YEAR


MAX_INTEREST_RATE = 30.0


@dataclass
class ValidationResult:
    """Outcome of request validation, with one reason per failing field."""
    valid: bool
    errors: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": dict(self.errors)}


# =============================================================================
# Helpers
# =============================================================================


def _as_number(value: Any) -> Optional[float]:
    """Parse a finite number, or None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_int(value: Any) -> Optional[int]:
    """Parse a whole number, or None."""
    number = _as_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


# =============================================================================
# Validation
# =============================================================================


def validate_estimate_request(
    data: dict[str, Any],
    reference_date: date = None,
) -> ValidationResult:
    """
    Validate a raw estimate request.

    Args:
        data: Request fields (region, property_type, purchase_year,
            purchase_month, purchase_price and optional mortgage fields)
        reference_date: Date used for the latest allowed purchase year
            (default: today)

    Returns:
        ValidationResult
    """
    errors: dict[str, str] = {}
    current_year = (reference_date or date.today()).year

    # === Purchase fields ===

    if _is_blank(data.get("region")):
        errors["region"] = "Region is required"

    if _is_blank(data.get("property_type")):
        errors["property_type"] = "Property type is required"

    year = _as_int(data.get("purchase_year"))
    if year is None:
        errors["purchase_year"] = "Purchase year is required"
    elif not EARLIEST_YEAR <= year <= current_year:
        errors["purchase_year"] = f"Purchase year must be between {EARLIEST_YEAR} and {current_year}"

    month = _as_int(data.get("purchase_month"))
    if month is None:
        errors["purchase_month"] = "Purchase month is required"
    elif not 1 <= month <= 12:
        errors["purchase_month"] = "Purchase month must be between 1 and 12"

    price = _as_number(data.get("purchase_price"))
    if price is None:
        errors["purchase_price"] = "Purchase price is required"
    elif price <= 0:
        errors["purchase_price"] = "Purchase price must be greater than 0"

    # === Mortgage fields (optional) ===

    if data.get("down_payment_amount") is not None:
        amount = _as_number(data["down_payment_amount"])
        if amount is None or amount < 0:
            errors["down_payment_amount"] = "Down payment must be a non-negative number"
        elif price is not None and price > 0 and amount > price:
            errors["down_payment_amount"] = "Down payment cannot exceed the purchase price"

    if data.get("down_payment_percent") is not None:
        percent = _as_number(data["down_payment_percent"])
        if percent is None or not 0 <= percent <= 100:
            errors["down_payment_percent"] = "Down payment percent must be between 0 and 100"

    if data.get("interest_rate") is not None:
        rate = _as_number(data["interest_rate"])
        if rate is None or not 0 <= rate <= MAX_INTEREST_RATE:
            errors["interest_rate"] = f"Interest rate must be between 0 and {MAX_INTEREST_RATE:g}"

    if data.get("amortization_years") is not None:
        amortization = _as_int(data["amortization_years"])
        if amortization not in VALID_AMORTIZATION_YEARS:
            allowed = ", ".join(str(y) for y in VALID_AMORTIZATION_YEARS)
            errors["amortization_years"] = f"Amortization must be one of {allowed} years"

    return ValidationResult(valid=not errors, errors=errors)
