"""
Equity Estimator - Bridge + Amortization Pipeline

Combines the Equity Bridge valuation with the mortgage position to give
net equity:

    net_equity = estimated_value - remaining_balance
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

from .bridge import EquityBridge
from .models import (
    AppreciationResult,
    EstimationError,
    MortgageAssumptions,
    MortgageState,
    PurchaseRecord,
)
from .mortgage import (
    DEFAULT_AMORTIZATION_YEARS,
    calculate_months_elapsed,
    calculate_net_equity,
    compute_mortgage_state,
    resolve_assumptions,
)
from .regions import normalize_property_category


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquityEstimate:
    """Valuation merged with the mortgage position and net equity."""
    appreciation: AppreciationResult
    assumptions: MortgageAssumptions
    mortgage: MortgageState
    net_equity: float

    @property
    def record(self) -> PurchaseRecord:
        return self.appreciation.record

    def to_dict(self) -> dict:
        """Flat JSON shape: valuation fields plus mortgage sections."""
        result = self.appreciation.to_dict()
        result["assumptions"] = self.assumptions.to_dict()
        result["mortgage"] = self.mortgage.to_dict()
        result["net_equity"] = round(self.net_equity)
        return result


EquityEstimateResult = Union[EquityEstimate, EstimationError]


def record_from_request(data: dict[str, Any]) -> PurchaseRecord:
    """
    Build a PurchaseRecord from a validated request.

    Raises:
        ValueError: If a field violates PurchaseRecord constraints
    """
    return PurchaseRecord(
        region=str(data["region"]).strip(),
        property_category=normalize_property_category(str(data["property_type"])),
        year=int(float(data["purchase_year"])),
        month=int(float(data["purchase_month"])),
        price=float(data["purchase_price"]),
    )


class EquityEstimator:
    """
    Runs both halves of the engine for one purchase.

    The bridge values the property; the amortization engine derives the
    remaining balance at the reference date.
    """

    def __init__(
        self,
        bridge: EquityBridge,
        reference_date: date = None,
        default_amortization_years: int = DEFAULT_AMORTIZATION_YEARS,
    ):
        """
        Initialize the estimator.

        Args:
            bridge: Configured Equity Bridge
            reference_date: Date mortgage progress is measured to (default: today)
            default_amortization_years: Amortization used when a request gives none
        """
        self._bridge = bridge
        self._reference_date = reference_date
        self._default_amortization_years = default_amortization_years

    @property
    def bridge(self) -> EquityBridge:
        return self._bridge

    def estimate(
        self,
        record: PurchaseRecord,
        down_payment_amount: Optional[float] = None,
        down_payment_percent: Optional[float] = None,
        interest_rate: Optional[float] = None,
        amortization_years: Optional[int] = None,
    ) -> EquityEstimateResult:
        """
        Estimate value, mortgage position and net equity.

        Args:
            record: Purchase to value
            down_payment_amount: Explicit down payment (wins over percent)
            down_payment_percent: Down payment as a percent of price
            interest_rate: Annual rate (default: historical rate for the year)
            amortization_years: Amortization period (default: 25)

        Returns:
            EquityEstimate, or EstimationError if the purchase cannot be valued
        """
        appreciation = self._bridge.compute_equity(record)
        if isinstance(appreciation, EstimationError):
            return appreciation

        assumptions = resolve_assumptions(
            record.price,
            record.year,
            down_payment_amount=down_payment_amount,
            down_payment_percent=down_payment_percent,
            interest_rate=interest_rate,
            amortization_years=amortization_years or self._default_amortization_years,
        )

        months_elapsed = calculate_months_elapsed(
            record.year, record.month, reference_date=self._reference_date
        )
        mortgage = compute_mortgage_state(
            record.price,
            assumptions.down_payment_amount,
            assumptions.interest_rate,
            assumptions.amortization_years,
            months_elapsed,
        )

        net_equity = calculate_net_equity(appreciation.estimated_value, mortgage.remaining_balance)
        logger.debug(
            "Estimate for %s/%s %s: value=%s balance=%.0f net_equity=%.0f",
            record.region,
            record.property_category,
            record.year_month,
            appreciation.estimated_value,
            mortgage.remaining_balance,
            net_equity,
        )

        return EquityEstimate(
            appreciation=appreciation,
            assumptions=assumptions,
            mortgage=mortgage,
            net_equity=net_equity,
        )

    def estimate_request(self, data: dict[str, Any]) -> EquityEstimateResult:
        """Estimate from a validated request dict."""
        record = record_from_request(data)
        return self.estimate(
            record,
            down_payment_amount=_optional_float(data.get("down_payment_amount")),
            down_payment_percent=_optional_float(data.get("down_payment_percent")),
            interest_rate=_optional_float(data.get("interest_rate")),
            amortization_years=(
                int(float(data["amortization_years"]))
                if data.get("amortization_years") is not None
                else None
            ),
        )


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None
