"""
Data models for the equity engine.

Defines the purchase record that enters both halves of the engine, the
index data points read from the HPI store, and the derived valuation and
mortgage results. Every model is created fresh per calculation and is
immutable once constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


class DataEra(Enum):
    """
    Valuation strategy selected for a purchase.

    HISTORIC: annual average prices (pre-index years, and the fallback
              whenever the index is sparse)
    HPI: regional home price index
    """
    HISTORIC = "historic"
    HPI = "hpi"


# Warning codes attached to otherwise successful results
WARNING_PARTIAL_DATA = "PARTIAL_DATA"
WARNING_INDEX_FALLBACK = "INDEX_FALLBACK"

# Error codes for EstimationError
ERROR_DATA_UNAVAILABLE = "DATA_UNAVAILABLE"


@dataclass(frozen=True)
class PurchaseRecord:
    """
    A historical purchase: where, what, when and for how much.

    Input to both the Equity Bridge and the Amortization Engine.
    """
    region: str
    property_category: str
    year: int
    month: int
    price: float

    def __post_init__(self) -> None:
        """Validate constraints at construction time."""
        if not self.region or not self.region.strip():
            raise ValueError("region is required")
        if not self.property_category or not self.property_category.strip():
            raise ValueError("property_category is required")
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")
        if self.price <= 0:
            raise ValueError("price must be positive")

    @property
    def year_month(self) -> str:
        """Purchase month as a zero-padded 'YYYY-MM' string."""
        return format_year_month(self.year, self.month)

    def to_dict(self) -> dict:
        return {
            "region": self.region,
            "property_type": self.property_category,
            "purchase_year": self.year,
            "purchase_month": self.month,
            "purchase_price": self.price,
        }


@dataclass(frozen=True)
class IndexPoint:
    """
    A single point on an index trend line.

    Synthetic points are generated from historic annual averages for
    display; they are never real index readings.
    """
    report_month: str  # YYYY-MM
    index_value: float
    benchmark_price: Optional[float] = None
    synthetic: bool = False

    def to_dict(self) -> dict:
        return {
            "report_month": self.report_month,
            "index_value": self.index_value,
            "benchmark_price": self.benchmark_price,
            "synthetic": self.synthetic,
        }


@dataclass(frozen=True)
class IndexLookup:
    """Result of an index point lookup, with the month actually matched."""
    value: float
    report_month: str
    exact: bool = True


@dataclass(frozen=True)
class BenchmarkPrice:
    """Regional benchmark price. Display only, never used in the maths."""
    price: float
    report_month: str

    def to_dict(self) -> dict:
        return {"price": self.price, "report_month": self.report_month}


@dataclass(frozen=True)
class HistoricAveragePoint:
    """Annual average sale price for one year."""
    year: int
    average_price: float


@dataclass(frozen=True)
class MarketScenario:
    """
    Valuation under one market condition.

    Hot / balanced / soft bands are fixed percentage offsets applied to
    the balanced estimate.
    """
    name: str
    value: int
    equity: int
    adjustment_percent: float
    label: str

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "equity": self.equity,
            "adjustment": self.adjustment_percent,
            "label": self.label,
        }


@dataclass(frozen=True)
class AppreciationResult:
    """
    Complete valuation produced by the Equity Bridge.

    appreciation_factor is rounded to three decimals for display; the
    monetary fields are computed from the unrounded factor.
    """
    record: PurchaseRecord

    # Core valuation
    appreciation_factor: float
    estimated_value: int
    equity_gained: int
    roi_percent: float

    # Provenance
    data_era: DataEra
    data_source: str

    # Reference values used for the factor
    index_at_purchase: float
    index_at_purchase_month: str
    index_current: float
    index_current_month: str

    # Presentation
    trend: tuple[IndexPoint, ...] = ()
    scenarios: tuple[MarketScenario, ...] = ()

    # False when the purchase-side index came from an earlier month
    purchase_match_exact: bool = True
    bridge_note: Optional[str] = None

    # Regional benchmarks (None when unavailable, never zero)
    benchmark_at_purchase: Optional[BenchmarkPrice] = None
    benchmark_current: Optional[BenchmarkPrice] = None

    warnings: tuple[str, ...] = ()
    calculated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_synthetic(self) -> bool:
        """Whether the trend line is built from historic averages."""
        return self.data_era == DataEra.HISTORIC

    def scenario(self, name: str) -> Optional[MarketScenario]:
        """Get a market scenario by name (hot, balanced, soft)."""
        for s in self.scenarios:
            if s.name == name:
                return s
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "input": self.record.to_dict(),
            "appreciation_factor": self.appreciation_factor,
            "estimated_current_value": self.estimated_value,
            "equity_gained": self.equity_gained,
            "roi_percent": self.roi_percent,
            "data_era": self.data_era.value,
            "data_source": self.data_source,
            "bridge_note": self.bridge_note,
            "hpi_at_purchase": self.index_at_purchase,
            "hpi_at_purchase_date": self.index_at_purchase_month,
            "purchase_match_exact": self.purchase_match_exact,
            "hpi_current": self.index_current,
            "hpi_current_date": self.index_current_month,
            "hpi_trend": [p.to_dict() for p in self.trend],
            "scenarios": {s.name: s.to_dict() for s in self.scenarios},
            "benchmark_at_purchase": (
                self.benchmark_at_purchase.price if self.benchmark_at_purchase else None
            ),
            "benchmark_at_purchase_date": (
                self.benchmark_at_purchase.report_month if self.benchmark_at_purchase else None
            ),
            "benchmark_current": (
                self.benchmark_current.price if self.benchmark_current else None
            ),
            "benchmark_current_date": (
                self.benchmark_current.report_month if self.benchmark_current else None
            ),
            "warnings": list(self.warnings),
            "calculated_at": self.calculated_at.isoformat(),
        }


@dataclass(frozen=True)
class EstimationError:
    """Returned when neither the index nor the historic bridge can value a purchase."""
    message: str
    code: str = ERROR_DATA_UNAVAILABLE


EstimationResult = Union[AppreciationResult, EstimationError]


@dataclass(frozen=True)
class MortgageAssumptions:
    """Purchase-time mortgage assumptions with defaults applied."""
    down_payment_amount: float
    down_payment_percent: float
    interest_rate: float
    amortization_years: int
    rate_is_default: bool = False

    def to_dict(self) -> dict:
        return {
            "down_payment_amount": self.down_payment_amount,
            "down_payment_percent": self.down_payment_percent,
            "interest_rate": self.interest_rate,
            "amortization_years": self.amortization_years,
            "rate_is_default": self.rate_is_default,
        }


@dataclass(frozen=True)
class MortgageState:
    """Mortgage position derived from the purchase and elapsed time."""
    original_loan_amount: float
    monthly_payment: float
    remaining_balance: float
    principal_paid_to_date: float
    interest_paid_to_date: float
    percent_paid_off: float
    months_elapsed: int
    years_elapsed: int
    amortization_years: int
    total_payments_over_life: float
    total_interest_over_life: float

    @property
    def total_payments(self) -> int:
        """Number of scheduled monthly payments."""
        return self.amortization_years * 12

    @property
    def years_remaining(self) -> float:
        """Years left on the amortization schedule."""
        return max(0.0, (self.total_payments - self.months_elapsed) / 12)

    def to_dict(self) -> dict:
        """Convert to dictionary, rounding money to whole units."""
        return {
            "original_loan_amount": round(self.original_loan_amount),
            "monthly_payment": round(self.monthly_payment),
            "remaining_balance": round(self.remaining_balance),
            "principal_paid_to_date": round(self.principal_paid_to_date),
            "interest_paid_to_date": round(self.interest_paid_to_date),
            "percent_paid_off": round(self.percent_paid_off, 1),
            "months_elapsed": self.months_elapsed,
            "years_elapsed": self.years_elapsed,
            "years_remaining": round(self.years_remaining, 1),
            "total_payments_over_life": round(self.total_payments_over_life),
            "total_interest_over_life": round(self.total_interest_over_life),
        }


@dataclass(frozen=True)
class RefinanceScenario:
    """Cash-out refinance on top of the current balance."""
    additional_loan_amount: float
    interest_rate: float
    term_years: int
    new_monthly_payment: float
    total_new_debt: float
    impact_on_equity: float

    def to_dict(self) -> dict:
        return {
            "additional_loan_amount": self.additional_loan_amount,
            "interest_rate": self.interest_rate,
            "term_years": self.term_years,
            "new_monthly_payment": round(self.new_monthly_payment, 2),
            "total_new_debt": self.total_new_debt,
            "impact_on_equity": self.impact_on_equity,
        }


def format_year_month(year: int, month: int) -> str:
    """Format year and month as 'YYYY-MM'."""
    return f"{year:04d}-{month:02d}"
