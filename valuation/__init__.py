"""
GTA Equity Engine - Core Business Logic

Estimates a property's current value and the owner's equity from a
historical purchase:
1. Region Resolution (modern names -> historic district codes)
2. Equity Bridge (regional HPI, historic averages before 2012)
3. Market Scenarios (hot / balanced / soft)
4. Amortization (remaining balance, paid to date)
5. Net Equity (estimated value - remaining balance)
"""

from .models import (
    DataEra,
    PurchaseRecord,
    IndexPoint,
    IndexLookup,
    BenchmarkPrice,
    HistoricAveragePoint,
    MarketScenario,
    AppreciationResult,
    EstimationError,
    EstimationResult,
    MortgageAssumptions,
    MortgageState,
    RefinanceScenario,
    WARNING_PARTIAL_DATA,
    WARNING_INDEX_FALLBACK,
    ERROR_DATA_UNAVAILABLE,
    format_year_month,
)

# Region Resolver
from .regions import (
    DISTRICT_MAPPINGS,
    KNOWN_REGIONS,
    PROPERTY_CATEGORIES,
    resolve_lookup_keys,
    normalize_area_name,
    is_known_region,
    normalize_property_category,
)

# Static Tables
from .tables import (
    YearTable,
    HISTORIC_AVERAGES,
    HISTORICAL_RATES,
    HPI_START_YEAR,
    EARLIEST_YEAR,
    LATEST_YEAR,
    get_data_era,
    get_data_era_label,
    get_historical_rate,
    historic_growth_ratio,
    has_data_for_year,
)

# Index Store
from .index_store import IndexStore, IndexRow, InMemoryIndexStore
from .cache import BenchmarkCache

# Equity Bridge
from .bridge import EquityBridge, round_half_up

# Amortization Engine
from .mortgage import (
    calculate_monthly_payment,
    calculate_remaining_balance,
    calculate_months_elapsed,
    compute_mortgage_state,
    calculate_default_down_payment,
    resolve_assumptions,
    calculate_refinance_scenario,
    calculate_net_equity,
)

# Validation and Estimation
from .validation import ValidationResult, validate_estimate_request
from .estimator import EquityEstimate, EquityEstimator, record_from_request

__all__ = [
    # Models
    "DataEra",
    "PurchaseRecord",
    "IndexPoint",
    "IndexLookup",
    "BenchmarkPrice",
    "HistoricAveragePoint",
    "MarketScenario",
    "AppreciationResult",
    "EstimationError",
    "EstimationResult",
    "MortgageAssumptions",
    "MortgageState",
    "RefinanceScenario",
    "WARNING_PARTIAL_DATA",
    "WARNING_INDEX_FALLBACK",
    "ERROR_DATA_UNAVAILABLE",
    "format_year_month",
    # Region Resolver
    "DISTRICT_MAPPINGS",
    "KNOWN_REGIONS",
    "PROPERTY_CATEGORIES",
    "resolve_lookup_keys",
    "normalize_area_name",
    "is_known_region",
    "normalize_property_category",
    # Static Tables
    "YearTable",
    "HISTORIC_AVERAGES",
    "HISTORICAL_RATES",
    "HPI_START_YEAR",
    "EARLIEST_YEAR",
    "LATEST_YEAR",
    "get_data_era",
    "get_data_era_label",
    "get_historical_rate",
    "historic_growth_ratio",
    "has_data_for_year",
    # Index Store
    "IndexStore",
    "IndexRow",
    "InMemoryIndexStore",
    "BenchmarkCache",
    # Equity Bridge
    "EquityBridge",
    "round_half_up",
    # Amortization Engine
    "calculate_monthly_payment",
    "calculate_remaining_balance",
    "calculate_months_elapsed",
    "compute_mortgage_state",
    "calculate_default_down_payment",
    "resolve_assumptions",
    "calculate_refinance_scenario",
    "calculate_net_equity",
    # Validation and Estimation
    "ValidationResult",
    "validate_estimate_request",
    "EquityEstimate",
    "EquityEstimator",
    "record_from_request",
]
