"""
Equity Bridge - Dual-Era Appreciation Calculator

Reconciles the regional home price index (2012 onwards) with TRREB
historic annual averages (1980 onwards) into a single appreciation
estimate for a past purchase.

Pipeline:
1. Resolve the era for the purchase year
2. Run the HPI arm (index era only); fall back to the historic arm if
   the index is sparse
3. Round the factor into value, equity and ROI
4. Build market scenarios
5. Attach regional benchmark prices (display only)
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from valuation.cache import BenchmarkCache
from valuation.index_store.base import IndexStore
from valuation.models import (
    AppreciationResult,
    BenchmarkPrice,
    DataEra,
    EstimationError,
    EstimationResult,
    PurchaseRecord,
    WARNING_INDEX_FALLBACK,
    WARNING_PARTIAL_DATA,
)
from valuation.regions import resolve_lookup_keys
from valuation.tables import HISTORIC_AVERAGES, HPI_START_YEAR, YearTable

from .scenarios import build_scenarios, round_half_up
from .strategies import EraEstimate, historic_arm, hpi_arm, resolve_strategy


logger = logging.getLogger(__name__)


SYNTHETIC_INDEX_NOTE = (
    "Using synthetic index based on TRREB average price trends "
    f"for years prior to {HPI_START_YEAR}."
)
INDEX_FALLBACK_NOTE = (
    "Index data unavailable for {region} {category} at {month}; "
    "using TRREB average price trends instead."
)
DATA_UNAVAILABLE_MESSAGE = "No data available for this selection"


class EquityBridge:
    """
    Estimates current value and equity for a historical purchase.

    Lookups that find nothing are values, not exceptions: the HPI arm
    falls over to the historic arm, and only when both fail does the
    bridge return an EstimationError.
    """

    def __init__(
        self,
        index_store: IndexStore,
        benchmark_cache: Optional[BenchmarkCache] = None,
        historic_table: YearTable = HISTORIC_AVERAGES,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the bridge.

        Args:
            index_store: Source of HPI index and benchmark data
            benchmark_cache: Cache for current benchmark prices (default: fresh cache)
            historic_table: Annual average price table
            clock: Timestamp source for calculated_at (default: UTC now)
        """
        self._store = index_store
        self._cache = benchmark_cache if benchmark_cache is not None else BenchmarkCache()
        self._historic = historic_table
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def benchmark_cache(self) -> BenchmarkCache:
        return self._cache

    def compute_equity(self, record: PurchaseRecord) -> EstimationResult:
        """
        Value a purchase.

        Args:
            record: Purchase to value

        Returns:
            AppreciationResult, or EstimationError when no data source can
            value the purchase
        """
        era = resolve_strategy(record.year)
        region_keys = resolve_lookup_keys(record.region)
        logger.debug(
            "Computing equity for %s/%s %s (era=%s, keys=%s)",
            record.region,
            record.property_category,
            record.year_month,
            era.value,
            region_keys,
        )

        warnings: List[str] = []
        bridge_note = None
        estimate: Optional[EraEstimate] = None

        if era == DataEra.HPI:
            estimate = hpi_arm(self._store, region_keys, record)
            if estimate is None:
                logger.warning(
                    "Index lookup failed for %s/%s at %s, falling back to historic averages",
                    record.region,
                    record.property_category,
                    record.year_month,
                )
                warnings.append(WARNING_INDEX_FALLBACK)
                bridge_note = INDEX_FALLBACK_NOTE.format(
                    region=record.region,
                    category=record.property_category,
                    month=record.year_month,
                )

        if estimate is None:
            estimate = historic_arm(self._historic, record)
            if estimate is not None and era == DataEra.HISTORIC:
                bridge_note = SYNTHETIC_INDEX_NOTE

        if estimate is None:
            logger.warning(
                "No data source could value %s/%s %s",
                record.region,
                record.property_category,
                record.year_month,
            )
            return EstimationError(message=DATA_UNAVAILABLE_MESSAGE)

        benchmark_at_purchase = self._store.get_benchmark_price(
            region_keys, record.property_category, record.year_month
        )
        benchmark_current = self._current_benchmark(record.region, record.property_category)
        if benchmark_at_purchase is None or benchmark_current is None:
            warnings.append(WARNING_PARTIAL_DATA)

        return self._finish(
            record,
            estimate,
            bridge_note=bridge_note,
            benchmark_at_purchase=benchmark_at_purchase,
            benchmark_current=benchmark_current,
            warnings=warnings,
        )

    def _current_benchmark(self, region: str, category: str) -> Optional[BenchmarkPrice]:
        """Latest benchmark price, memoised on success only."""
        cached = self._cache.get(region, category)
        if cached is not None:
            return cached

        benchmark = self._store.get_latest_benchmark_price(resolve_lookup_keys(region), category)
        if benchmark is not None:
            self._cache.set(region, category, benchmark)
        return benchmark

    def _finish(
        self,
        record: PurchaseRecord,
        estimate: EraEstimate,
        bridge_note: Optional[str],
        benchmark_at_purchase: Optional[BenchmarkPrice],
        benchmark_current: Optional[BenchmarkPrice],
        warnings: List[str],
    ) -> AppreciationResult:
        """Shared rounding and scenario step for both arms."""
        factor = estimate.factor
        estimated_value = round_half_up(record.price * factor)

        return AppreciationResult(
            record=record,
            appreciation_factor=round_half_up(factor, 3),
            estimated_value=estimated_value,
            equity_gained=round_half_up(estimated_value - record.price),
            roi_percent=round_half_up((factor - 1) * 100, 1),
            data_era=estimate.era,
            data_source=estimate.data_source,
            index_at_purchase=estimate.index_at_purchase,
            index_at_purchase_month=estimate.index_at_purchase_month,
            index_current=estimate.index_current,
            index_current_month=estimate.index_current_month,
            trend=estimate.trend,
            scenarios=tuple(build_scenarios(estimated_value, record.price)),
            purchase_match_exact=estimate.purchase_match_exact,
            bridge_note=bridge_note,
            benchmark_at_purchase=benchmark_at_purchase,
            benchmark_current=benchmark_current,
            warnings=tuple(warnings),
            calculated_at=self._clock(),
        )
