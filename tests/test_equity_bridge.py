"""
Tests for the Equity Bridge

Comprehensive tests verifying:
- HPI era: value = round(price * current / purchase)
- Historic era: value = round(price * latest average / purchase-year average)
- Silent fallback from a sparse index to historic averages (flagged)
- Scenario invariants for hot / balanced / soft
- Benchmarks: absent marker and PARTIAL_DATA warning, never zero
- Warm and cold benchmark cache
- Terminal DATA_UNAVAILABLE only when both arms fail
"""

import pytest
from datetime import datetime, timezone
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from valuation.bridge import (
    SCENARIO_DEFINITIONS,
    EquityBridge,
    historic_arm,
    round_half_up,
    synthetic_trend,
)
from valuation.cache import BenchmarkCache
from valuation.index_store import InMemoryIndexStore
from valuation.models import (
    AppreciationResult,
    BenchmarkPrice,
    DataEra,
    ERROR_DATA_UNAVAILABLE,
    EstimationError,
    PurchaseRecord,
    WARNING_INDEX_FALLBACK,
    WARNING_PARTIAL_DATA,
)
from valuation.tables import DATA_SOURCE_HISTORIC, DATA_SOURCE_HPI, HISTORIC_AVERAGES


# =============================================================================
# Test Fixtures
# =============================================================================


FIXED_NOW = datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)


def _row(month, index, benchmark=None, area="Oshawa", category="Detached"):
    return {
        "report_month": month,
        "area_name": area,
        "property_category": category,
        "hpi_index": index,
        "benchmark_price": benchmark,
    }


@pytest.fixture
def store():
    """Oshawa detached: index 100 at purchase, 310 now."""
    return InMemoryIndexStore.from_rows([
        _row("2015-01", 100.0, 450000),
        _row("2018-06", 220.0, 700000),
        _row("2025-09", 310.0, 910000),
        # Ajax index without any benchmark prices
        _row("2016-01", 200.0, area="Ajax"),
        _row("2025-09", 300.0, area="Ajax"),
        # Brampton stored under a historic district code only
        _row("2014-05", 160.0, 500000, area="W-24"),
        _row("2025-09", 256.0, 820000, area="W-24"),
    ])


@pytest.fixture
def bridge(store):
    return EquityBridge(store, clock=lambda: FIXED_NOW)


@pytest.fixture
def create_record():
    """Factory fixture for purchase records."""
    def _create(
        region: str = "Oshawa",
        category: str = "Detached",
        year: int = 2015,
        month: int = 1,
        price: float = 500000,
    ) -> PurchaseRecord:
        return PurchaseRecord(region, category, year, month, price)
    return _create


class _EmptyTable:
    """Historic table stand-in that can value nothing."""
    first_year = 1980
    last_year = 2025

    def nearest(self, year):
        return None

    def items(self):
        return iter(())

    def __contains__(self, year):
        return False


# =============================================================================
# HPI Era
# =============================================================================


class TestHpiEra:
    """Index-based valuation for 2012+ purchases."""

    def test_concrete_scenario(self, bridge, create_record):
        result = bridge.compute_equity(create_record())

        assert isinstance(result, AppreciationResult)
        assert result.data_era == DataEra.HPI
        assert result.data_source == DATA_SOURCE_HPI
        assert result.appreciation_factor == 3.1
        assert result.estimated_value == 1_550_000
        assert result.equity_gained == 1_050_000
        assert result.roi_percent == 210.0

    def test_reference_values(self, bridge, create_record):
        result = bridge.compute_equity(create_record())
        assert result.index_at_purchase == 100.0
        assert result.index_at_purchase_month == "2015-01"
        assert result.index_current == 310.0
        assert result.index_current_month == "2025-09"
        assert result.purchase_match_exact
        assert result.bridge_note is None

    def test_exact_formula(self, bridge, create_record):
        record = create_record(month=3, price=612340)
        result = bridge.compute_equity(record)
        assert result.estimated_value == round_half_up(612340 * 310.0 / 100.0)

    def test_prior_month_fallback_is_flagged(self, bridge, create_record):
        result = bridge.compute_equity(create_record(year=2017, month=2))
        assert result.data_era == DataEra.HPI
        assert result.index_at_purchase == 100.0
        assert result.index_at_purchase_month == "2015-01"
        assert not result.purchase_match_exact

    def test_trend_starts_at_month_used_for_purchase(self, bridge, create_record):
        result = bridge.compute_equity(create_record(year=2017, month=2))
        assert result.trend[0].report_month == result.index_at_purchase_month == "2015-01"
        assert result.trend[0].index_value == result.index_at_purchase

    def test_trend_is_real_index_series(self, bridge, create_record):
        result = bridge.compute_equity(create_record())
        assert [p.report_month for p in result.trend] == ["2015-01", "2018-06", "2025-09"]
        assert not result.is_synthetic
        assert not any(p.synthetic for p in result.trend)

    def test_region_resolved_through_district_codes(self, bridge, create_record):
        result = bridge.compute_equity(create_record(region="Brampton", year=2014, month=5, price=400000))
        assert result.data_era == DataEra.HPI
        assert result.estimated_value == 640000

    def test_calculated_at_uses_clock(self, bridge, create_record):
        assert bridge.compute_equity(create_record()).calculated_at == FIXED_NOW

    def test_monotonic_in_price(self, bridge, create_record):
        low = bridge.compute_equity(create_record(price=400000))
        high = bridge.compute_equity(create_record(price=800000))
        assert high.estimated_value > low.estimated_value
        assert high.equity_gained > low.equity_gained
        assert high.estimated_value == 2 * low.estimated_value
        assert high.equity_gained == 2 * low.equity_gained


# =============================================================================
# Historic Era
# =============================================================================


class TestHistoricEra:
    """Annual-average valuation for pre-2012 purchases."""

    def test_brampton_1993(self, create_record):
        bridge = EquityBridge(InMemoryIndexStore())
        record = create_record(region="Brampton", year=1993, month=6, price=150000)
        result = bridge.compute_equity(record)

        assert result.data_era == DataEra.HISTORIC
        assert result.data_source == DATA_SOURCE_HISTORIC
        assert result.appreciation_factor == 5.172
        assert result.estimated_value == round_half_up(150000 * 1067968 / 206490)
        assert result.estimated_value == 775801
        assert result.equity_gained == 625801
        assert result.roi_percent == 417.2

    def test_synthetic_note(self, create_record):
        bridge = EquityBridge(InMemoryIndexStore())
        result = bridge.compute_equity(create_record(year=2001))
        assert "synthetic index" in result.bridge_note
        assert WARNING_INDEX_FALLBACK not in result.warnings

    def test_historic_used_even_when_index_exists(self, bridge, create_record):
        """Pre-2012 purchases never consult the index for the factor."""
        result = bridge.compute_equity(create_record(year=2005, month=4, price=300000))
        assert result.data_era == DataEra.HISTORIC
        expected = round_half_up(300000 * 1067968 / 335907)
        assert result.estimated_value == expected

    def test_synthetic_trend_is_tagged(self, create_record):
        bridge = EquityBridge(InMemoryIndexStore())
        result = bridge.compute_equity(create_record(year=2009))

        assert result.is_synthetic
        assert all(p.synthetic for p in result.trend)
        assert [p.report_month for p in result.trend][:2] == ["2009-06", "2010-06"]
        assert result.trend[-1].report_month == "2025-06"
        assert result.trend[0].index_value == pytest.approx(395460 / 1000)
        assert result.trend[0].benchmark_price == 395460

    def test_synthetic_reference_values(self, create_record):
        bridge = EquityBridge(InMemoryIndexStore())
        result = bridge.compute_equity(create_record(year=1993))
        assert result.index_at_purchase == pytest.approx(206.49)
        assert result.index_current == pytest.approx(1067.968)
        assert result.index_at_purchase_month == "1993-06"
        assert result.index_current_month == "2025-06"

    def test_historic_arm_pure_function(self, create_record):
        estimate = historic_arm(HISTORIC_AVERAGES, create_record(year=1980))
        assert estimate.factor == pytest.approx(1067968 / 75694)
        assert estimate.purchase_match_exact
        assert len(estimate.trend) == len(synthetic_trend(HISTORIC_AVERAGES, 1980)) == 46

    def test_year_outside_table_uses_nearest(self, create_record):
        """Years after the table clamp to the latest average (factor 1)."""
        bridge = EquityBridge(InMemoryIndexStore())
        result = bridge.compute_equity(create_record(year=2026, month=2, price=900000))
        assert result.data_era == DataEra.HISTORIC
        assert result.estimated_value == 900000
        assert not result.purchase_match_exact
        assert result.index_at_purchase_month == "2025-06"
        assert len(result.trend) >= 1
        assert result.trend[0].report_month == result.index_at_purchase_month

    def test_year_before_table_trend_starts_at_anchor(self, create_record):
        estimate = historic_arm(HISTORIC_AVERAGES, create_record(year=1975))
        assert estimate.index_at_purchase_month == "1980-06"
        assert estimate.trend[0].report_month == "1980-06"


# =============================================================================
# Fallback and Terminal Failure
# =============================================================================


class TestFallback:
    """HPI -> historic fallback and the terminal error."""

    def test_sparse_index_falls_back(self, bridge, create_record):
        result = bridge.compute_equity(create_record(region="Whitby", year=2016, month=6, price=600000))

        assert isinstance(result, AppreciationResult)
        assert result.data_era == DataEra.HISTORIC
        assert result.estimated_value == round_half_up(600000 * 1067968 / 729922)
        assert WARNING_INDEX_FALLBACK in result.warnings
        assert "Whitby" in result.bridge_note

    def test_no_prior_month_falls_back(self, bridge, create_record):
        """Index starts 2015-01; a 2014 purchase must not borrow a later month."""
        result = bridge.compute_equity(create_record(year=2014, month=3))
        assert result.data_era == DataEra.HISTORIC

    def test_fallback_is_logged(self, bridge, create_record, caplog):
        bridge.compute_equity(create_record(region="Whitby", year=2016))
        assert "falling back to historic averages" in caplog.text

    def test_terminal_error_when_both_arms_fail(self, create_record):
        bridge = EquityBridge(InMemoryIndexStore(), historic_table=_EmptyTable())
        result = bridge.compute_equity(create_record(region="Whitby", year=2016))

        assert isinstance(result, EstimationError)
        assert result.code == ERROR_DATA_UNAVAILABLE

    def test_terminal_error_historic_era(self, create_record):
        bridge = EquityBridge(InMemoryIndexStore(), historic_table=_EmptyTable())
        assert isinstance(bridge.compute_equity(create_record(year=1990)), EstimationError)


# =============================================================================
# Scenarios
# =============================================================================


class TestScenarios:
    """Hot / balanced / soft invariants."""

    @pytest.mark.parametrize("year,price", [(2015, 500000), (1993, 150000), (2008, 333333)])
    def test_invariants(self, bridge, create_record, year, price):
        record = create_record(year=year, price=price)
        result = bridge.compute_equity(record)
        balanced = result.scenario("balanced").value

        assert balanced == result.estimated_value
        for name, adjustment, label in SCENARIO_DEFINITIONS:
            scenario = result.scenario(name)
            assert scenario.value == round_half_up(balanced * (1 + adjustment / 100))
            assert scenario.equity == scenario.value - price
            assert scenario.adjustment_percent == adjustment
            assert scenario.label == label

    @pytest.mark.parametrize("year", [2015, 1993])
    def test_fractional_price_gives_whole_unit_equity(self, bridge, create_record, year):
        price = 150000.4
        result = bridge.compute_equity(create_record(year=year, price=price))

        assert isinstance(result.equity_gained, int)
        assert result.equity_gained == round_half_up(result.estimated_value - price)
        for scenario in result.scenarios:
            assert isinstance(scenario.equity, int)
            assert scenario.equity == round_half_up(scenario.value - price)
        assert result.scenario("balanced").equity == result.equity_gained

    def test_concrete_values(self, bridge, create_record):
        result = bridge.compute_equity(create_record())
        assert result.scenario("hot").value == 1_612_000
        assert result.scenario("soft").value == 1_426_000
        assert result.scenario("soft").equity == 926_000

    def test_ordering_and_labels(self, bridge, create_record):
        result = bridge.compute_equity(create_record())
        assert [s.name for s in result.scenarios] == ["hot", "balanced", "soft"]
        assert result.scenario("hot").label == "If Market Heats Up"
        assert result.scenario("balanced").label == "Current Estimate"
        assert result.scenario("soft").label == "If Market Softens"
        assert result.scenario("volatile") is None


# =============================================================================
# Benchmarks and Cache
# =============================================================================


class TestBenchmarks:
    """Display-only benchmark prices."""

    def test_benchmarks_attached(self, bridge, create_record):
        result = bridge.compute_equity(create_record())
        assert result.benchmark_at_purchase == BenchmarkPrice(450000, "2015-01")
        assert result.benchmark_current == BenchmarkPrice(910000, "2025-09")
        assert WARNING_PARTIAL_DATA not in result.warnings

    def test_missing_benchmark_is_absent_not_zero(self, bridge, create_record):
        result = bridge.compute_equity(create_record(region="Ajax", year=2016, month=1, price=600000))

        assert result.data_era == DataEra.HPI
        assert result.estimated_value == 900000
        assert result.benchmark_at_purchase is None
        assert result.benchmark_current is None
        assert WARNING_PARTIAL_DATA in result.warnings

        data = result.to_dict()
        assert data["benchmark_at_purchase"] is None
        assert data["benchmark_current_date"] is None

    def test_benchmarks_attached_for_historic_era(self, bridge, create_record):
        result = bridge.compute_equity(create_record(year=2001))
        assert result.data_era == DataEra.HISTORIC
        # Nothing on or before 2001; the earliest later month is used for display
        assert result.benchmark_at_purchase == BenchmarkPrice(450000, "2015-01")


class TestBenchmarkCache:
    """Warm and cold cache behaviour."""

    def test_cold_cache_populated_on_success(self, store, create_record):
        cache = BenchmarkCache()
        bridge = EquityBridge(store, benchmark_cache=cache)
        bridge.compute_equity(create_record())

        assert len(cache) == 1
        assert cache.get("Oshawa", "Detached") == BenchmarkPrice(910000, "2025-09")

    def test_warm_cache_is_used(self, store, create_record):
        cache = BenchmarkCache()
        cache.set("Oshawa", "Detached", BenchmarkPrice(1_000_000, "2099-01"))
        bridge = EquityBridge(store, benchmark_cache=cache)

        result = bridge.compute_equity(create_record())
        assert result.benchmark_current == BenchmarkPrice(1_000_000, "2099-01")

    def test_failures_not_cached(self, store, create_record):
        cache = BenchmarkCache()
        bridge = EquityBridge(store, benchmark_cache=cache)
        bridge.compute_equity(create_record(region="Ajax", year=2016))
        assert len(cache) == 0
        assert cache.get("Ajax", "Detached") is None

    def test_clear(self):
        cache = BenchmarkCache()
        cache.set("Oshawa", "Detached", BenchmarkPrice(1.0, "2020-01"))
        assert ("Oshawa", "Detached") in cache
        cache.clear()
        assert len(cache) == 0

    def test_bridge_creates_own_cache(self, store):
        assert len(EquityBridge(store).benchmark_cache) == 0


# =============================================================================
# Rounding
# =============================================================================


class TestRoundHalfUp:
    """Currency rounding helper."""

    @pytest.mark.parametrize("value,places,expected", [
        (2.5, 0, 3),
        (3.5, 0, 4),
        (-2.5, 0, -3),
        (775801.2495, 0, 775801),
        (5.1720083, 3, 5.172),
        (417.25, 1, 417.3),
    ])
    def test_rounding(self, value, places, expected):
        assert round_half_up(value, places) == expected

    def test_integer_result_when_no_places(self):
        assert isinstance(round_half_up(10.4), int)
