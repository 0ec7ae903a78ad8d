"""
Tests for the in-memory Index Store

Verifies:
- Exact month wins; nearest prior month otherwise; never a later month
- Multi-key merging with first-key priority
- Benchmarks fall back prior, then later
- Malformed rows rejected, missing files give an empty store
"""

import json
import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from valuation.index_store import IndexRow, InMemoryIndexStore
from valuation.models import BenchmarkPrice


# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def rows():
    """Pickering detached series stored under two keys."""
    return [
        {"report_month": "2015-01", "area_name": "Pickering", "property_category": "Detached",
         "hpi_index": 180.0, "benchmark_price": 520000},
        {"report_month": "2015-06", "area_name": "E13", "property_category": "Detached",
         "hpi_index": 190.0, "benchmark_price": None},
        {"report_month": "2015-06", "area_name": "Pickering", "property_category": "Detached",
         "hpi_index": 191.0, "benchmark_price": 545000},
        {"report_month": "2016-03", "area_name": "E13", "property_category": "Detached",
         "hpi_index": 210.0, "benchmark_price": 600000},
        {"report_month": "2015-01", "area_name": "Pickering", "property_category": "Condo Apt",
         "hpi_index": 150.0, "benchmark_price": 300000},
    ]


@pytest.fixture
def store(rows):
    return InMemoryIndexStore.from_rows(rows)


KEYS = ("Pickering", "E13", "E-13")


# =============================================================================
# Index Lookups
# =============================================================================


class TestGetIndexValue:
    """Purchase-side point lookups."""

    def test_exact_match(self, store):
        lookup = store.get_index_value(KEYS, "Detached", "2015-01")
        assert lookup.value == 180.0
        assert lookup.report_month == "2015-01"
        assert lookup.exact

    def test_first_key_wins_on_same_month(self, store):
        lookup = store.get_index_value(KEYS, "Detached", "2015-06")
        assert lookup.value == 191.0

    def test_first_key_wins_with_reversed_keys(self, store):
        lookup = store.get_index_value(("E13", "Pickering"), "Detached", "2015-06")
        assert lookup.value == 190.0

    def test_prior_month_fallback(self, store):
        lookup = store.get_index_value(KEYS, "Detached", "2015-12")
        assert lookup.value == 191.0
        assert lookup.report_month == "2015-06"
        assert not lookup.exact

    def test_never_uses_later_month(self, store):
        assert store.get_index_value(KEYS, "Detached", "2014-12") is None

    def test_unknown_category(self, store):
        assert store.get_index_value(KEYS, "Townhouse", "2015-06") is None

    def test_codes_reached_through_keys(self, store):
        """2016-03 only exists under the E13 code."""
        lookup = store.get_index_value(KEYS, "Detached", "2016-03")
        assert lookup.value == 210.0
        assert lookup.exact


class TestLatestAndTrend:
    """Current-side lookups and range queries."""

    def test_latest_across_keys(self, store):
        latest = store.get_latest_index_value(KEYS, "Detached")
        assert latest.value == 210.0
        assert latest.report_month == "2016-03"

    def test_latest_missing(self, store):
        assert store.get_latest_index_value(("Ajax",), "Detached") is None

    def test_trend_ascending_one_point_per_month(self, store):
        trend = store.get_index_trend(KEYS, "Detached", "2015-01")
        assert [p.report_month for p in trend] == ["2015-01", "2015-06", "2016-03"]
        assert trend[1].index_value == 191.0
        assert not any(p.synthetic for p in trend)

    def test_trend_from_month(self, store):
        trend = store.get_index_trend(KEYS, "Detached", "2015-07")
        assert [p.report_month for p in trend] == ["2016-03"]

    def test_date_range(self, store):
        assert store.get_date_range(KEYS, "Detached") == ("2015-01", "2016-03")
        assert store.get_date_range(("Ajax",), "Detached") is None


# =============================================================================
# Benchmarks
# =============================================================================


class TestBenchmarks:
    """Display-only benchmark lookups."""

    def test_exact(self, store):
        assert store.get_benchmark_price(KEYS, "Detached", "2015-06") == BenchmarkPrice(545000, "2015-06")

    def test_prior(self, store):
        assert store.get_benchmark_price(KEYS, "Detached", "2015-09") == BenchmarkPrice(545000, "2015-06")

    def test_falls_forward_when_nothing_prior(self, store):
        assert store.get_benchmark_price(KEYS, "Detached", "2014-01") == BenchmarkPrice(520000, "2015-01")

    def test_latest(self, store):
        assert store.get_latest_benchmark_price(KEYS, "Detached") == BenchmarkPrice(600000, "2016-03")

    def test_missing(self, store):
        assert store.get_benchmark_price(("Ajax",), "Detached", "2015-01") is None
        assert store.get_latest_benchmark_price(("Ajax",), "Detached") is None


# =============================================================================
# Loading
# =============================================================================


class TestLoading:
    """Row validation and file loaders."""

    @pytest.mark.parametrize("bad", [
        {"report_month": "2015-13", "area_name": "Ajax", "property_category": "Detached", "hpi_index": 1},
        {"report_month": "2015-1", "area_name": "Ajax", "property_category": "Detached", "hpi_index": 1},
        {"report_month": "2015-01", "area_name": "", "property_category": "Detached", "hpi_index": 1},
        {"report_month": "2015-01", "area_name": "Ajax", "property_category": "Detached", "hpi_index": 0},
        {"report_month": "2015-01", "area_name": "Ajax", "property_category": "Detached", "hpi_index": -3},
        {"report_month": "2015-01", "area_name": "Ajax", "property_category": "Detached"},
        {"report_month": "2015-01", "area_name": "Ajax", "property_category": "Detached", "hpi_index": "n/a"},
    ])
    def test_malformed_rows_rejected(self, bad):
        store = InMemoryIndexStore.from_rows([bad])
        assert len(store) == 0
        assert store.rejected_count == 1

    @pytest.mark.parametrize("bad", ["2015-01,Ajax,Detached,120", None, ["2015-01", "Ajax"]])
    def test_non_dict_rows_rejected(self, bad):
        good = {"report_month": "2015-01", "area_name": "Ajax", "property_category": "Detached", "hpi_index": 1}
        store = InMemoryIndexStore.from_rows([bad, good])
        assert len(store) == 1
        assert store.rejected_count == 1

    @pytest.mark.parametrize("benchmark", ["n/a", "nan", {"value": 1}])
    def test_unreadable_benchmark_keeps_index(self, benchmark):
        store = InMemoryIndexStore.from_rows([{
            "report_month": "2015-01", "area_name": "Ajax",
            "property_category": "Detached", "hpi_index": "120.5", "benchmark_price": benchmark,
        }])
        assert store.rejected_count == 0
        assert store.get_index_value(["Ajax"], "Detached", "2015-01").value == 120.5
        assert store.get_benchmark_price(["Ajax"], "Detached", "2015-01") is None

    def test_rejection_is_logged(self, caplog):
        InMemoryIndexStore.from_rows([{"report_month": "bad"}])
        assert "Rejected index row 0" in caplog.text

    def test_non_positive_benchmark_stored_as_none(self):
        row = IndexRow.from_dict({
            "report_month": "2015-01", "area_name": "Ajax",
            "property_category": "Detached", "hpi_index": "120.5", "benchmark_price": "0",
        })
        assert row.hpi_index == 120.5
        assert row.benchmark_price is None

    def test_from_json_list(self, tmp_path, rows):
        path = tmp_path / "market_hpi.json"
        path.write_text(json.dumps(rows))
        store = InMemoryIndexStore.from_file(path)
        assert len(store) == 5

    def test_from_json_object(self, tmp_path, rows):
        path = tmp_path / "market_hpi.json"
        path.write_text(json.dumps({"rows": rows}))
        assert len(InMemoryIndexStore.from_json(path)) == 5

    def test_from_csv(self, tmp_path):
        path = tmp_path / "market_hpi.csv"
        path.write_text(
            "report_month,area_name,property_category,hpi_index,benchmark_price\n"
            "2015-01,Ajax,Detached,150.0,480000\n"
            "2015-02,Ajax,Detached,152.5,\n"
        )
        store = InMemoryIndexStore.from_file(path)
        assert len(store) == 2
        assert store.get_latest_index_value(("Ajax",), "Detached").value == 152.5
        assert store.get_latest_benchmark_price(("Ajax",), "Detached").report_month == "2015-01"

    def test_missing_file_gives_empty_store(self, tmp_path):
        store = InMemoryIndexStore.from_file(tmp_path / "absent.json")
        assert len(store) == 0
        assert store.get_latest_index_value(KEYS, "Detached") is None
