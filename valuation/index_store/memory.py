"""
In-Memory Index Store

Holds HPI rows shaped like the TRREB market_hpi table:

    report_month, area_name, property_category, hpi_index, benchmark_price

Rows can be loaded from a list of dicts, a JSON file, or a CSV export.
Malformed rows are rejected and logged; a missing file gives an empty
store, in which case every estimate falls back to the historic bridge.
"""

from __future__ import annotations

import csv
import json
import logging
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Iterable, Optional, Sequence

from valuation.index_store.base import IndexStore
from valuation.models import BenchmarkPrice, IndexLookup, IndexPoint


logger = logging.getLogger(__name__)


REPORT_MONTH_PATTERN: Final = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


# =============================================================================
# Row Schema
# =============================================================================


@dataclass(frozen=True)
class IndexRow:
    """One (area, category, month) HPI reading."""

    report_month: str
    area_name: str
    property_category: str
    hpi_index: float
    benchmark_price: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate row constraints."""
        if not REPORT_MONTH_PATTERN.match(self.report_month or ""):
            raise ValueError(f"report_month must be YYYY-MM: {self.report_month!r}")
        if not self.area_name:
            raise ValueError("area_name is required")
        if not self.property_category:
            raise ValueError("property_category is required")
        if not math.isfinite(self.hpi_index) or self.hpi_index <= 0:
            raise ValueError(f"hpi_index must be positive: {self.hpi_index!r}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IndexRow":
        """
        Build a row from a raw record.

        Numeric fields may arrive as strings (CSV). A blank, unparseable or
        non-positive benchmark price is stored as None; the index reading
        is kept.
        """
        benchmark = data.get("benchmark_price")
        try:
            benchmark_price = None if benchmark in (None, "") else float(benchmark)
        except (TypeError, ValueError):
            benchmark_price = None
        if benchmark_price is not None and (not math.isfinite(benchmark_price) or benchmark_price <= 0):
            benchmark_price = None

        return cls(
            report_month=str(data.get("report_month", "")).strip(),
            area_name=str(data.get("area_name", "")).strip(),
            property_category=str(data.get("property_category", "")).strip(),
            hpi_index=float(data["hpi_index"]),
            benchmark_price=benchmark_price,
        )


# =============================================================================
# Store
# =============================================================================


class InMemoryIndexStore(IndexStore):
    """
    Index store backed by in-memory series keyed by (area, category).

    Multi-key queries merge the series of every key. When two keys carry
    the same month, the key that comes first in region_keys wins.
    """

    def __init__(self, rows: Iterable[IndexRow] = ()):
        self._series: dict[tuple[str, str], dict[str, IndexRow]] = {}
        self._rejected = 0
        for row in rows:
            self.add(row)

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def from_rows(cls, records: Iterable[dict[str, Any]]) -> "InMemoryIndexStore":
        """
        Build a store from raw records, rejecting malformed ones.

        Args:
            records: Dicts with market_hpi columns

        Returns:
            Populated store
        """
        store = cls()
        for position, record in enumerate(records):
            try:
                row = IndexRow.from_dict(record)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                store._rejected += 1
                logger.warning("Rejected index row %d: %s", position, e)
                continue
            store.add(row)
        return store

    @classmethod
    def from_json(cls, path: str | Path) -> "InMemoryIndexStore":
        """
        Load rows from a JSON file.

        Accepts either a list of rows or an object with a "rows" list.
        A missing file yields an empty store.
        """
        json_path = Path(path)
        if not json_path.exists():
            logger.warning("Index data file not found: %s (historic bridge only)", json_path)
            return cls()

        data = json.loads(json_path.read_text())
        records = data.get("rows", []) if isinstance(data, dict) else data
        store = cls.from_rows(records)
        logger.info("Loaded %d index rows from %s", len(store), json_path)
        return store

    @classmethod
    def from_csv(cls, path: str | Path) -> "InMemoryIndexStore":
        """Load rows from a CSV export with market_hpi column headers."""
        csv_path = Path(path)
        if not csv_path.exists():
            logger.warning("Index data file not found: %s (historic bridge only)", csv_path)
            return cls()

        with open(csv_path, newline="") as f:
            store = cls.from_rows(csv.DictReader(f))
        logger.info("Loaded %d index rows from %s", len(store), csv_path)
        return store

    @classmethod
    def from_file(cls, path: str | Path) -> "InMemoryIndexStore":
        """Load from JSON or CSV depending on the file extension."""
        if Path(path).suffix.lower() == ".csv":
            return cls.from_csv(path)
        return cls.from_json(path)

    def add(self, row: IndexRow) -> None:
        """Add or replace a row."""
        key = (row.area_name, row.property_category)
        self._series.setdefault(key, {})[row.report_month] = row

    def __len__(self) -> int:
        return sum(len(months) for months in self._series.values())

    @property
    def rejected_count(self) -> int:
        """Rows rejected during loading."""
        return self._rejected

    # =========================================================================
    # Queries
    # =========================================================================

    def _merged(self, region_keys: Sequence[str], category: str) -> dict[str, IndexRow]:
        """Merge the monthly series of every key, earlier keys taking priority."""
        merged: dict[str, IndexRow] = {}
        for key in region_keys:
            for month, row in self._series.get((key, category), {}).items():
                merged.setdefault(month, row)
        return merged

    def get_index_value(
        self,
        region_keys: Sequence[str],
        category: str,
        year_month: str,
    ) -> Optional[IndexLookup]:
        merged = self._merged(region_keys, category)

        exact = merged.get(year_month)
        if exact is not None:
            return IndexLookup(value=exact.hpi_index, report_month=year_month, exact=True)

        prior = [m for m in merged if m < year_month]
        if not prior:
            return None

        month = max(prior)
        logger.debug(
            "No index for %s/%s at %s, using prior month %s",
            region_keys[0] if region_keys else "?",
            category,
            year_month,
            month,
        )
        return IndexLookup(value=merged[month].hpi_index, report_month=month, exact=False)

    def get_latest_index_value(
        self,
        region_keys: Sequence[str],
        category: str,
    ) -> Optional[IndexLookup]:
        merged = self._merged(region_keys, category)
        if not merged:
            return None
        month = max(merged)
        return IndexLookup(value=merged[month].hpi_index, report_month=month, exact=True)

    def get_index_trend(
        self,
        region_keys: Sequence[str],
        category: str,
        from_year_month: str,
    ) -> list[IndexPoint]:
        merged = self._merged(region_keys, category)
        return [
            IndexPoint(
                report_month=month,
                index_value=merged[month].hpi_index,
                benchmark_price=merged[month].benchmark_price,
            )
            for month in sorted(merged)
            if month >= from_year_month
        ]

    def _benchmarks(self, region_keys: Sequence[str], category: str) -> dict[str, float]:
        merged = self._merged(region_keys, category)
        return {
            month: row.benchmark_price
            for month, row in merged.items()
            if row.benchmark_price is not None
        }

    def get_benchmark_price(
        self,
        region_keys: Sequence[str],
        category: str,
        year_month: str,
    ) -> Optional[BenchmarkPrice]:
        prices = self._benchmarks(region_keys, category)
        if not prices:
            return None

        if year_month in prices:
            return BenchmarkPrice(price=prices[year_month], report_month=year_month)

        prior = [m for m in prices if m < year_month]
        if prior:
            month = max(prior)
            return BenchmarkPrice(price=prices[month], report_month=month)

        month = min(m for m in prices if m > year_month)
        return BenchmarkPrice(price=prices[month], report_month=month)

    def get_latest_benchmark_price(
        self,
        region_keys: Sequence[str],
        category: str,
    ) -> Optional[BenchmarkPrice]:
        prices = self._benchmarks(region_keys, category)
        if not prices:
            return None
        month = max(prices)
        return BenchmarkPrice(price=prices[month], report_month=month)

    def get_date_range(
        self,
        region_keys: Sequence[str],
        category: str,
    ) -> Optional[tuple[str, str]]:
        merged = self._merged(region_keys, category)
        if not merged:
            return None
        return min(merged), max(merged)
