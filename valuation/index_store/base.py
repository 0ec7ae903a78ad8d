"""
Index Store interface.

The Equity Bridge reads HPI data only through this interface. Lookups
return None for "not found"; they never raise for missing data.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from valuation.models import BenchmarkPrice, IndexLookup, IndexPoint


class IndexStore(ABC):
    """Abstract read interface over a (region, category, month) HPI series."""

    @abstractmethod
    def get_index_value(
        self,
        region_keys: Sequence[str],
        category: str,
        year_month: str,
    ) -> Optional[IndexLookup]:
        """
        Get the index value for a purchase month.

        An exact month match across any of the keys wins. Otherwise the
        nearest prior month is used. Later months are never used.

        Args:
            region_keys: Lookup keys from resolve_lookup_keys()
            category: Property category
            year_month: Month in YYYY-MM format

        Returns:
            IndexLookup (exact=False on prior-month fallback), or None.
        """
        pass

    @abstractmethod
    def get_latest_index_value(
        self,
        region_keys: Sequence[str],
        category: str,
    ) -> Optional[IndexLookup]:
        """Get the most recent index value present for the region/category."""
        pass

    @abstractmethod
    def get_index_trend(
        self,
        region_keys: Sequence[str],
        category: str,
        from_year_month: str,
    ) -> List[IndexPoint]:
        """Get index points from a month onwards, ascending by month."""
        pass

    @abstractmethod
    def get_benchmark_price(
        self,
        region_keys: Sequence[str],
        category: str,
        year_month: str,
    ) -> Optional[BenchmarkPrice]:
        """
        Get the benchmark price for a month.

        Falls back to the nearest prior month, then the nearest later
        month. Display only.
        """
        pass

    @abstractmethod
    def get_latest_benchmark_price(
        self,
        region_keys: Sequence[str],
        category: str,
    ) -> Optional[BenchmarkPrice]:
        """Get the most recent benchmark price for the region/category."""
        pass

    @abstractmethod
    def get_date_range(
        self,
        region_keys: Sequence[str],
        category: str,
    ) -> Optional[Tuple[str, str]]:
        """Get (earliest, latest) report months available, or None."""
        pass
