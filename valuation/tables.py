"""
Static Reference Tables

Year-keyed tables loaded once at import:
- TRREB historic annual average prices (1980-2025)
- Canadian 5-year fixed mortgage rates (1980-2025)

Tables are validated at construction. A malformed table raises ValueError
and aborts start-up rather than failing per request.
"""

from __future__ import annotations

import math
from bisect import bisect_left
from types import MappingProxyType
from typing import Final, Iterator, Mapping, Optional

from .models import DataEra, HistoricAveragePoint


# =============================================================================
# Year Table
# =============================================================================


class YearTable:
    """
    Immutable year -> value lookup.

    Exact lookups are O(1); nearest-year fallback is a binary search over
    the sorted years. Years must be contiguous and values positive.
    """

    def __init__(self, name: str, values: Mapping[int, float]):
        """
        Build and validate a table.

        Args:
            name: Table name used in error messages
            values: Mapping of year to value

        Raises:
            ValueError: If the table is empty, has gaps, or holds a
                non-positive or non-finite value
        """
        if not values:
            raise ValueError(f"{name}: table is empty")

        years = sorted(values)
        expected = list(range(years[0], years[-1] + 1))
        if years != expected:
            missing = sorted(set(expected) - set(years))
            raise ValueError(f"{name}: missing years {missing}")

        for year in years:
            value = values[year]
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name}: invalid value for {year}: {value!r}")

        self._name = name
        self._years: tuple[int, ...] = tuple(years)
        self._values: Mapping[int, float] = MappingProxyType({y: float(values[y]) for y in years})

    @property
    def name(self) -> str:
        return self._name

    @property
    def first_year(self) -> int:
        return self._years[0]

    @property
    def last_year(self) -> int:
        return self._years[-1]

    def __len__(self) -> int:
        return len(self._years)

    def __contains__(self, year: object) -> bool:
        return year in self._values

    def __iter__(self) -> Iterator[int]:
        return iter(self._years)

    def get(self, year: int) -> Optional[float]:
        """Exact lookup. Returns None if the year is not in the table."""
        return self._values.get(year)

    def nearest(self, year: int) -> Optional[float]:
        """
        Lookup with nearest-year fallback.

        Years before the table use the first year, years after use the
        last. Interior misses use the closest year (earlier year on ties).
        """
        if not self._years:
            return None

        exact = self._values.get(year)
        if exact is not None:
            return exact

        if year < self._years[0]:
            return self._values[self._years[0]]
        if year > self._years[-1]:
            return self._values[self._years[-1]]

        idx = bisect_left(self._years, year)
        before = self._years[idx - 1]
        after = self._years[idx]
        closest = before if (year - before) <= (after - year) else after
        return self._values[closest]

    def items(self) -> Iterator[tuple[int, float]]:
        for year in self._years:
            yield year, self._values[year]


# =============================================================================
# TRREB Historic Annual Average Prices
# Source: Toronto Regional Real Estate Board historical statistics
# =============================================================================

HISTORIC_AVERAGES: Final[YearTable] = YearTable("historic_averages", {
    1980: 75694,
    1981: 90203,
    1982: 95496,
    1983: 101626,
    1984: 102318,
    1985: 109094,
    1986: 138925,
    1987: 189105,
    1988: 229635,
    1989: 273698,
    1990: 255020,
    1991: 234313,
    1992: 214971,
    1993: 206490,
    1994: 208921,
    1995: 203028,
    1996: 198150,
    1997: 211307,
    1998: 216815,
    1999: 228372,
    2000: 243255,
    2001: 251508,
    2002: 275231,
    2003: 293067,
    2004: 315231,
    2005: 335907,
    2006: 351941,
    2007: 376236,
    2008: 379347,
    2009: 395460,
    2010: 431276,
    2011: 465014,
    2012: 497298,
    2013: 523036,
    2014: 566726,
    2015: 622217,
    2016: 729922,
    2017: 822681,
    2018: 787300,
    2019: 819319,
    2020: 929699,
    2021: 1095475,
    2022: 1189850,
    2023: 1126604,
    2024: 1120241,
    2025: 1067968,
})


# =============================================================================
# Historical 5-Year Fixed Mortgage Rates (annual %, approximate averages)
# Sources: Bank of Canada and published historical rate series
# =============================================================================

HISTORICAL_RATES: Final[YearTable] = YearTable("historical_rates", {
    # 1980s - high inflation era
    1980: 14.25,
    1981: 18.38,
    1982: 17.89,
    1983: 13.23,
    1984: 13.58,
    1985: 11.75,
    1986: 10.52,
    1987: 10.78,
    1988: 11.31,
    1989: 12.06,
    # 1990s
    1990: 13.40,
    1991: 11.12,
    1992: 9.56,
    1993: 8.62,
    1994: 9.52,
    1995: 9.21,
    1996: 7.94,
    1997: 7.07,
    1998: 6.80,
    1999: 7.08,
    # 2000s
    2000: 7.87,
    2001: 7.02,
    2002: 6.60,
    2003: 5.94,
    2004: 5.77,
    2005: 5.49,
    2006: 5.95,
    2007: 6.25,
    2008: 5.75,
    2009: 5.19,
    # 2010s
    2010: 5.25,
    2011: 5.14,
    2012: 5.14,
    2013: 5.14,
    2014: 4.79,
    2015: 4.64,
    2016: 4.64,
    2017: 4.84,
    2018: 5.14,
    2019: 5.19,
    # 2020s
    2020: 4.79,
    2021: 4.59,
    2022: 5.14,
    2023: 6.49,
    2024: 5.99,
    2025: 5.49,
})


# =============================================================================
# Era Boundaries
# =============================================================================

# First year of continuous HPI coverage
HPI_START_YEAR: Final[int] = 2012

EARLIEST_YEAR: Final[int] = HISTORIC_AVERAGES.first_year
LATEST_YEAR: Final[int] = HISTORIC_AVERAGES.last_year

DEFAULT_MORTGAGE_RATE: Final[float] = 5.5

DATA_SOURCE_HISTORIC: Final[str] = "TRREB Historic Annual Averages"
DATA_SOURCE_HPI: Final[str] = "TRREB HPI Index"


def get_data_era(year: int) -> DataEra:
    """Historic before the index starts, HPI from HPI_START_YEAR on."""
    return DataEra.HISTORIC if year < HPI_START_YEAR else DataEra.HPI


def get_data_era_label(year: int) -> str:
    """Display label for the data source used for a purchase year."""
    if get_data_era(year) == DataEra.HISTORIC:
        return DATA_SOURCE_HISTORIC
    return DATA_SOURCE_HPI


def has_data_for_year(year: int) -> bool:
    return EARLIEST_YEAR <= year <= LATEST_YEAR


def historic_points(from_year: int, to_year: int = LATEST_YEAR) -> list[HistoricAveragePoint]:
    """Historic averages for an inclusive year range."""
    return [
        HistoricAveragePoint(year=year, average_price=price)
        for year, price in HISTORIC_AVERAGES.items()
        if from_year <= year <= to_year
    ]


def historic_growth_ratio(from_year: int, to_year: Optional[int] = None) -> float:
    """
    Growth in the average price between two years.

    Args:
        from_year: Starting year
        to_year: Target year (default: latest year in the table)
    """
    target_year = to_year if to_year is not None else LATEST_YEAR
    return HISTORIC_AVERAGES.nearest(target_year) / HISTORIC_AVERAGES.nearest(from_year)


def get_historical_rate(year: int, default: float = DEFAULT_MORTGAGE_RATE) -> float:
    """
    Approximate 5-year fixed rate for a purchase year.

    Uses the nearest year outside the table's range.
    """
    rate = HISTORICAL_RATES.nearest(year)
    return rate if rate is not None else default
