"""
Era strategies for the Equity Bridge.

Each arm is an independent pure function of its data source and the
purchase record. It returns an EraEstimate, or None when its data cannot
value the purchase. The two arms share nothing but the finishing step in
the calculator.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from valuation.index_store.base import IndexStore
from valuation.models import DataEra, IndexPoint, PurchaseRecord, format_year_month
from valuation.tables import (
    DATA_SOURCE_HISTORIC,
    DATA_SOURCE_HPI,
    YearTable,
    get_data_era,
)


logger = logging.getLogger(__name__)


# Synthetic points sit mid-year and are scaled down onto an index-like magnitude
SYNTHETIC_ANCHOR_MONTH = 6
SYNTHETIC_INDEX_DIVISOR = 1000


@dataclass(frozen=True)
class EraEstimate:
    """Unrounded output of one era arm."""
    era: DataEra
    data_source: str
    factor: float
    index_at_purchase: float
    index_at_purchase_month: str
    index_current: float
    index_current_month: str
    trend: Tuple[IndexPoint, ...]
    purchase_match_exact: bool = True


def resolve_strategy(year: int) -> DataEra:
    """Select the era arm for a purchase year."""
    return get_data_era(year)


# =============================================================================
# HPI Arm
# =============================================================================


def hpi_arm(
    store: IndexStore,
    region_keys: Sequence[str],
    record: PurchaseRecord,
) -> Optional[EraEstimate]:
    """
    Value a purchase from the regional home price index.

    The purchase-side lookup uses the exact month or the nearest prior
    month, never a later one. The current side is the latest month present.
    The trend starts at the month actually used for the purchase index.

    Returns:
        EraEstimate, or None if either lookup finds nothing usable
    """
    category = record.property_category
    purchase = store.get_index_value(region_keys, category, record.year_month)
    if purchase is None or purchase.value <= 0:
        logger.debug("No purchase index for %s/%s at %s", record.region, category, record.year_month)
        return None

    current = store.get_latest_index_value(region_keys, category)
    if current is None or current.value <= 0:
        logger.debug("No current index for %s/%s", record.region, category)
        return None

    trend = store.get_index_trend(region_keys, category, purchase.report_month)

    return EraEstimate(
        era=DataEra.HPI,
        data_source=DATA_SOURCE_HPI,
        factor=current.value / purchase.value,
        index_at_purchase=purchase.value,
        index_at_purchase_month=purchase.report_month,
        index_current=current.value,
        index_current_month=current.report_month,
        trend=tuple(trend),
        purchase_match_exact=purchase.exact,
    )


# =============================================================================
# Historic Arm
# =============================================================================


def synthetic_trend(table: YearTable, from_year: int) -> Tuple[IndexPoint, ...]:
    """
    Yearly trend points generated from annual averages.

    Each point is tagged synthetic so it is never read as a real index value.
    """
    return tuple(
        IndexPoint(
            report_month=format_year_month(year, SYNTHETIC_ANCHOR_MONTH),
            index_value=average / SYNTHETIC_INDEX_DIVISOR,
            benchmark_price=average,
            synthetic=True,
        )
        for year, average in table.items()
        if year >= from_year
    )


def historic_arm(table: YearTable, record: PurchaseRecord) -> Optional[EraEstimate]:
    """
    Value a purchase from historic annual average prices.

    The purchase year falls back to the nearest year in the table; the
    current side is the table's latest year. The trend starts at that
    clamped year, so it always contains the purchase point.

    Returns:
        EraEstimate, or None if the table yields no usable average
    """
    purchase_average = table.nearest(record.year)
    current_average = table.nearest(table.last_year)
    if not purchase_average or not current_average:
        logger.debug("No historic average usable for %s", record.year)
        return None

    anchor_year = min(max(record.year, table.first_year), table.last_year)

    return EraEstimate(
        era=DataEra.HISTORIC,
        data_source=DATA_SOURCE_HISTORIC,
        factor=current_average / purchase_average,
        index_at_purchase=purchase_average / SYNTHETIC_INDEX_DIVISOR,
        index_at_purchase_month=format_year_month(anchor_year, SYNTHETIC_ANCHOR_MONTH),
        index_current=current_average / SYNTHETIC_INDEX_DIVISOR,
        index_current_month=format_year_month(table.last_year, SYNTHETIC_ANCHOR_MONTH),
        trend=synthetic_trend(table, anchor_year),
        purchase_match_exact=record.year in table,
    )
