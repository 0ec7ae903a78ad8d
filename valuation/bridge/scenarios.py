"""
Market scenarios and rounding.

The three bands are fixed policy offsets applied to the balanced estimate.
They are not derived from volatility in the data.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Tuple

from valuation.models import MarketScenario


# (name, adjustment percent, label)
SCENARIO_DEFINITIONS: Tuple[Tuple[str, float, str], ...] = (
    ("hot", 4.0, "If Market Heats Up"),
    ("balanced", 0.0, "Current Estimate"),
    ("soft", -8.0, "If Market Softens"),
)


def round_half_up(value: float, places: int = 0):
    """
    Round half away from zero.

    Python's round() uses banker's rounding; currency figures here use the
    conventional half-up rule instead.

    Returns:
        int when places == 0, otherwise float
    """
    exponent = Decimal(1).scaleb(-places)
    rounded = Decimal(repr(value)).quantize(exponent, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(rounded)
    return float(rounded)


def build_scenarios(balanced_value: int, purchase_price: float) -> List[MarketScenario]:
    """
    Build hot / balanced / soft scenarios around an estimate.

    Args:
        balanced_value: Rounded balanced estimate
        purchase_price: Original purchase price

    Returns:
        Scenarios in hot, balanced, soft order, with equity in whole units
    """
    scenarios = []
    for name, adjustment, label in SCENARIO_DEFINITIONS:
        value = round_half_up(balanced_value * (1 + adjustment / 100))
        scenarios.append(MarketScenario(
            name=name,
            value=value,
            equity=round_half_up(value - purchase_price),
            adjustment_percent=adjustment,
            label=label,
        ))
    return scenarios
