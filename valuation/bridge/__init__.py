"""
Equity Bridge

Dual-era appreciation: regional HPI where available, historic annual
averages before the index starts and whenever the index is sparse.
"""

from .calculator import EquityBridge
from .scenarios import SCENARIO_DEFINITIONS, build_scenarios, round_half_up
from .strategies import (
    SYNTHETIC_INDEX_DIVISOR,
    EraEstimate,
    historic_arm,
    hpi_arm,
    resolve_strategy,
    synthetic_trend,
)

__all__ = [
    "EquityBridge",
    "EraEstimate",
    "SCENARIO_DEFINITIONS",
    "SYNTHETIC_INDEX_DIVISOR",
    "build_scenarios",
    "historic_arm",
    "hpi_arm",
    "resolve_strategy",
    "round_half_up",
    "synthetic_trend",
]
