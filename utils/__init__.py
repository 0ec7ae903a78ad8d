"""
Utility modules for the equity engine.
"""

from .formatting import format_currency, format_compact_currency, format_percent
from .config import Config, configure_logging

__all__ = [
    "format_currency",
    "format_compact_currency",
    "format_percent",
    "Config",
    "configure_logging",
]
