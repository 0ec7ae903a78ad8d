"""
Benchmark cache.

Memoises the latest benchmark price per (region, category). The "current"
month is treated as stable for the life of the process, so entries are
never evicted; call clear() when fresher data is loaded.

Owned by the composition root and injected into the Equity Bridge.
"""

from typing import Dict, Optional, Tuple

from .models import BenchmarkPrice


class BenchmarkCache:
    """Process-lifetime cache of current benchmark prices."""

    def __init__(self):
        self._entries: Dict[Tuple[str, str], BenchmarkPrice] = {}

    def get(self, region: str, category: str) -> Optional[BenchmarkPrice]:
        return self._entries.get((region, category))

    def set(self, region: str, category: str, value: BenchmarkPrice) -> None:
        self._entries[(region, category)] = value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
