"""
Region Resolver

Maps modern GTA area names to the historical TRREB district codes used in
older index reports. A modern area can span several historic districts
(Brampton covers W23 and W24), and both the dashed and undashed spellings
appear in the source data.

Pure functions only - no I/O.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping


# =============================================================================
# District Mappings (modern area name -> historic district codes)
# =============================================================================

DISTRICT_MAPPINGS: Final[Mapping[str, tuple[str, ...]]] = MappingProxyType({
    # --- DURHAM REGION ---
    "Pickering": ("E13", "E-13"),
    "Ajax": ("E14", "E-14"),
    "Whitby": ("E15", "E-15"),
    "Oshawa": ("E16", "E-16"),
    "Clarington": ("E17", "E-17"),
    "Bowmanville": ("E17", "E-17"),
    "Scugog": ("E18", "E-18"),
    "Uxbridge": ("E19", "E-19"),
    "Brock": ("E20", "E-20"),

    # --- PEEL REGION ---
    "Brampton": ("W23", "W24", "W-23", "W-24"),
    "Caledon": ("W25", "W-25"),
    "Mississauga": (
        "W12", "W13", "W14", "W15", "W16", "W17", "W18", "W19", "W20",
        "W-12", "W-13", "W-14", "W-15", "W-16", "W-17", "W-18", "W-19", "W-20",
    ),

    # --- HALTON REGION ---
    "Oakville": ("W06", "W-06", "W16"),
    "Burlington": ("W31", "W-31"),
    "Milton": ("W25", "W-25"),
    "Halton Hills": ("W26", "W-26"),

    # --- YORK REGION ---
    "Richmond Hill": ("N03", "N04", "N05", "N-03", "N-04", "N-05"),
    "Markham": ("N10", "N11", "N-10", "N-11"),
    "Vaughan": ("N06", "N07", "N08", "N-06", "N-07", "N-08"),
    "Aurora": ("N06",),
    "Newmarket": ("N07",),
    "King": ("N20",),
    "Whitchurch-Stouffville": ("N18",),
    "Georgina": ("N17",),

    # --- TORONTO (CENTRAL) ---
    "Toronto C01": ("C01", "C-1"),
    "Toronto C02": ("C02", "C-2"),
    "Toronto C03": ("C03", "C-3"),
    "Toronto C04": ("C04", "C-4"),
    "Toronto C06": ("C06", "C-6"),
    "Toronto C07": ("C07", "C-7"),
    "Toronto C08": ("C08", "C-8"),
    "Toronto C09": ("C09", "C-9"),
    "Toronto C10": ("C10", "C-10"),
    "Toronto C11": ("C11", "C-11"),
    "Toronto C12": ("C12", "C-12"),
    "Toronto C13": ("C13", "C-13"),
    "Toronto C14": ("C14", "C-14"),
    "Toronto C15": ("C15", "C-15"),

    # --- TORONTO (WEST) ---
    "Toronto W01": ("W01", "W-1"),
    "Toronto W02": ("W02", "W-2"),
    "Toronto W03": ("W03", "W-3"),
    "Toronto W04": ("W04", "W-4"),
    "Toronto W05": ("W05", "W-5"),
    "Toronto W06": ("W06", "W-6"),
    "Toronto W07": ("W07", "W-7"),
    "Toronto W08": ("W08", "W-8"),
    "Toronto W09": ("W09", "W-9"),
    "Toronto W10": ("W10", "W-10"),

    # --- TORONTO (EAST) ---
    "Toronto E01": ("E01", "E-1"),
    "Toronto E02": ("E02", "E-2"),
    "Toronto E03": ("E03", "E-3"),
    "Toronto E04": ("E04", "E-4"),
    "Toronto E05": ("E05", "E-5"),
    "Toronto E06": ("E06", "E-6"),
    "Toronto E07": ("E07", "E-7"),
    "Toronto E08": ("E08", "E-8"),
    "Toronto E09": ("E09", "E-9"),
    "Toronto E10": ("E10", "E-10"),
    "Toronto E11": ("E11", "E-11"),
})


# =============================================================================
# Selectable Catalogues
# =============================================================================

# Known GTA regions offered to users, Durham first
KNOWN_REGIONS: Final[tuple[str, ...]] = (
    # Durham Region
    "Ajax", "Brock", "Clarington", "Oshawa", "Pickering", "Scugog", "Uxbridge", "Whitby",
    # Halton Region
    "Burlington", "Halton Hills", "Milton", "Oakville",
    # Peel Region
    "Brampton", "Caledon", "Mississauga",
    # Toronto West
    "Toronto W01", "Toronto W02", "Toronto W03", "Toronto W04", "Toronto W05",
    "Toronto W06", "Toronto W07", "Toronto W08", "Toronto W09", "Toronto W10",
    # Toronto Central
    "Toronto C01", "Toronto C02", "Toronto C03", "Toronto C04", "Toronto C06",
    "Toronto C07", "Toronto C08", "Toronto C09", "Toronto C10", "Toronto C11",
    "Toronto C12", "Toronto C13", "Toronto C14", "Toronto C15",
    # Toronto East
    "Toronto E01", "Toronto E02", "Toronto E03", "Toronto E04", "Toronto E05",
    "Toronto E06", "Toronto E07", "Toronto E08", "Toronto E09", "Toronto E10",
    "Toronto E11",
    # York Region
    "Aurora", "East Gwillimbury", "Georgina", "King", "Markham", "Newmarket",
    "Richmond Hill", "Vaughan", "Whitchurch-Stouffville",
    # Dufferin County
    "Orangeville",
    # Simcoe County
    "Adjala-Tosorontio", "Bradford West Gwillimbury", "Essa", "Innisfil", "New Tecumseth",
)

_KNOWN_REGIONS_LOWER: Final[frozenset[str]] = frozenset(r.lower() for r in KNOWN_REGIONS)

# Canonical property categories as they appear in the index
PROPERTY_CATEGORIES: Final[tuple[str, ...]] = (
    "Detached",
    "Semi-Detached",
    "Townhouse",
    "Condo Apt",
    "Condo Townhouse",
    "Link",
)

# Source-data spellings -> canonical category
_CATEGORY_ALIASES: Final[Mapping[str, str]] = MappingProxyType({
    "detached": "Detached",
    "semi-detached": "Semi-Detached",
    "semi detached": "Semi-Detached",
    "townhouse": "Townhouse",
    "att/row/twnhouse": "Townhouse",
    "condo apt": "Condo Apt",
    "condo apartment": "Condo Apt",
    "condo townhouse": "Condo Townhouse",
    "link": "Link",
})


# =============================================================================
# Resolver
# =============================================================================


def resolve_lookup_keys(region_name: str) -> tuple[str, ...]:
    """
    Get every name a region may be stored under.

    The input name always comes first, followed by its historic district
    codes. Unknown names resolve to themselves alone.

    Args:
        region_name: Modern area name (e.g. "Pickering")

    Returns:
        Ordered, de-duplicated lookup keys (e.g. ("Pickering", "E13", "E-13"))
    """
    keys = [region_name]
    for code in DISTRICT_MAPPINGS.get(region_name, ()):
        if code not in keys:
            keys.append(code)
    return tuple(keys)


def normalize_area_name(db_name: str) -> str:
    """
    Map a stored area name or district code back to its modern name.

    Returns the input unchanged when no mapping exists.
    """
    for modern, codes in DISTRICT_MAPPINGS.items():
        if db_name == modern or db_name in codes:
            return modern
    return db_name


def is_known_region(name: str) -> bool:
    """Check a region against the known GTA catalogue (case-insensitive)."""
    if not name:
        return False
    return name.strip().lower() in _KNOWN_REGIONS_LOWER


def normalize_property_category(value: str) -> str:
    """
    Normalise a property category to its canonical index spelling.

    Unrecognised values are returned stripped but otherwise unchanged.
    """
    stripped = value.strip()
    return _CATEGORY_ALIASES.get(stripped.lower(), stripped)
