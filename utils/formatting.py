"""
Formatting utilities.
"""


def format_currency(amount: float, currency: str = "CAD") -> str:
    """
    Format an amount as whole-unit currency.

    Args:
        amount: The amount in whole units (dollars, not cents).
        currency: Currency code (default CAD).

    Returns:
        Formatted currency string, e.g. "$775,801" or "-$12,000".
    """
    symbols = {
        "CAD": "$",
        "USD": "US$",
        "GBP": "£",
    }
    symbol = symbols.get(currency, currency + " ")
    whole = int(round(amount))
    sign = "-" if whole < 0 else ""
    return f"{sign}{symbol}{abs(whole):,}"


def format_compact_currency(amount: float) -> str:
    """
    Format a dollar amount compactly: $1.2M, $850K, $950.

    Args:
        amount: The amount in dollars.
    """
    sign = "-" if amount < 0 else ""
    value = abs(amount)
    if value >= 1_000_000:
        return f"{sign}${value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{sign}${value / 1_000:.0f}K"
    return f"{sign}${value:.0f}"


def format_percent(value: float, decimals: int = 1) -> str:
    """
    Format a number as a percentage.

    Args:
        value: The percentage value.
        decimals: Number of decimal places.

    Returns:
        Formatted percentage string.
    """
    return f"{value:.{decimals}f}%"
