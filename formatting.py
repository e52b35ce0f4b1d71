"""
Display formatting for amounts, percentages and durations.
Non-finite values render as "n/a" instead of raising.
"""
import math
from decimal import Context, Decimal, ROUND_HALF_UP


# wide enough for any finite float with a few decimals
_CONTEXT = Context(prec=400)


def _fixed(value: float, places: int) -> str:
    """Fixed-point string with halves rounded up, as shown in the browser UI"""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_CONTEXT))


def format_currency(value: float) -> str:
    """
    Format an amount in EUR with k/M abbreviations.

    Args:
        value: Amount to format

    Returns:
        String such as "1.25M EUR", "12.5k EUR" or "980 EUR"
    """
    if not math.isfinite(value):
        return "n/a"
    magnitude = abs(value)
    sign = "-" if value < 0 else ""
    if magnitude >= 1_000_000:
        return f"{sign}{_fixed(magnitude / 1_000_000, 2)}M EUR"
    if magnitude >= 1_000:
        return f"{sign}{_fixed(magnitude / 1_000, 1)}k EUR"
    return f"{sign}{math.floor(magnitude + 0.5)} EUR"


def format_short(value: float) -> str:
    """Format a number with k/M abbreviation and no currency suffix"""
    if not math.isfinite(value):
        return "n/a"
    if abs(value) >= 1_000_000:
        return f"{_fixed(value / 1_000_000, 2)}M"
    if abs(value) >= 1_000:
        return f"{_fixed(value / 1_000, 1)}k"
    return str(math.floor(value + 0.5))


def format_pct(value: float) -> str:
    """Format a value that is already in percent, e.g. 12.3 -> "12.3%" """
    if not math.isfinite(value):
        return "n/a"
    return f"{_fixed(value, 1)}%"


def format_years(months: float) -> str:
    """Format a month count as "8 mo" below a year, else "2.5y" """
    if not math.isfinite(months):
        return "n/a"
    years = months / 12
    if years < 1:
        return f"{math.floor(months + 0.5)} mo"
    return f"{_fixed(years, 1)}y"


def format_number(value: float) -> str:
    """Plain number without a trailing .0 for whole values"""
    return f"{value:g}"
