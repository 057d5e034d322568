"""Formatting and conversion utilities."""

from datetime import datetime, timedelta
from decimal import Decimal

from hex_stakes.constants import HEX_DECIMALS, HEX_START_DATE


def as_int(value, *, default: int = 0) -> int:
    """Convert value to int, handling various types."""
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        v = value.strip()
        if v.startswith("0x"):
            return int(v, 16)
        return int(v)
    return int(value)


def day_to_date(day: int) -> datetime:
    """Calendar date (UTC midnight) of a protocol day index."""
    return HEX_START_DATE + timedelta(days=day)


def date_to_day(when: datetime) -> int:
    """Protocol day index containing `when` (negative before launch)."""
    return (when - HEX_START_DATE) // timedelta(days=1)


def hearts_to_hex(hearts: int) -> Decimal:
    """Convert hearts to HEX."""
    return Decimal(hearts) / HEX_DECIMALS


def format_hex(hearts: int, *, decimals: int = 3) -> str:
    """Format hearts as HEX."""
    s = f"{hearts_to_hex(hearts):,.{decimals}f}".rstrip("0").rstrip(".")
    return f"{s} HEX"


def format_shares(shares: int, *, decimals: int = 3) -> str:
    """Format stake shares as T-shares (1e12 shares)."""
    t_shares = Decimal(shares) / Decimal(10**12)
    s = f"{t_shares:.{decimals}f}".rstrip("0").rstrip(".")
    return f"{s} T-shares"


def format_percent(fraction: float, *, decimals: int = 1) -> str:
    """Format a 0..1 fraction as a percentage."""
    return f"{fraction * 100:.{decimals}f}%"


def format_usd(hearts: int, price: float | None) -> str:
    """Format the USD value of an amount of hearts, or an empty string without a price."""
    if price is None:
        return ""
    value = hearts_to_hex(hearts) * Decimal(str(price))
    return f"${value:,.2f}"
