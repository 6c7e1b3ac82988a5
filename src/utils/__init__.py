"""s3-db-sync - Shared utilities."""

from datetime import datetime
from typing import Optional

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(size: int) -> str:
    """Format a byte count for humans.

    The value is divided by 1024 until it drops below 1024 or the largest
    unit (TB) is reached, then rounded to two decimals.

    Args:
        size: Size in bytes

    Returns:
        Formatted size such as ``"0 B"``, ``"1 KB"`` or ``"1.5 KB"``

    Raises:
        ValueError: If the size is negative
    """
    if size < 0:
        raise ValueError(f"Size must be non-negative, got {size}")

    value = float(size)
    tier = 0
    while value >= 1024 and tier < len(SIZE_UNITS) - 1:
        value /= 1024
        tier += 1

    # Trailing zeros are dropped: 1.50 -> 1.5, 1.00 -> 1
    number = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{number} {SIZE_UNITS[tier]}"


def format_timestamp(value: Optional[datetime]) -> str:
    """Format a listing timestamp, or ``-`` when missing."""
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M:%S")
