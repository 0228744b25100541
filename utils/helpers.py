"""
Helper functions for numeric coercion and entity normalization.
"""

import math
import numbers
import re
from typing import Any


def normalize_keyword(keyword: str) -> str:
    """
    Normalize a keyword for consistent matching.

    Args:
        keyword: Raw keyword string

    Returns:
        Normalized keyword (lowercase, stripped, single spaces)
    """
    if not keyword:
        return ""

    # Lowercase
    keyword = keyword.lower()

    # Strip whitespace
    keyword = keyword.strip()

    # Replace multiple spaces with single space
    keyword = re.sub(r'\s+', ' ', keyword)

    return keyword


def entity_key(entity: str) -> str:
    """Case-insensitive grouping key for a query or page."""
    if not entity:
        return ""
    return entity.strip().lower()


def safe_float(value: Any, default: float = 0.0) -> float:
    """
    Safely convert a value to a finite float.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Float value
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (ValueError, TypeError):
        return default
    if not math.isfinite(result):
        return default
    return result


def safe_int(value: Any, default: int = 0) -> int:
    """
    Safely convert a value to integer.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Integer value
    """
    result = safe_float(value, None)
    if result is None:
        return default
    return int(result)


def safe_count(value: Any) -> int:
    """
    Coerce a count such as search volume.

    Anything that is not a non-negative whole number becomes 0.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return 0
    if isinstance(value, numbers.Integral):
        return int(value) if value >= 0 else 0
    value = float(value)
    if not math.isfinite(value) or value < 0 or not value.is_integer():
        return 0
    return int(value)


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a value into [lower, upper]."""
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def format_percentage(value: float, decimals: int = 1) -> str:
    """
    Format a decimal as percentage string.

    Args:
        value: Decimal value (0.15 = 15%)
        decimals: Number of decimal places

    Returns:
        Percentage string with % symbol
    """
    return f"{value * 100:.{decimals}f}%"
