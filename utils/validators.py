"""
Input validation utilities.
"""

import math
import numbers
from typing import Any, List, Optional, Tuple
import validators as url_validators


class ValidationError(ValueError):
    """
    Raised when input data breaks the row contract.

    Signals an upstream data-pipeline bug, never a modelling edge case.
    """

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []


def validate_url(url: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a URL.

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url:
        return False, "URL cannot be empty"

    # Check if it's a valid URL
    if not url_validators.url(url):
        return False, "Invalid URL format"

    return True, None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(float(value))


def validate_row_values(
    entity: Any,
    clicks: Any,
    impressions: Any,
    position: Any
) -> Tuple[bool, Optional[str]]:
    """
    Validate the structural fields of one performance row.

    Args:
        entity: Query string or page URL
        clicks: Click count
        impressions: Impression count
        position: Average position

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(entity, str) or not entity.strip():
        return False, "Row entity must be a non-empty string"

    if not _is_number(clicks):
        return False, f"Clicks must be a finite number, got {clicks!r}"
    if clicks < 0:
        return False, f"Clicks cannot be negative, got {clicks}"

    if not _is_number(impressions):
        return False, f"Impressions must be a finite number, got {impressions!r}"
    if impressions < 0:
        return False, f"Impressions cannot be negative, got {impressions}"

    if not _is_number(position):
        return False, f"Position must be a finite number, got {position!r}"
    if position < 1:
        return False, f"Position must be at least 1, got {position}"

    return True, None


def validate_threshold(value: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate an anomaly threshold.

    Args:
        value: Relative change threshold

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not _is_number(value):
        return False, f"Threshold must be a finite number, got {value!r}"

    if value <= 0 or value >= 1:
        return False, f"Threshold must be between 0 and 1 (exclusive), got {value}"

    return True, None
