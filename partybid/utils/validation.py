"""
Input Validation - Sanitization of values crossing the party boundary.

Provides validation for all external inputs to prevent:
- Negative or zero amounts
- Integer overflows
- Out-of-range basis points
"""

from typing import Any, Tuple

# =============================================================================
# Constants
# =============================================================================

# Field bounds
MIN_AMOUNT = 0
MAX_AMOUNT = 2**256 - 1
BASIS_POINTS_DENOMINATOR = 10_000


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = MIN_AMOUNT,
    max_val: int = MAX_AMOUNT,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass; True is never a meaningful amount
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_amount(amount: Any, name: str = "amount") -> Tuple[bool, str]:
    """Validate a strictly positive currency or share amount."""
    return validate_integer(amount, name, 1, MAX_AMOUNT)


def validate_basis_points(value: Any, name: str = "basis_points") -> Tuple[bool, str]:
    """Validate a basis-point value in [0, 10000]."""
    return validate_integer(value, name, 0, BASIS_POINTS_DENOMINATOR)


__all__ = [
    "validate_integer",
    "validate_amount",
    "validate_basis_points",
    "MIN_AMOUNT",
    "MAX_AMOUNT",
    "BASIS_POINTS_DENOMINATOR",
]
