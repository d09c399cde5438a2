"""
Validation utilities
"""
import re
from decimal import Decimal, InvalidOperation


def normalize_decimal_input(value: str) -> str:
    """
    Normalize an amount typed by a user: strip spaces, comma -> dot

    Example:
        >>> normalize_decimal_input("100,50")
        "100.50"
        >>> normalize_decimal_input(" 100.50 ")
        "100.50"
    """
    return value.strip().replace(",", ".")


def validate_decimal_amount(value: str, max_decimal_places: int = 2) -> tuple[bool, str | None]:
    """
    Validate a non-negative money amount

    Args:
        value: amount as typed
        max_decimal_places: decimal places allowed (2 by default)

    Returns:
        (is_valid, error_message)

    Example:
        >>> validate_decimal_amount("100.50")
        (True, None)
        >>> validate_decimal_amount("100.505")
        (False, "At most 2 decimal places")
    """
    normalized = normalize_decimal_input(value)

    try:
        Decimal(normalized)
    except (InvalidOperation, ValueError):
        return False, "Invalid amount"

    if normalized.startswith("-"):
        return False, "Amount cannot be negative"

    pattern = rf"^\d+(\.\d{{1,{max_decimal_places}}})?$"
    if not re.match(pattern, normalized):
        return False, f"At most {max_decimal_places} decimal places"

    return True, None


def validate_and_normalize_amount(value: str, max_decimal_places: int = 2) -> str:
    """
    Validate and normalize an amount (raise on error)

    Raises:
        ValueError: if validation fails

    Example:
        >>> validate_and_normalize_amount("100,50")
        "100.50"
    """
    is_valid, error = validate_decimal_amount(value, max_decimal_places)
    if not is_valid:
        raise ValueError(error)

    return normalize_decimal_input(value)


def to_decimal(value) -> Decimal:
    """Coerce a stored amount (Decimal, int, float, str, None) to Decimal."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
