"""
Tests for money formatting and amount validation
"""
from decimal import Decimal

from clientdesk.utils.money import format_money
from clientdesk.utils.validation import to_decimal, validate_decimal_amount


def test_format_money_symbols():
    assert format_money(15000, "USD") == "$15,000.00"
    assert format_money(Decimal("1200.5"), "EUR") == "€1,200.50"
    assert format_money("7", "GBP") == "£7.00"


def test_format_money_code_suffix():
    assert format_money(99, "CHF") == "99.00 CHF"


def test_validate_decimal_amount():
    assert validate_decimal_amount("100,50") == (True, None)
    assert validate_decimal_amount("100.505") == (False, "At most 2 decimal places")
    assert validate_decimal_amount("-1") == (False, "Amount cannot be negative")
    assert validate_decimal_amount("ten") == (False, "Invalid amount")


def test_to_decimal():
    assert to_decimal(None) == Decimal("0")
    assert to_decimal("12.30") == Decimal("12.30")
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(5) == Decimal("5")
