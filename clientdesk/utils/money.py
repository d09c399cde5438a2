"""
Unified money formatting for the whole project.

Usage:
    from clientdesk.utils.money import format_money

    format_money(15000, "USD")     -> "$15,000.00"
    format_money(1200.5, "EUR")    -> "€1,200.50"
    format_money(99, "CHF")        -> "99.00 CHF"
"""
from decimal import Decimal

# Currencies rendered with a prefix symbol; the rest get an ISO-code suffix
_CURRENCY_SYMBOL = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def format_money(amount, currency: str = "USD", decimals: int = 2) -> str:
    """
    Format an amount with thousands separators and the currency marker.

    Args:
        amount: number (int / float / Decimal / str)
        currency: ISO 4217 code
        decimals: digits after the decimal point

    Returns:
        "$15,000.00" / "99.00 CHF"
    """
    if isinstance(amount, str):
        amount = Decimal(amount)
    formatted = f"{{:,.{decimals}f}}".format(amount)
    symbol = _CURRENCY_SYMBOL.get(currency)
    if symbol:
        return f"{symbol}{formatted}"
    return f"{formatted} {currency}"
