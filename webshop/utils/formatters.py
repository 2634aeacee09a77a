"""
Formatting helpers for the French storefront.
Amounts and dates are rendered the way the fr-FR locale shows them.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from datetime import date, datetime
from typing import Union

# fr-FR groups thousands with a narrow no-break space and puts the symbol after
# the amount, separated by a no-break space.
THOUSANDS_SEPARATOR = '\u202f'
SYMBOL_SEPARATOR = '\u00a0'


def money_fr(value: Union[int, float, Decimal, str, None], symbol: str = '€') -> str:
    """
    Format an amount in fr-FR style with exactly 2 decimals.

    Args:
        value: Amount to format
        symbol: Currency symbol appended after the amount

    Returns:
        Formatted string (e.g. "1 234,56 €"), "-" when the value is invalid.
    """
    if value is None or value == "":
        return "-"

    try:
        normalized = str(value).replace(",", ".")
        num = Decimal(normalized).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    sign = "-" if num < 0 else ""
    num = abs(num)

    integer_part, decimal_part = f"{num:.2f}".split(".")
    reversed_int = integer_part[::-1]
    groups = [reversed_int[i:i+3] for i in range(0, len(reversed_int), 3)]
    integer_formatted = THOUSANDS_SEPARATOR.join(groups)[::-1]

    return f"{sign}{integer_formatted},{decimal_part}{SYMBOL_SEPARATOR}{symbol}"


def date_fr(value: Union[date, datetime, None]) -> str:
    """
    Format a date as DD/MM/YYYY.

    Examples:
        date_fr(date(2026, 1, 12)) -> "12/01/2026"
    """
    if value is None:
        return "-"

    if isinstance(value, datetime):
        value = value.date()

    if not isinstance(value, date):
        return "-"

    return value.strftime("%d/%m/%Y")
