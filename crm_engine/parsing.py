"""
Lenient Value Parsing

Form fields arrive as free text in the pt-BR convention ("100.000,50",
"R$ 3.000,00"). Parsing never raises: anything that does not read as a
number becomes zero, which is what the stored data has always relied on.
"""

import re
from decimal import Decimal, InvalidOperation

_NON_NUMERIC = re.compile(r"[^\d.,]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d+)?|\.\d+")
_LEADING_SIGNED_NUMBER = re.compile(r"\s*(-?(?:\d+(?:\.\d*)?|\.\d+))")

ZERO = Decimal("0")


def _number_to_decimal(value) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return None
        return result if result.is_finite() else None
    return None


def parse_value(value) -> Decimal:
    """
    Parse a monetary amount typed by the user.

    - Keeps only digits, commas and periods (so signs and currency symbols go).
    - With a comma present, the comma is the decimal separator and periods
      are thousands separators: "100.000,50" -> 100000.50
      (periods are never read as a decimal point once a comma appears)
    - Without a comma, one period is a decimal point ("1234.5") and several
      periods are grouping ("1.000.000").
    - Text after the first number is ignored: "1,2,3" -> 1.2
    - Returns Decimal("0") when nothing numeric is left.
    """
    if value is None:
        return ZERO

    number = _number_to_decimal(value)
    if number is not None:
        return number
    if not isinstance(value, str):
        return ZERO

    cleaned = _NON_NUMERIC.sub("", value)
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")

    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return ZERO
    return Decimal(match.group(0))


def parse_percent(value, default: Decimal) -> Decimal:
    """
    Parse a percentage given in percent units (1 == 1%).

    Missing, non-numeric or negative input returns `default`. Zero is kept.
    """
    if value is None:
        return default

    number = _number_to_decimal(value)
    if number is None:
        if not isinstance(value, str):
            return default
        match = _LEADING_SIGNED_NUMBER.match(value.replace(",", "."))
        if not match:
            return default
        number = Decimal(match.group(1))

    if number < 0:
        return default
    return number
