"""
Money Utilities - Safe Decimal operations for monetary values.

Avoids float precision issues by using Decimal throughout. Floats only appear
at the JSON boundary.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[str, int, float, Decimal]

# Storefront prices are whole pounds; fractional values keep 2 places
MONEY_PRECISION = Decimal("0.01")
INTEGER_PRECISION = Decimal("1")


def to_decimal(value: Union[Number, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Returns Decimal("0") for None or unparseable input. Use parse_price when
    bad input must be rejected instead.
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # Go through str to keep the printed precision
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def parse_price(value: object) -> Decimal:
    """
    Strictly parse a unit price.

    Args:
        value: int, float, Decimal or numeric string

    Returns:
        Non-negative finite Decimal

    Raises:
        ValueError: If the value is not a number or is negative
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise ValueError(f"price must be a number, got {type(value).__name__}")
    try:
        price = Decimal(str(value).strip()) if isinstance(value, (float, str)) else Decimal(value)
    except InvalidOperation:
        raise ValueError(f"price must be a number, got {value!r}")
    if not price.is_finite():
        raise ValueError("price must be finite")
    if price < 0:
        raise ValueError("price must be non-negative")
    return price


def round_money(value: Number, to_int: bool = False) -> Decimal:
    """Round monetary value to 2 places, or to an integer when to_int is set."""
    decimal_value = to_decimal(value)
    precision = INTEGER_PRECISION if to_int else MONEY_PRECISION
    return decimal_value.quantize(precision, rounding=ROUND_HALF_UP)


def format_money(value: Number, currency: str = "EGP") -> str:
    """
    Format monetary value for display, e.g. "230 EGP" or "12.50 EGP".

    Whole amounts are shown without decimals, as the storefront prints them.
    """
    decimal_value = to_decimal(value)
    if decimal_value == decimal_value.to_integral_value():
        formatted = f"{int(round_money(decimal_value, to_int=True)):,}"
    else:
        formatted = f"{round_money(decimal_value):,.2f}"
    return f"{formatted} {currency}"


def to_float(value: Number) -> float:
    """
    Convert Decimal to float for JSON serialization.

    Use only at API boundaries, not for internal calculations.
    """
    return float(to_decimal(value))


def to_json_number(value: Number) -> Union[int, float]:
    """JSON number for a stored price: int when integral, float otherwise."""
    decimal_value = to_decimal(value)
    if decimal_value == decimal_value.to_integral_value():
        return int(decimal_value)
    return float(decimal_value)
