from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Union

from src.core.exceptions import InvalidInputError

# Type alias for money values
Money = Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """
    Round monetary value to 2 decimal places, halves rounding up.

    Examples:
        >>> round_money(10.125)
        Decimal('10.13')
        >>> round_money("100.005")
        Decimal('100.01')
        >>> round_money(-10.125)
        Decimal('-10.12')
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if value < 0:
        return value.quantize(CENT, rounding=ROUND_HALF_DOWN)
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any, field: str) -> Decimal:
    """
    Convert a user-supplied number to Decimal without binary float drift.

    Floats go through ``str`` so 33.335 stays 33.335. Booleans, None,
    non-numeric strings, NaN and infinities raise InvalidInputError.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(field, value)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidInputError(field, value)
    else:
        raise InvalidInputError(field, value)

    if not result.is_finite():
        raise InvalidInputError(field, value)
    return result
