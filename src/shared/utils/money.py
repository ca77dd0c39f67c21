from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import Union

# Type alias for money values
Money = Decimal

ZERO = Decimal("0.00")


def round_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """
    Round monetary value to 2 decimal places using ROUND_HALF_UP.

    Examples:
        >>> round_money(10.125)
        Decimal('10.13')
        >>> round_money(10.124)
        Decimal('10.12')
        >>> round_money("10.115")
        Decimal('10.12')
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if value < 0:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_DOWN)
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def sum_or_zero(*values: Union[Decimal, float, int, str, None]) -> Decimal:
    """
    Add aggregate values coming back from the database, treating None as zero.

    SUM() over no rows yields NULL; every money aggregate goes through here
    before any arithmetic.

    Examples:
        >>> sum_or_zero(None)
        Decimal('0.00')
        >>> sum_or_zero(Decimal("10.50"), None, 2)
        Decimal('12.50')
    """
    total = Decimal("0")
    for value in values:
        if value is None:
            continue
        total += value if isinstance(value, Decimal) else Decimal(str(value))
    return round_money(total)
