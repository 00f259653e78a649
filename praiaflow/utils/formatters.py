"""
Money helpers for the menu.
Brazilian display format: thousands with dot, decimals with comma.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

CENT = Decimal('0.01')


def to_money(value: Union[int, float, Decimal, str, None]) -> Decimal:
    """
    Convert a raw amount (store row, JSON payload) to a two-place Decimal.

    Floats go through ``str`` so 5.1 becomes 5.10 and not 5.0999...

    Raises:
        ValueError: if the value is empty or not numeric.
    """
    if value is None or value == "":
        raise ValueError('Valor monetário vazio')

    if isinstance(value, bool):
        raise ValueError(f'Valor monetário inválido: {value!r}')

    try:
        num = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f'Valor monetário inválido: {value!r}')

    if not num.is_finite():
        raise ValueError(f'Valor monetário inválido: {value!r}')

    return num.quantize(CENT, rounding=ROUND_HALF_UP)


def money_br(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Format an amount in reais with exactly 2 decimals.

    Examples:
        money_br(5) -> "R$ 5,00"
        money_br(1500.5) -> "R$ 1.500,50"
        money_br(None) -> "-"
    """
    try:
        num = to_money(value)
    except ValueError:
        return "-"

    sign = "-" if num < 0 else ""
    num = abs(num)

    integer_part, decimal_part = f"{num:.2f}".split(".")
    reversed_int = integer_part[::-1]
    groups = [reversed_int[i:i+3] for i in range(0, len(reversed_int), 3)]
    integer_formatted = '.'.join(groups)[::-1]

    return f"{sign}R$ {integer_formatted},{decimal_part}"
