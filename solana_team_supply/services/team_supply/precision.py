"""Exact decimal arithmetic for supply ratios.

Balances and supplies are raw integers. Ratios are computed in a context wide
enough to hold the exact quotient of any two 256-bit amounts, then truncated
to a fixed number of fractional digits. Nothing here goes through float.
"""

from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Union

FRACTIONAL_DIGITS = 18
_QUANTUM = Decimal(1).scaleb(-FRACTIONAL_DIGITS)
_PRECISION = 120

Amount = Union[int, str, Decimal]


def supply_ratio(amount: Amount, total_supply: Amount) -> Decimal:
    """Return ``amount / total_supply`` truncated to 18 fractional digits.

    Raises:
        ValueError: If total_supply is not positive
    """
    total = Decimal(total_supply)
    if total <= 0:
        raise ValueError(f"Total supply must be positive, got {total_supply}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        ctx.rounding = ROUND_DOWN
        return (Decimal(amount) / total).quantize(_QUANTUM, rounding=ROUND_DOWN)


def supply_percentage(amount: Amount, total_supply: Amount) -> Decimal:
    """Return ``100 * amount / total_supply`` with the same truncation as supply_ratio."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return supply_ratio(amount, total_supply) * 100
