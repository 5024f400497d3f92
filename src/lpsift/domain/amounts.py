from __future__ import annotations
from decimal import Decimal, localcontext

# uint256 needs 78 significant digits
_PREC = 80


def to_units(raw: int, decimals: int) -> Decimal:
    """Scale a raw integer token amount by 10**decimals without losing precision."""
    with localcontext() as ctx:
        ctx.prec = _PREC
        return Decimal(raw).scaleb(-decimals)


def usd(units: Decimal, price: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _PREC
        return units * price


def plain(d: Decimal) -> str:
    """Positional notation, trailing zeros stripped: Decimal('6000.000') -> '6000'."""
    s = format(d, "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s or "0"
