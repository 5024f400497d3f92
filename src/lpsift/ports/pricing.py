# lpsift/ports/pricing.py
from __future__ import annotations

from decimal import Decimal
from typing import Protocol
from ..domain.value_types import Address


class PriceOracle(Protocol):
    async def price_per_token(self, pool: Address) -> Decimal:
        """USD value of one (decimals-scaled) LP token of `pool`."""
