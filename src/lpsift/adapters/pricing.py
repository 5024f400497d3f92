from __future__ import annotations
from decimal import Decimal
from ..domain.value_types import Address
from ..ports.pricing import PriceOracle


class ConstantPrice(PriceOracle):
    """Stub oracle: every LP token of every pool is worth the same fixed USD amount."""
    def __init__(self, usd: Decimal | int | str = 5) -> None:
        self.usd = Decimal(usd)

    async def price_per_token(self, pool: Address) -> Decimal:
        return self.usd
