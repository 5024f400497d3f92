from __future__ import annotations
import logging
from decimal import Decimal
from typing import Iterable
from ..domain.amounts import to_units, usd
from ..domain.errors import RPCError
from ..domain.models import QualifyingRecord
from ..domain.value_types import Address, GatePolarity
from ..ports.pricing import PriceOracle
from ..ports.rpc import ContractReader
from .retry import with_retry

log = logging.getLogger(__name__)


async def pool_value(reader: ContractReader, pricing: PriceOracle, pool: Address, *, decimals: int = 18) -> Decimal:
    """USD value of the whole pool: totalSupply (scaled) x price per token. Read failures count as 0."""
    try:
        supply = await reader.total_supply(pool)
        price = await pricing.price_per_token(pool)
    except RPCError as e:
        log.error("Error fetching totalSupply for LP %s: %s", pool, e)
        return Decimal(0)
    return usd(to_units(supply, decimals), price)


def passes_pool_gate(value: Decimal, threshold: Decimal, polarity: GatePolarity = "above") -> bool:
    """
    Decide whether a pool goes on to holder discovery.

    "above" proceeds only for pools worth strictly more than `threshold`. "below" keeps
    the legacy scraper's observed behaviour, which proceeded only for pools worth less.
    """
    if polarity == "above":
        return value > threshold
    if polarity == "below":
        return value < threshold
    raise ValueError(f"unknown gate polarity: {polarity!r}")


async def qualify_holders(
    reader: ContractReader,
    pool: Address,
    holders: Iterable[Address],
    price: Decimal,
    *,
    threshold: Decimal,
    decimals: int = 18,
    max_attempts: int = 3,
    retry_delay: float = 2.0,
) -> list[QualifyingRecord]:
    out: list[QualifyingRecord] = []
    for holder in holders:
        try:
            raw = await with_retry(
                lambda: reader.balance_of(pool, holder),
                max_attempts=max_attempts, delay=retry_delay, target=f"{holder} in LP {pool}",
            )
        except RPCError as e:
            log.error("Error fetching balance for %s in LP %s: %s", holder, pool, e)
            continue
        balance = to_units(raw, decimals)
        value = usd(balance, price)
        if value >= threshold:
            out.append(QualifyingRecord(pool=pool, holder=holder, balance=balance, holding_value=value))
    return out
