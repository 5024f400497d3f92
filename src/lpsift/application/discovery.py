from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable, TypeVar
from ..domain.decoding import PAIR_CREATED_T0, TRANSFER_T0, ZERO_TOPIC, decode_pair_created, decode_transfer
from ..domain.errors import DecodeError
from ..domain.models import BlockRange, EventLog, LogFilter
from ..domain.value_types import Address
from ..ports.rpc import LogSource
from .pagination import fetch_logs_paginated

log = logging.getLogger(__name__)

E = TypeVar("E")


@dataclass(slots=True, frozen=True)
class Discovery:
    """Unique addresses in first-seen order, plus the batches that could not be fetched."""
    addresses: list[Address]
    failed_batches: list[BlockRange] = field(default_factory=list)


def _unique(events: list[EventLog], decode: Callable[[EventLog], E], pick: Callable[[E], Address]) -> list[Address]:
    seen: dict[Address, None] = {}
    for ev in events:
        try:
            addr = pick(decode(ev))
        except DecodeError as e:
            log.warning("Skipping undecodable log: %s", e)
            continue
        seen.setdefault(addr, None)
    return list(seen)


async def discover_pools(source: LogSource, factory: Address, block_range: BlockRange, batch_size: int) -> Discovery:
    log.info("Querying PairCreated events from block %d to %d in batches of %d...",
             block_range.start, block_range.end, batch_size)
    res = await fetch_logs_paginated(source, LogFilter(factory, (PAIR_CREATED_T0,)), block_range, batch_size)
    pools = _unique(res.events, decode_pair_created, lambda e: e.pair)
    log.info("Found %d LP pair addresses (%d PairCreated events)", len(pools), len(res.events))
    return Discovery(pools, res.failed_batches)


async def discover_holders(source: LogSource, pool: Address, block_range: BlockRange, batch_size: int) -> Discovery:
    """Recipients of mints (Transfer from the zero address) on `pool`."""
    res = await fetch_logs_paginated(source, LogFilter(pool, (TRANSFER_T0, ZERO_TOPIC)), block_range, batch_size)
    holders = _unique(res.events, decode_transfer, lambda e: e.recipient)
    log.info("Found %d LP token holders in %s", len(holders), pool)
    return Discovery(holders, res.failed_batches)
