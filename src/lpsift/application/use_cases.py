from __future__ import annotations
import logging
from typing import Callable

from ..config import Settings
from ..domain.models import BlockRange, PoolOutcome, RunStats
from ..domain.value_types import Address
from ..ports.pricing import PriceOracle
from ..ports.rpc import ContractReader, LogSource
from ..ports.storage import CheckpointStore, RecordSink
from .discovery import discover_holders, discover_pools
from .valuation import passes_pool_gate, pool_value, qualify_holders

log = logging.getLogger(__name__)


async def _process_pool(
    pool: Address,
    *,
    source: LogSource,
    reader: ContractReader,
    pricing: PriceOracle,
    sink: RecordSink,
    settings: Settings,
    block_range: BlockRange,
    stats: RunStats,
) -> PoolOutcome:
    value = await pool_value(reader, pricing, pool, decimals=settings.decimals)
    log.info("Liquidity pool value for %s: $%.2f", pool, value)
    if not passes_pool_gate(value, settings.pool_threshold, settings.pool_gate):
        log.info("Skipping LP pair %s: value $%.2f fails the %s-$%s gate",
                 pool, value, settings.pool_gate, settings.pool_threshold)
        return PoolOutcome(pool, "rejected", value=value)

    holders = await discover_holders(source, pool, block_range, settings.batch_size)
    stats.failed_batches += len(holders.failed_batches)

    price = await pricing.price_per_token(pool)
    records = await qualify_holders(
        reader, pool, holders.addresses, price,
        threshold=settings.holder_threshold, decimals=settings.decimals,
        max_attempts=settings.max_attempts, retry_delay=settings.retry_delay,
    )
    log.info("%d qualifying LP token holders in %s (>= $%s)", len(records), pool, settings.holder_threshold)
    if records:
        await sink.append(records)
    return PoolOutcome(pool, "processed", value=value, holders=len(holders.addresses), records=tuple(records))


async def run_scrape(
    *,
    source: LogSource,
    reader: ContractReader,
    pricing: PriceOracle,
    checkpoint: CheckpointStore,
    sink: RecordSink,
    settings: Settings,
    on_pool: Callable[[PoolOutcome], None] | None = None,
) -> RunStats:
    """
    One historical pass: discover pools, then value, filter and persist them one by one.

    Every pool that completes (accepted or rejected) is checkpointed before the next
    one starts. A pool that raises is logged and left out of the checkpoint so the
    next run retries it.
    """
    end = settings.end_block if settings.end_block is not None else await source.latest_block()
    block_range = BlockRange(settings.start_block, end)
    stats = RunStats(from_block=block_range.start, to_block=block_range.end)
    log.info("Scraping events from block %d to %d in batches of %d...",
             block_range.start, block_range.end, settings.batch_size)

    processed = await checkpoint.load()
    done = set(processed)
    log.info("Checkpoint loaded: %d processed LP pairs", len(processed))

    pools = await discover_pools(source, settings.factory, block_range, settings.batch_size)
    stats.pools_discovered = len(pools.addresses)
    stats.failed_batches += len(pools.failed_batches)

    todo = [p for p in pools.addresses if p not in done]
    stats.pools_skipped = stats.pools_discovered - len(todo)
    log.info("Processing %d new LP pair addresses...", len(todo))

    for pool in todo:
        log.info("Processing LP pair contract: %s", pool)
        try:
            outcome = await _process_pool(
                pool, source=source, reader=reader, pricing=pricing, sink=sink,
                settings=settings, block_range=block_range, stats=stats,
            )
        except Exception as e:
            log.exception("Error processing LP pair %s; it stays eligible for the next run", pool)
            stats.pools_failed += 1
            outcome = PoolOutcome(pool, "failed", error=f"{type(e).__name__}: {e}")
        else:
            if outcome.status == "rejected":
                stats.pools_rejected += 1
            else:
                stats.pools_processed += 1
                stats.holders_checked += outcome.holders
                stats.records_written += len(outcome.records)
            processed.append(pool)
            done.add(pool)
            await checkpoint.save(processed)
        if on_pool is not None:
            try:
                on_pool(outcome)
            except Exception:
                log.exception("Pool callback failed for %s", pool)

    log.info("Scraping complete.")
    return stats
