from __future__ import annotations
import logging
from ..domain.errors import RPCError
from ..domain.models import BlockRange, EventLog, FetchResult, LogFilter
from ..ports.rpc import LogSource
from .planning import plan_batches

log = logging.getLogger(__name__)


async def fetch_logs_paginated(
    source: LogSource,
    log_filter: LogFilter,
    block_range: BlockRange,
    batch_size: int,
) -> FetchResult:
    """
    Query `block_range` one batch at a time, in order.
    A failing batch is logged and recorded in `failed_batches`; it is not retried
    and does not stop the remaining batches.
    """
    events: list[EventLog] = []
    failed: list[BlockRange] = []
    batches = plan_batches(block_range, batch_size)
    for batch in batches:
        log.debug("Querying %s events from blocks %d to %d...", log_filter.address, batch.start, batch.end)
        try:
            found = await source.get_logs(log_filter, batch.start, batch.end)
        except RPCError as e:
            log.error("Error querying %s blocks %d to %d: %s", log_filter.address, batch.start, batch.end, e)
            failed.append(batch)
            continue
        if found:
            log.debug("  Found %d events in batch %s", len(found), batch)
        events.extend(found)
    if failed:
        log.warning("%s: %d/%d batches failed; results for %s are partial",
                    log_filter.address, len(failed), len(batches), block_range)
    return FetchResult(events=events, failed_batches=failed)
