from __future__ import annotations
import asyncio, logging
from typing import Awaitable, Callable, TypeVar
from ..domain.errors import RPCError

log = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    delay: float = 2.0,
    target: str = "",
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """
    Await `operation()` up to `max_attempts` times.

    Only timeout-class RPCErrors are retried, after a fixed `delay` pause. Any other
    failure propagates at once; the last timeout propagates when attempts run out.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except RPCError as e:
            if not e.is_timeout:
                log.error("Attempt %d/%d for %s failed (%s): %s", attempt, max_attempts, target, e.kind, e)
                raise
            log.error("Attempt %d/%d for %s failed with timeout.", attempt, max_attempts, target)
            if attempt >= max_attempts:
                raise
            await sleep(delay)
        except Exception as e:
            log.error("Attempt %d/%d for %s failed: %s: %s", attempt, max_attempts, target, type(e).__name__, e)
            raise
