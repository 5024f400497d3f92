from __future__ import annotations
from ..domain.models import BlockRange

def plan_batches(block_range: BlockRange, batch_size: int) -> list[BlockRange]:
    """Tile [start, end] with consecutive batches of at most `batch_size` blocks."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    out: list[BlockRange] = []
    b = block_range.start
    while b <= block_range.end:
        fb, tb = b, min(block_range.end, b + batch_size - 1)
        out.append(BlockRange(fb, tb))
        b = tb + 1
    return out
