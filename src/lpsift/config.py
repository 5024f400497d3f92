from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import get_args

from .domain.value_types import Address, GatePolarity

# -------- defaults --------
DEFAULT_RPC_URL       = "https://rpc.pulsechain.com"
DEFAULT_FACTORY       = Address("0x5b9f077a77db37f3be0a5b5d31baeff4bc5c0bd7")
DEFAULT_START_BLOCK   = 18_672_539
DEFAULT_BATCH_SIZE    = 5_000          # adjust to provider limits
POOL_THRESHOLD        = Decimal(20_000)
HOLDER_THRESHOLD      = Decimal(5_000)
DEFAULT_POOL_GATE: GatePolarity = "above"
DEFAULT_PRICE_USD     = Decimal(5)
DEFAULT_DECIMALS      = 18
BALANCE_MAX_ATTEMPTS  = 3
BALANCE_RETRY_DELAY_S = 2.0
RPC_TIMEOUT_S         = 20.0
CSV_FILENAME          = "lp_qualifiers.csv"
CHECKPOINT_FILENAME   = "checkpoint.json"


@dataclass(slots=True, frozen=True)
class Settings:
    factory: Address = DEFAULT_FACTORY
    start_block: int = DEFAULT_START_BLOCK
    end_block: int | None = None          # None = chain head at start of run
    batch_size: int = DEFAULT_BATCH_SIZE
    pool_threshold: Decimal = POOL_THRESHOLD
    holder_threshold: Decimal = HOLDER_THRESHOLD
    pool_gate: GatePolarity = DEFAULT_POOL_GATE
    decimals: int = DEFAULT_DECIMALS
    max_attempts: int = BALANCE_MAX_ATTEMPTS
    retry_delay: float = BALANCE_RETRY_DELAY_S

    def __post_init__(self) -> None:
        if self.start_block < 0:
            raise ValueError(f"start_block must be >= 0, got {self.start_block}")
        if self.end_block is not None and self.end_block < self.start_block:
            raise ValueError(f"end_block ({self.end_block}) must be >= start_block ({self.start_block})")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {self.retry_delay}")
        if self.pool_threshold < 0 or self.holder_threshold < 0:
            raise ValueError("thresholds must be >= 0")
        if not 0 <= self.decimals <= 77:
            raise ValueError(f"decimals out of range: {self.decimals}")
        if self.pool_gate not in get_args(GatePolarity):
            raise ValueError(f"pool_gate must be one of {get_args(GatePolarity)}, got {self.pool_gate!r}")
