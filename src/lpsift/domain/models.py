from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from .value_types import Address, PoolStatus, Topic

@dataclass(slots=True, frozen=True)
class BlockRange:
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.start > self.end:
            raise ValueError(f"invalid block range [{self.start}, {self.end}]")

    def span(self) -> int: return self.end - self.start + 1

    def __str__(self) -> str: return f"{self.start}-{self.end}"

@dataclass(slots=True, frozen=True)
class LogFilter:
    """eth_getLogs filter: emitter address plus positional topics (None matches any)."""
    address: Address
    topics: tuple[Topic | None, ...]

@dataclass(slots=True, frozen=True)
class EventLog:
    address: Address
    topics: tuple[str, ...]            # lowercased with 0x
    data_hex: str
    block_number: int
    tx_hash: str
    log_index: int

@dataclass(slots=True, frozen=True)
class PairCreated:
    token0: Address
    token1: Address
    pair: Address
    index: int

@dataclass(slots=True, frozen=True)
class Transfer:
    sender: Address
    recipient: Address
    value: int

@dataclass(slots=True, frozen=True)
class FetchResult:
    events: list[EventLog]
    failed_batches: list[BlockRange] = field(default_factory=list)

    @property
    def complete(self) -> bool: return not self.failed_batches

@dataclass(slots=True, frozen=True)
class QualifyingRecord:
    pool: Address
    holder: Address
    balance: Decimal
    holding_value: Decimal

@dataclass(slots=True, frozen=True)
class PoolOutcome:
    pool: Address
    status: PoolStatus
    value: Decimal = Decimal(0)
    holders: int = 0
    records: tuple[QualifyingRecord, ...] = ()
    error: str | None = None

@dataclass(slots=True)
class RunStats:
    from_block: int = 0
    to_block: int = 0
    pools_discovered: int = 0
    pools_skipped: int = 0
    pools_rejected: int = 0
    pools_processed: int = 0
    pools_failed: int = 0
    holders_checked: int = 0
    records_written: int = 0
    failed_batches: int = 0
