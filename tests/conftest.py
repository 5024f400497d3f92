from __future__ import annotations

from decimal import Decimal
from typing import Iterable

import pytest
from eth_utils import to_checksum_address

from lpsift.domain.decoding import PAIR_CREATED_T0, TRANSFER_T0, ZERO_ADDRESS, address_topic
from lpsift.domain.errors import RPCError
from lpsift.domain.models import EventLog, LogFilter, QualifyingRecord
from lpsift.domain.value_types import Address

UNIT = 10**18
FACTORY = Address(to_checksum_address("0x5b9f077a77db37f3be0a5b5d31baeff4bc5c0bd7"))


def addr(n: int) -> Address:
    return Address(to_checksum_address("0x" + f"{n:040x}"))


def _word(x: int) -> str:
    return f"{x:064x}"


def pair_created_log(pair: Address, block: int, *, factory: Address = FACTORY, index: int = 1) -> EventLog:
    return EventLog(
        address=Address(factory.lower()),
        topics=(PAIR_CREATED_T0, address_topic(addr(0xAA)), address_topic(addr(0xBB))),
        data_hex="0x" + pair[2:].lower().rjust(64, "0") + _word(index),
        block_number=block,
        tx_hash="0x" + _word(block),
        log_index=0,
    )


def transfer_log(pool: Address, sender: Address, recipient: Address, value: int, block: int) -> EventLog:
    return EventLog(
        address=Address(pool.lower()),
        topics=(TRANSFER_T0, address_topic(sender), address_topic(recipient)),
        data_hex="0x" + _word(value),
        block_number=block,
        tx_hash="0x" + _word(block),
        log_index=0,
    )


def mint_log(pool: Address, recipient: Address, value: int, block: int) -> EventLog:
    return transfer_log(pool, ZERO_ADDRESS, recipient, value, block)


class FakeChain:
    """In-memory LogSource + ContractReader with scripted failures."""

    def __init__(self, head: int = 1_000) -> None:
        self.head = head
        self.logs: list[EventLog] = []
        self.supply: dict[Address, int | Exception] = {}
        # per (pool, holder): list of outcomes consumed in order; the last one repeats
        self.balances: dict[tuple[Address, Address], list[int | Exception]] = {}
        self.fail_ranges: set[tuple[int, int]] = set()
        self.get_logs_calls: list[tuple[LogFilter, int, int]] = []
        self.balance_calls: list[tuple[Address, Address]] = []
        self.supply_calls: list[Address] = []

    def add_logs(self, logs: Iterable[EventLog]) -> None:
        self.logs.extend(logs)

    def set_balance(self, pool: Address, holder: Address, *outcomes: int | Exception) -> None:
        self.balances[(pool, holder)] = list(outcomes)

    async def latest_block(self) -> int:
        return self.head

    async def get_logs(self, log_filter: LogFilter, from_block: int, to_block: int) -> list[EventLog]:
        self.get_logs_calls.append((log_filter, from_block, to_block))
        if (from_block, to_block) in self.fail_ranges:
            raise RPCError(f"boom {from_block}-{to_block}")
        out = []
        for ev in self.logs:
            if ev.address.lower() != log_filter.address.lower():
                continue
            if not from_block <= ev.block_number <= to_block:
                continue
            if any(t is not None and (i >= len(ev.topics) or ev.topics[i] != t)
                   for i, t in enumerate(log_filter.topics)):
                continue
            out.append(ev)
        return out

    async def total_supply(self, token: Address) -> int:
        self.supply_calls.append(token)
        v = self.supply.get(token, 0)
        if isinstance(v, Exception):
            raise v
        return v

    async def balance_of(self, token: Address, owner: Address) -> int:
        self.balance_calls.append((token, owner))
        outcomes = self.balances.get((token, owner), [0])
        v = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(v, Exception):
            raise v
        return v


class MemoryCheckpoint:
    def __init__(self, initial: Iterable[Address] = ()) -> None:
        self.saved: list[list[Address]] = []
        self.state = list(initial)

    async def load(self) -> list[Address]:
        return list(self.state)

    async def save(self, processed: Iterable[Address]) -> None:
        self.state = list(processed)
        self.saved.append(list(self.state))


class MemorySink:
    def __init__(self) -> None:
        self.rows: list[QualifyingRecord] = []

    async def append(self, records: Iterable[QualifyingRecord]) -> None:
        self.rows.extend(records)


class FixedPrice:
    def __init__(self, usd: int = 5) -> None:
        self.usd = Decimal(usd)

    async def price_per_token(self, pool: Address) -> Decimal:
        return self.usd


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()
