# lpsift/ports/rpc.py
from __future__ import annotations

from typing import Protocol
from ..domain.models import EventLog, LogFilter
from ..domain.value_types import Address


class LogSource(Protocol):
    """Port defining the contract for an event-log source."""

    async def get_logs(
        self,
        log_filter: LogFilter,
        from_block: int,
        to_block: int,
    ) -> list[EventLog]:
        """Return logs matching `log_filter` in [from_block, to_block] inclusive."""

    async def latest_block(self) -> int:
        """Return the current chain height."""


class ContractReader(Protocol):
    """Port for point-in-time ERC-20 state reads. Failures raise RPCError."""

    async def total_supply(self, token: Address) -> int:
        """Raw (unscaled) totalSupply() of `token`."""

    async def balance_of(self, token: Address, owner: Address) -> int:
        """Raw (unscaled) balanceOf(owner) on `token`."""
