# lpsift/ports/storage.py
from __future__ import annotations

from typing import Iterable, Protocol
from ..domain.models import QualifyingRecord
from ..domain.value_types import Address


class CheckpointStore(Protocol):
    """Port for the durable set of fully processed pools."""

    async def load(self) -> list[Address]:
        """Return processed pools in the order they were saved; empty when absent or unreadable."""

    async def save(self, processed: Iterable[Address]) -> None:
        """Overwrite the stored set with `processed` (full rewrite, not an append)."""


class RecordSink(Protocol):
    """Port for appending qualifying holder records to durable output."""

    async def append(self, records: Iterable[QualifyingRecord]) -> None:
        """Append records in order; never rewrites previously written rows."""
