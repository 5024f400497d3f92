from __future__ import annotations
import os, asyncio, logging
from typing import Iterable
from ..domain.amounts import plain
from ..domain.models import QualifyingRecord
from ..ports.storage import RecordSink

log = logging.getLogger(__name__)

HEADER = "lpAddress,holderAddress,balance,holdingValue"

def _row(rec: QualifyingRecord) -> str:
    # addresses and plain decimals only, so no quoting is needed
    return f"{rec.pool},{rec.holder},{plain(rec.balance)},{plain(rec.holding_value)}"


class CSVRecordSink(RecordSink):
    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = asyncio.Lock()

    async def append(self, records: Iterable[QualifyingRecord]) -> None:
        rows = [_row(r) for r in records]
        if not rows:
            return
        async with self._lock:
            await asyncio.to_thread(self._write_rows, self.path, rows)
        log.info("Appended %d records to %s", len(rows), self.path)

    @staticmethod
    def _write_rows(path: str, rows: list[str]) -> None:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        new = not os.path.exists(path)
        with open(path, "a", buffering=1) as f:
            if new:
                f.write(HEADER + "\n")
            f.write("\n".join(rows) + "\n"); f.flush(); os.fsync(f.fileno())
