from __future__ import annotations
import os, json, asyncio, logging
from typing import Iterable
from eth_utils import is_address, to_checksum_address
from ..domain.value_types import Address
from ..ports.storage import CheckpointStore

log = logging.getLogger(__name__)


class JSONCheckpoint(CheckpointStore):
    """
    Checkpoint kept as a JSON array of pool addresses.
    A missing file is a fresh start; a corrupt one is logged and also treated as a fresh start.
    """
    def __init__(self, path: str) -> None:
        self.path = path

    async def load(self) -> list[Address]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            log.warning("Error parsing checkpoint file %s (%s). Starting fresh.", self.path, e)
            return []
        if not isinstance(raw, list) or not all(isinstance(a, str) and is_address(a) for a in raw):
            log.warning("Checkpoint file %s is not an array of addresses. Starting fresh.", self.path)
            return []
        return list(dict.fromkeys(Address(to_checksum_address(a)) for a in raw))

    async def save(self, processed: Iterable[Address]) -> None:
        body = json.dumps(list(processed), indent=2)
        await asyncio.to_thread(self._write, self.path, body)

    @staticmethod
    def _write(path: str, body: str) -> None:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        tmp = path + ".tmp"
        with open(tmp, "w") as f:
            f.write(body); f.flush(); os.fsync(f.fileno())
        os.replace(tmp, path)
