from __future__ import annotations
from typing import NewType, Literal

Address = NewType("Address", str)   # EIP-55 checksummed, 0x-prefixed
Topic   = NewType("Topic", str)     # 66-char 0x-hash, lowercase
ErrorKind   = Literal["timeout", "not_found", "other"]
GatePolarity = Literal["above", "below"]
PoolStatus  = Literal["rejected", "processed", "failed"]
