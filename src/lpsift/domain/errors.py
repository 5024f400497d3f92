from __future__ import annotations
from .value_types import ErrorKind


class RPCError(RuntimeError):
    """Transport failure, tagged with a classification the retry logic branches on."""

    def __init__(self, message: str, kind: ErrorKind = "other") -> None:
        super().__init__(message)
        self.kind: ErrorKind = kind

    @property
    def is_timeout(self) -> bool:
        return self.kind == "timeout"

    def __repr__(self) -> str:
        return f"RPCError(kind={self.kind!r}, message={str(self)!r})"


class DecodeError(ValueError):
    """A log did not have the shape of the event it was filtered for."""
