from __future__ import annotations
from typing import Optional


class KVError(Exception):
    """Base class for all store errors."""


class MalformedRecordError(KVError):
    """
    A log line does not decode to exactly a key and a value.
    """
    def __init__(self, msg: str, offset: Optional[int] = None) -> None:
        if offset is not None:
            msg = f"{msg} (offset {offset})"
        super().__init__(msg)
        self.offset = offset


class InvalidSnapshotError(KVError):
    """
    Index snapshot exists but cannot be used as a key -> offset mapping.
    """


class NotFoundError(KVError, KeyError):
    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"key not found: {self.key!r}"
