from __future__ import annotations
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .progress import ProgressCallback
from .stores import FileStore, IndexedFileStore, ListStore, Store

SNAPSHOT_SUFFIX = ".index.json"


class StoreKind(Enum):
    MEMORY = "memory"
    FILE = "file"
    INDEXED = "indexed"


@dataclass(frozen=True)
class StoreConfig:
    """
    Caller-supplied choice of strategy and paths.

    Attributes:
        kind: which storage strategy to open
        path: log file path (ignored for MEMORY)
        snapshot_path: index snapshot path for INDEXED; derived from path
            when omitted
    """
    kind: StoreKind = StoreKind.MEMORY
    path: Optional[str] = None
    snapshot_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is not StoreKind.MEMORY and not self.path:
            raise ValueError(f"{self.kind.value} store requires a log path")

    def resolved_snapshot_path(self) -> str:
        if self.snapshot_path:
            return os.fspath(self.snapshot_path)
        if not self.path:
            raise ValueError("no log path to derive a snapshot path from")
        return os.fspath(self.path) + SNAPSHOT_SUFFIX

    def open_store(self, on_progress: Optional[ProgressCallback] = None) -> Store:
        if self.kind is StoreKind.MEMORY:
            return ListStore()
        if self.kind is StoreKind.FILE:
            return FileStore(self.path)
        return IndexedFileStore(self.path, self.resolved_snapshot_path(), on_progress=on_progress)
