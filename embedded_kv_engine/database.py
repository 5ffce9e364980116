from __future__ import annotations
from typing import Optional

from .config import StoreConfig
from .progress import ProgressCallback
from .stores import ListStore, Store


class Database:
    """
    Stable get/put surface over whichever store was injected.
    Defaults to an in-memory ListStore.

    The caller owns exclusive access to the underlying files for the
    lifetime of the Database; concurrent writers are not detected.
    """
    def __init__(self, store: Optional[Store] = None) -> None:
        self._store: Store = store if store is not None else ListStore()

    @classmethod
    def from_config(
        cls,
        config: StoreConfig,
        on_progress: Optional[ProgressCallback] = None,
    ) -> "Database":
        return cls(config.open_store(on_progress=on_progress))

    @property
    def store(self) -> Store:
        return self._store

    def put(self, key: str, value: str) -> None:
        self._store.put(key, value)

    def get(self, key: str) -> str:
        return self._store.get(key)

    def close(self) -> None:
        self._store.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
