from .codec import decode_record, encode_record
from .config import StoreConfig, StoreKind
from .database import Database
from .errors import InvalidSnapshotError, KVError, MalformedRecordError, NotFoundError
from .index import IndexSnapshot, InMemoryIndex
from .storage import FileStorage
from .stores import FileStore, IndexedFileStore, ListStore, Store

__all__ = [
    "Database",
    "StoreConfig",
    "StoreKind",
    "Store",
    "ListStore",
    "FileStore",
    "IndexedFileStore",
    "FileStorage",
    "InMemoryIndex",
    "IndexSnapshot",
    "encode_record",
    "decode_record",
    "KVError",
    "MalformedRecordError",
    "InvalidSnapshotError",
    "NotFoundError",
]
