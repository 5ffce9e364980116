from __future__ import annotations
import logging
from typing import List, Optional, Protocol, Tuple

from .codec import check_key, decode_record, encode_record
from .errors import InvalidSnapshotError, MalformedRecordError, NotFoundError
from .index import IndexSnapshot, InMemoryIndex
from .progress import Progress, ProgressCallback
from .storage import FileStorage

logger = logging.getLogger(__name__)


class Store(Protocol):
    def get(self, key: str) -> str: ...
    def put(self, key: str, value: str) -> None: ...
    def close(self) -> None: ...


class ListStore:
    """
    Process memory only. put is O(1), get scans for the last matching key.
    """
    def __init__(self) -> None:
        self._pairs: List[Tuple[str, str]] = []

    def put(self, key: str, value: str) -> None:
        check_key(key)
        self._pairs.append((key, value))

    def get(self, key: str) -> str:
        for k, v in reversed(self._pairs):
            if k == key:
                return v
        raise NotFoundError(key)

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class _FileBacked:
    def __init__(self, path: str) -> None:
        self._fs = FileStorage(path)
        self._fs.open()

    @property
    def path(self) -> str:
        return self._fs.path

    def close(self) -> None:
        self._fs.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class FileStore(_FileBacked):
    """
    Append log without an index. Every get decodes the whole file and keeps
    the last match; nothing is rebuilt on reopen.
    """
    def put(self, key: str, value: str) -> None:
        self._fs.append_line(encode_record(key, value))

    def get(self, key: str) -> str:
        found = False
        value = ""
        for offset, line in self._fs.iter_line_offsets():
            try:
                k, v = decode_record(line)
            except MalformedRecordError as e:
                raise MalformedRecordError(str(e), offset) from e
            if k == key:
                found, value = True, v
        if not found:
            raise NotFoundError(key)
        return value


class IndexedFileStore(_FileBacked):
    """
    Append log + in-memory index + on-disk index snapshot.

    Opening goes Uninitialized -> (load snapshot | rebuild from log) -> Ready.
    An existing snapshot is trusted as-is and the log is not scanned. Without
    one, the index is rebuilt from a full scan and persisted right away.
    Every put rewrites the whole snapshot.
    """
    def __init__(
        self,
        path: str,
        snapshot_path: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        super().__init__(path)
        self._snapshot = IndexSnapshot(snapshot_path)
        self._progress = Progress(on_progress)
        try:
            self._index = self._open_index()
        except BaseException:
            self.close()
            raise

    @property
    def snapshot_path(self) -> str:
        return self._snapshot.path

    def _open_index(self) -> InMemoryIndex:
        self._progress.emit("open.start", 0, self.path)
        index = self._snapshot.load()
        if index is not None:
            self._progress.emit("open.load_snapshot", 100, self._snapshot.path)
            logger.debug("index for %s loaded from snapshot (%d keys)", self.path, len(index))
        else:
            self._progress.emit("open.rebuild", 0, self.path)
            index = InMemoryIndex.build(self._fs)
            self._progress.emit("open.rebuild", 100, f"{len(index)} keys")
            self._progress.emit("open.persist", 0, self._snapshot.path)
            self._snapshot.persist(index)
            self._progress.emit("open.persist", 100, self._snapshot.path)
            logger.debug("index for %s rebuilt from log (%d keys)", self.path, len(index))
        self._progress.emit("open.done", 100)
        return index

    def put(self, key: str, value: str) -> None:
        offset = self._fs.append_line(encode_record(key, value))
        self._index.record(key, offset)
        self._snapshot.persist(self._index)

    def get(self, key: str) -> str:
        offset = self._index.lookup(key)
        if offset is None:
            raise NotFoundError(key)
        line = self._fs.read_line_at(offset)
        try:
            k, v = decode_record(line)
        except MalformedRecordError as e:
            raise MalformedRecordError(str(e), offset) from e
        if k != key:
            raise InvalidSnapshotError(
                f"{self._snapshot.path}: offset {offset} holds key {k!r}, expected {key!r}"
            )
        return v
