from __future__ import annotations
import json
import logging
import os
from typing import Dict, ItemsView, Optional

from .codec import decode_record
from .errors import InvalidSnapshotError, MalformedRecordError
from .storage import FileStorage

logger = logging.getLogger(__name__)


class InMemoryIndex:
    """
    key -> byte offset of the key's latest record in the log.
    """
    def __init__(self, offsets: Optional[Dict[str, int]] = None) -> None:
        self._offsets: Dict[str, int] = dict(offsets or {})

    @classmethod
    def build(cls, storage: FileStorage) -> "InMemoryIndex":
        """
        Full scan of the log. Later records overwrite earlier ones, which is
        exactly last-write-wins. Any undecodable line aborts the build.
        """
        index = cls()
        for offset, line in storage.iter_line_offsets():
            try:
                key, _ = decode_record(line)
            except MalformedRecordError as e:
                raise MalformedRecordError(str(e), offset) from e
            index.record(key, offset)
        return index

    def lookup(self, key: str) -> Optional[int]:
        return self._offsets.get(key)

    def record(self, key: str, offset: int) -> None:
        self._offsets[key] = offset

    def items(self) -> ItemsView[str, int]:
        return self._offsets.items()

    def to_dict(self) -> Dict[str, int]:
        return dict(self._offsets)

    def __len__(self) -> int:
        return len(self._offsets)

    def __contains__(self, key: object) -> bool:
        return key in self._offsets


class IndexSnapshot:
    """
    JSON object {key: offset} on disk. Rewritten wholesale on every persist()
    through a temp file + os.replace, so readers only ever see a complete
    snapshot.
    """
    def __init__(self, path: str) -> None:
        self.path = os.fspath(path)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> Optional[InMemoryIndex]:
        if not self.exists():
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except ValueError as e:
                raise InvalidSnapshotError(f"{self.path}: not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise InvalidSnapshotError(f"{self.path}: expected a JSON object")
        for key, offset in data.items():
            # bool is an int subclass; reject it explicitly
            if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
                raise InvalidSnapshotError(f"{self.path}: bad offset {offset!r} for key {key!r}")
        logger.debug("loaded snapshot %s (%d keys)", self.path, len(data))
        return InMemoryIndex(data)

    def persist(self, index: InMemoryIndex) -> None:
        tmp_path = self.path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(index.to_dict(), f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
