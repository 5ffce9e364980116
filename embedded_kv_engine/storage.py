from __future__ import annotations
import logging
import os
from typing import BinaryIO, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

NEWLINE = b"\n"


class FileStorage:
    """
    Append-only line log. Every line is one encoded record; offsets are
    byte positions of the first byte of a line. Existing bytes are never
    rewritten, new lines always go to end-of-file.

    Single writer only: two FileStorage objects on the same path are not
    coordinated in any way.
    """
    def __init__(self, path: str) -> None:
        self.path = os.fspath(path)
        self._fh: Optional[BinaryIO] = None

    @property
    def closed(self) -> bool:
        return self._fh is None

    def open(self) -> None:
        if self._fh is not None:
            return
        # a+b creates the file if missing; reads may seek anywhere, writes land at EOF
        self._fh = open(self.path, "a+b")
        logger.debug("opened log %s", self.path)

    def close(self) -> None:
        if self._fh is None:
            return
        try:
            self._fh.flush()
        finally:
            self._fh.close()
            self._fh = None
            logger.debug("closed log %s", self.path)

    def __enter__(self) -> "FileStorage":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _handle(self) -> BinaryIO:
        if self._fh is None:
            raise ValueError(f"log {self.path} is not open")
        return self._fh

    def append_line(self, line: str) -> int:
        """
        Append line + terminator at end-of-file, flush, return the offset
        where the line starts.
        """
        fh = self._handle()
        fh.seek(0, os.SEEK_END)
        offset = fh.tell()
        fh.write(line.encode("ascii") + NEWLINE)
        fh.flush()
        logger.debug("appended record to %s at offset %d", self.path, offset)
        return offset

    def read_line_at(self, offset: int) -> str:
        fh = self._handle()
        fh.seek(offset)
        return fh.readline().rstrip(NEWLINE).decode("ascii", errors="replace")

    def iter_line_offsets(self) -> Iterator[Tuple[int, str]]:
        """
        Stream the whole log from offset 0, yielding (offset, line).
        Each call starts a fresh scan. Lines are read through a separate
        handle so the scan is not disturbed by appends or seeks on the
        main one.
        """
        self._handle().flush()
        with open(self.path, "rb") as f:
            offset = 0
            for raw in f:
                yield offset, raw.rstrip(NEWLINE).decode("ascii", errors="replace")
                offset += len(raw)
