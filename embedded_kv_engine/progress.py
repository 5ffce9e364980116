from __future__ import annotations
from typing import Any, Callable, Dict, Optional

ProgressCallback = Callable[[Dict[str, Any]], None]


class Progress:
    """
    Thin wrapper around an optional on_progress callback.
    Events are dicts: {"phase": str, "pct": int, "msg": str}.
    """
    def __init__(self, on_progress: Optional[ProgressCallback] = None) -> None:
        self._cb = on_progress

    def emit(self, phase: str, pct: int = 0, msg: str = "") -> None:
        if self._cb is None:
            return
        self._cb({"phase": phase, "pct": max(0, min(100, int(pct))), "msg": msg})
