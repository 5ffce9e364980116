#!/usr/bin/env python3
# Example usage of embedded_kv_engine

from rich.console import Console

from embedded_kv_engine import Database, NotFoundError, StoreConfig, StoreKind

console = Console()


def progress_printer(evt):
    console.print(f"[dim]\\[progress] {evt['phase']} {evt['pct']}% {evt.get('msg', '')}[/dim]")


def main() -> None:
    # Indexed store: log at demo.db, index snapshot at demo.db.index.json.
    # Single writer: do not open the same log from two processes.
    cfg = StoreConfig(kind=StoreKind.INDEXED, path="demo.db")
    with Database.from_config(cfg, on_progress=progress_printer) as db:
        db.put("x", "1")
        db.put("y", "2")
        db.put("x", "3")
        db.put("note", "a,b\nc")

        console.print("x =", db.get("x"))
        console.print("note =", repr(db.get("note")))
        try:
            db.get("z")
        except NotFoundError as e:
            console.print("z:", e)

    # Reopen: index comes from the snapshot, the log is not rescanned
    with Database.from_config(cfg, on_progress=progress_printer) as db:
        console.print("x after reopen =", db.get("x"))


if __name__ == "__main__":
    main()
