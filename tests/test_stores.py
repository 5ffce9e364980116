import pytest
from embedded_kv_engine import (
    Database, FileStore, IndexedFileStore, ListStore, NotFoundError,
    InvalidSnapshotError, MalformedRecordError, encode_record,
)

Z = '[{"1":"This is a string, with some punctuation."}]'

def fill(db):
    db.put("x", "1")
    db.put("y", "2")
    db.put("z", Z)
    db.put("x", "3")
    db.put("a", "\U0001F1F8\U0001F1EA")
    db.put("multi", "a,b\nc")

def make_store(kind, tmp_path):
    log = str(tmp_path / "store.db")
    if kind == "list":
        return ListStore()
    if kind == "file":
        return FileStore(log)
    return IndexedFileStore(log, log + ".index.json")

@pytest.fixture(params=["list", "file", "indexed"])
def db(request, tmp_path):
    d = Database(make_store(request.param, tmp_path))
    yield d
    d.close()

def test_last_write_wins(db):
    fill(db)
    assert db.get("x") == "3"
    assert db.get("y") == "2"
    assert db.get("z") == Z
    assert db.get("a") == "\U0001F1F8\U0001F1EA"
    assert db.get("multi") == "a,b\nc"

def test_missing_key(db):
    fill(db)
    with pytest.raises(NotFoundError):
        db.get("nope")
    # usable as an ordinary KeyError
    with pytest.raises(KeyError):
        db.get("nope")

def test_cross_strategy_equivalence(tmp_path):
    stores = [ListStore(), FileStore(str(tmp_path / "f.db")),
              IndexedFileStore(str(tmp_path / "i.db"), str(tmp_path / "i.idx"))]
    ops = [(f"k{i % 7}", f"v{i},{i}") for i in range(50)]
    for s in stores:
        for k, v in ops:
            s.put(k, v)
    for k in {k for k, _ in ops} | {"missing"}:
        results = []
        for s in stores:
            try:
                results.append(s.get(k))
            except NotFoundError:
                results.append(None)
        assert results[0] == results[1] == results[2]
    for s in stores:
        s.close()

def test_file_store_persists_across_reopen(tmp_path):
    path = str(tmp_path / "f.db")
    with FileStore(path) as s:
        s.put("x", "1")
        s.put("x", "2")
    with FileStore(path) as s:
        assert s.get("x") == "2"

def test_file_store_rejects_corrupt_log(tmp_path):
    path = tmp_path / "f.db"
    path.write_text(encode_record("x", "1") + "\n%%%\n")
    with FileStore(str(path)) as s:
        with pytest.raises(MalformedRecordError):
            s.get("x")

def progress_phases(events):
    return [e["phase"] for e in events]

def test_indexed_rebuilds_then_loads_snapshot(tmp_path):
    log = str(tmp_path / "i.db")
    snap = tmp_path / "i.idx"
    events = []
    with IndexedFileStore(log, str(snap), on_progress=events.append) as s:
        assert "open.rebuild" in progress_phases(events)
        assert snap.exists()
        fill(s)

    events.clear()
    with IndexedFileStore(log, str(snap), on_progress=events.append) as s:
        phases = progress_phases(events)
        assert "open.load_snapshot" in phases
        assert "open.rebuild" not in phases
        assert phases[-1] == "open.done"
        assert s.get("x") == "3"
        assert s.get("multi") == "a,b\nc"
        with pytest.raises(NotFoundError):
            s.get("nope")

def test_snapshot_and_rebuild_agree(tmp_path):
    log = str(tmp_path / "i.db")
    with IndexedFileStore(log, str(tmp_path / "a.idx")) as s:
        fill(s)
    keys = ["x", "y", "z", "a", "multi"]
    with IndexedFileStore(log, str(tmp_path / "a.idx")) as from_snapshot, \
            IndexedFileStore(log, str(tmp_path / "b.idx")) as rebuilt:
        for k in keys:
            assert from_snapshot.get(k) == rebuilt.get(k)

def test_indexed_rebuild_from_existing_log(tmp_path):
    log = str(tmp_path / "i.db")
    with FileStore(log) as s:
        fill(s)
    with IndexedFileStore(log, str(tmp_path / "i.idx")) as s:
        assert s.get("x") == "3"
        assert s.get("z") == Z

def test_snapshot_is_trusted_without_rescan(tmp_path):
    log = tmp_path / "i.db"
    snap = tmp_path / "i.idx"
    with IndexedFileStore(str(log), str(snap)) as s:
        s.put("x", "1")
    # a line appended behind the store's back is invisible through the snapshot
    with open(log, "a") as f:
        f.write(encode_record("y", "2") + "\n")
    with IndexedFileStore(str(log), str(snap)) as s:
        assert s.get("x") == "1"
        with pytest.raises(NotFoundError):
            s.get("y")

def test_invalid_snapshot_aborts_open(tmp_path):
    snap = tmp_path / "i.idx"
    snap.write_text("{broken")
    with pytest.raises(InvalidSnapshotError):
        IndexedFileStore(str(tmp_path / "i.db"), str(snap))

def test_corrupt_log_aborts_rebuild(tmp_path):
    log = tmp_path / "i.db"
    log.write_text("%%%\n")
    with pytest.raises(MalformedRecordError):
        IndexedFileStore(str(log), str(tmp_path / "i.idx"))
    assert not (tmp_path / "i.idx").exists()

def test_stale_snapshot_offset_detected(tmp_path):
    log = tmp_path / "i.db"
    snap = tmp_path / "i.idx"
    with IndexedFileStore(str(log), str(snap)) as s:
        s.put("x", "1")
        s.put("y", "2")
    snap.write_text('{"x": 0, "y": 0}')
    with IndexedFileStore(str(log), str(snap)) as s:
        assert s.get("x") == "1"
        with pytest.raises(InvalidSnapshotError):
            s.get("y")

def test_snapshot_written_on_every_put(tmp_path):
    import json
    log = str(tmp_path / "i.db")
    snap = tmp_path / "i.idx"
    with IndexedFileStore(log, str(snap)) as s:
        s.put("x", "1")
        first = json.loads(snap.read_text())
        s.put("x", "2")
        second = json.loads(snap.read_text())
    assert first == {"x": 0}
    assert second["x"] > 0

@pytest.mark.parametrize("kind", ["list", "file", "indexed"])
def test_key_with_separator_rejected_everywhere(tmp_path, kind):
    with make_store(kind, tmp_path) as s:
        with pytest.raises(ValueError):
            s.put("a,b", "v")
        with pytest.raises(NotFoundError):
            s.get("a,b")
        s.put("a", "b,c")
        assert s.get("a") == "b,c"

def _record_closes(monkeypatch):
    from embedded_kv_engine.storage import FileStorage
    calls = []
    real_close = FileStorage.close

    def close(self):
        calls.append(self.path)
        real_close(self)

    monkeypatch.setattr(FileStorage, "close", close)
    return calls

def test_handle_closed_when_snapshot_invalid(tmp_path, monkeypatch):
    calls = _record_closes(monkeypatch)
    snap = tmp_path / "i.idx"
    snap.write_text("{broken")
    with pytest.raises(InvalidSnapshotError):
        IndexedFileStore(str(tmp_path / "i.db"), str(snap))
    assert calls == [str(tmp_path / "i.db")]

def test_handle_closed_when_log_corrupt(tmp_path, monkeypatch):
    calls = _record_closes(monkeypatch)
    log = tmp_path / "i.db"
    log.write_text("%%%\n")
    with pytest.raises(MalformedRecordError):
        IndexedFileStore(str(log), str(tmp_path / "i.idx"))
    assert calls == [str(log)]
