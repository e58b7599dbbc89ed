import threading

import pytest
from keeper_core.errors import DuplicateId, InvalidArgument, LocalFailure, NotFound
from keeper_core.models import BinaryRecord, CardRecord, CredentialRecord, TextRecord
from keeper_core.storage import InMemoryStorage, SQLiteStorage, load_storage_provider


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryStorage()
    else:
        s = SQLiteStorage(str(tmp_path / "cache.db"))
        yield s
        s.close()


def test_crud_roundtrip(store):
    repo = store.texts
    rec = TextRecord(id="t1", metadata="m", data="d")
    assert repo.create(rec) == rec
    assert repo.get("t1") == rec
    assert repo.get("missing") is None

    updated = rec.copy(data="d2")
    assert repo.update(updated) == updated
    assert repo.get("t1").data == "d2"

    repo.delete("t1")
    assert repo.get("t1") is None
    assert repo.get_all() == []


def test_create_rejects_empty_and_duplicate_ids(store):
    with pytest.raises(InvalidArgument):
        store.cards.create(CardRecord(id="", number="1"))
    store.cards.create(CardRecord(id="c1", number="1"))
    with pytest.raises(DuplicateId):
        store.cards.create(CardRecord(id="c1", number="2"))
    assert store.cards.get("c1").number == "1"


def test_update_and_delete_require_existing_id(store):
    with pytest.raises(NotFound):
        store.credentials.update(CredentialRecord(id="nope", login="x"))
    with pytest.raises(NotFound):
        store.credentials.delete("nope")


def test_repository_rejects_other_kinds(store):
    with pytest.raises(InvalidArgument):
        store.texts.create(BinaryRecord(id="b1", data=b"x"))


def test_get_all_and_clear(store):
    for i in range(3):
        store.binaries.create(BinaryRecord(id=f"b{i}", metadata="m", data=bytes([i])))
    assert {r.id for r in store.binaries.get_all()} == {"b0", "b1", "b2"}
    assert store.binaries.count() == 3
    assert store.binaries.clear() == 3
    assert store.binaries.get_all() == []
    # other kinds untouched
    assert store.texts.count() == 0


def test_repo_lookup_by_kind(store):
    assert store.repo("texts") is store.texts
    with pytest.raises(InvalidArgument):
        store.repo("passports")


def test_returned_records_are_copies():
    store = InMemoryStorage()
    rec = TextRecord(id="t1", data="d")
    store.texts.create(rec)
    rec.data = "changed"
    fetched = store.texts.get("t1")
    fetched.data = "again"
    assert store.texts.get("t1").data == "d"


def test_sqlite_persists_binary_payload_across_reopen(tmp_path):
    path = str(tmp_path / "nested" / "cache.db")
    s = SQLiteStorage(path)
    s.binaries.create(BinaryRecord(id="b1", metadata="ct", data=b"\x00\xff\x10"))
    s.close()

    reopened = SQLiteStorage(path)
    got = reopened.binaries.get("b1")
    assert got == BinaryRecord(id="b1", metadata="ct", data=b"\x00\xff\x10")
    assert reopened.schema_version() == 1
    reopened.close()


def test_sqlite_schema_has_one_table_per_kind(tmp_path):
    s = SQLiteStorage(str(tmp_path / "cache.db"))
    tables = {row["name"] for row in s.fetch_all("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"binaries", "cards", "credentials", "texts", "schema_version"} <= tables

    cur = s.db.execute("PRAGMA table_info(cards)")
    cols = [row[1] for row in cur.fetchall()]
    assert cols == ["id", "metadata", "number", "holder", "expiration", "cvv"]
    s.close()


def test_sqlite_errors_surface_as_local_failure(tmp_path):
    s = SQLiteStorage(str(tmp_path / "cache.db"))
    s.close()
    with pytest.raises(LocalFailure):
        s.texts.get_all()


def test_load_storage_provider(monkeypatch, tmp_path):
    assert isinstance(load_storage_provider({"provider": "memory"}), InMemoryStorage)

    monkeypatch.setenv("KEEPER_DB_PATH", str(tmp_path / "env.db"))
    monkeypatch.delenv("KEEPER_STORAGE_PROVIDER", raising=False)
    s = load_storage_provider()
    assert isinstance(s, SQLiteStorage)
    assert s.path == str(tmp_path / "env.db")
    s.close()

    with pytest.raises(ValueError):
        load_storage_provider({"provider": "postgres"})


def test_sqlite_fetches_happen_under_the_lock(tmp_path):
    s = SQLiteStorage(str(tmp_path / "cache.db"))
    s.texts.create(TextRecord(id="t1", data="x"))

    class CountingLock:
        def __init__(self):
            self.depth = 0

        def __enter__(self):
            self.depth += 1

        def __exit__(self, *exc):
            self.depth -= 1

    class LockCheckingCursor:
        def __init__(self, cursor):
            self.cursor = cursor

        def fetchone(self):
            seen.append(lock.depth)
            return self.cursor.fetchone()

        def fetchall(self):
            seen.append(lock.depth)
            return self.cursor.fetchall()

    seen = []
    lock = CountingLock()
    real_lock, real_execute = s._lock, s.execute
    s._lock = lock
    s.execute = lambda *a, **kw: LockCheckingCursor(real_execute(*a, **kw))

    assert s.texts.get("t1").data == "x"
    assert len(s.texts.get_all()) == 1
    assert seen and all(depth > 0 for depth in seen)

    s._lock, s.execute = real_lock, real_execute
    s.close()


def test_sqlite_concurrent_readers_and_writers(tmp_path):
    s = SQLiteStorage(str(tmp_path / "cache.db"))
    errors = []

    def writer(n):
        try:
            for i in range(50):
                s.texts.create(TextRecord(id=f"w{n}-{i}", data="x"))
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    def reader():
        try:
            for _ in range(50):
                s.texts.get_all()
                s.texts.get("w0-0")
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    workers = [threading.Thread(target=writer, args=(n,)) for n in range(3)]
    workers += [threading.Thread(target=reader) for _ in range(3)]
    for t in workers:
        t.start()
    for t in workers:
        t.join(30)

    assert errors == []
    assert s.texts.count() == 150
    s.close()
