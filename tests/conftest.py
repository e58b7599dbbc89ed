import pytest
from keeper_core.service import KeeperService
from keeper_core.storage import InMemoryStorage, SQLiteStorage
from keeper_core.sync import SyncEngine
from keeper_core.transport.transport_local import LocalRemoteStore


class FlakyRepo:
    """Wraps a repository and fails the named operations with ``error``."""

    def __init__(self, inner, error, fail_on=("create", "update", "delete")):
        self.inner = inner
        self.kind = inner.kind
        self.error = error
        self.fail_on = set(fail_on)

    def __getattr__(self, name):
        attr = getattr(self.inner, name)
        if name in self.fail_on:
            def boom(*args, **kwargs):
                raise self.error
            return boom
        return attr


class RecordingRemote:
    """Remote store wrapper that records calls and can fail on demand."""

    def __init__(self, inner, fail_with=None, fail_on=()):
        self.inner = inner
        self.name = "recording"
        self.calls = []
        self.fail_with = fail_with
        self.fail_on = set(fail_on)

    def _call(self, op, *args, **kwargs):
        self.calls.append((op, args[0] if args else None))
        if op in self.fail_on:
            raise self.fail_with
        return getattr(self.inner, op)(*args, **kwargs)

    def register(self, *a, **kw): return self._call("register", *a, **kw)
    def login(self, *a, **kw): return self._call("login", *a, **kw)
    def create(self, *a, **kw): return self._call("create", *a, **kw)
    def get_all(self, *a, **kw): return self._call("get_all", *a, **kw)
    def update(self, *a, **kw): return self._call("update", *a, **kw)
    def delete(self, *a, **kw): return self._call("delete", *a, **kw)
    def close(self): pass


@pytest.fixture
def remote():
    r = LocalRemoteStore()
    r.register("alice", "pw1")
    return r


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def sqlite_storage(tmp_path):
    s = SQLiteStorage(str(tmp_path / "cache.db"))
    yield s
    s.close()


@pytest.fixture
def service(remote, storage):
    svc = KeeperService(remote, storage, SyncEngine(remote, storage))
    svc.set_encryption("pw1", "alice")
    return svc
