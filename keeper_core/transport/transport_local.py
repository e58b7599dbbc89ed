# keeper_core/transport/transport_local.py
from typing import Dict, List, Optional
from keeper_core.constants import KINDS
from keeper_core.context import OperationContext, check
from keeper_core.errors import RemoteNotFound, RemoteRejected, RemoteUnavailable
from keeper_core.logger import get_logger
from keeper_core.models import SecureRecord
from keeper_core.transport.transport_base import RemoteStore
from keeper_core.utils import new_id, sha256

log = get_logger("keeper.transport.local")


class LocalRemoteStore(RemoteStore):
    """
    In-process stand-in for the server: per-user record tables, ids assigned
    on create, cookie-less "current user" after login. Useful offline and
    in tests; ``online = False`` makes every call fail as unreachable.
    """
    name = "local"

    def __init__(self):
        self.users: Dict[str, str] = {}
        self.tables: Dict[str, Dict[str, Dict[str, SecureRecord]]] = {}
        self.current_user: Optional[str] = None
        self.online = True

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------
    def register(self, login, password, ctx=None):
        self._reachable(ctx)
        if login in self.users:
            raise RemoteRejected(f"user {login} already exists", status=409)
        self.users[login] = sha256(password.encode("utf-8"))
        self.tables[login] = {kind: {} for kind in KINDS}
        self.current_user = login
        log.info(f"[LOCAL REMOTE] registered user={login}")

    def login(self, login, password, ctx=None):
        self._reachable(ctx)
        if self.users.get(login) != sha256(password.encode("utf-8")):
            raise RemoteRejected("invalid login or password", status=401)
        self.current_user = login
        log.info(f"[LOCAL REMOTE] login user={login}")

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------
    def create(self, kind, record, ctx=None):
        table = self._table(kind, ctx)
        stored = record.copy(id=new_id())
        table[stored.id] = stored
        return stored.copy()

    def get_all(self, kind, ctx=None) -> List[SecureRecord]:
        return [rec.copy() for rec in self._table(kind, ctx).values()]

    def update(self, kind, record, ctx=None):
        table = self._table(kind, ctx)
        if record.id not in table:
            raise RemoteNotFound(f"{kind} record {record.id} not found", status=404)
        table[record.id] = record.copy()
        return record.copy()

    def delete(self, kind, record_id, ctx=None):
        table = self._table(kind, ctx)
        if table.pop(record_id, None) is None:
            raise RemoteNotFound(f"{kind} record {record_id} not found", status=404)

    def healthz(self) -> dict:
        return {"status": "ok" if self.online else "unreachable", "transport": self.name}

    # ------------------------------------------------------------------
    def _reachable(self, ctx: Optional[OperationContext]) -> None:
        check(ctx, "remote call")
        if not self.online:
            raise RemoteUnavailable("remote store is unreachable")

    def _table(self, kind: str, ctx: Optional[OperationContext]) -> Dict[str, SecureRecord]:
        self._reachable(ctx)
        if self.current_user is None:
            raise RemoteRejected("not authenticated", status=401)
        if kind not in KINDS:
            raise RemoteRejected(f"unknown record kind: {kind}", status=400)
        return self.tables[self.current_user][kind]
