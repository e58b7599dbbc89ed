from __future__ import annotations
from typing import List, Optional
from keeper_core.context import OperationContext
from keeper_core.errors import (
    RemoteError,
    RemoteNotFound,
    RemoteRejected,
    RemoteUnavailable,
)
from keeper_core.models import SecureRecord

__all__ = [
    "RemoteStore",
    "RemoteError",
    "RemoteUnavailable",
    "RemoteRejected",
    "RemoteNotFound",
]


class RemoteStore:
    """
    Remote Store contract (the authoritative, per-user record store).

    Records cross this boundary with their sensitive fields already
    encrypted; implementations store and return them verbatim. Every call may
    raise RemoteUnavailable (connectivity, timeout) or RemoteRejected
    (authentication, validation, RemoteNotFound for unknown ids).
    """
    name: str = "base"

    def register(self, login: str, password: str, ctx: Optional[OperationContext] = None) -> None:
        raise NotImplementedError

    def login(self, login: str, password: str, ctx: Optional[OperationContext] = None) -> None:
        raise NotImplementedError

    def create(self, kind: str, record: SecureRecord, ctx: Optional[OperationContext] = None) -> SecureRecord:
        """Store a new record; the returned copy carries the server-assigned id."""
        raise NotImplementedError

    def get_all(self, kind: str, ctx: Optional[OperationContext] = None) -> List[SecureRecord]:
        raise NotImplementedError

    def update(self, kind: str, record: SecureRecord, ctx: Optional[OperationContext] = None) -> SecureRecord:
        raise NotImplementedError

    def delete(self, kind: str, record_id: str, ctx: Optional[OperationContext] = None) -> None:
        raise NotImplementedError

    def healthz(self) -> dict:
        return {"status": "ok", "transport": self.name}

    def close(self) -> None:
        return
