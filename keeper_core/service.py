"""
keeper_core.service
-------------------
Dual-write orchestrator: the single entry point application code uses for
record operations, and the only component that ever holds plaintext.

Writes run as a two-step saga:

    encrypt → remote step → local step (same ciphertext) → decrypt for caller

- A remote failure propagates untouched; the local cache is not touched.
- A local failure after the remote commit (I/O error, constraint, deadline or
  cancellation) is returned as WriteResult.partial instead of being raised,
  so the committed remote result is never lost. Reconciliation repairs it.

Reads come from the local cache only and never touch the network.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional
from .config import KeeperConfig
from .context import OperationContext, check
from .errors import (
    InvalidArgument,
    LocalStoreError,
    NotFound,
    OperationCancelled,
    PartialFailureError,
    SessionNotInitialized,
)
from .fields import decrypt_fields, encrypt_fields, field_table
from .logger import get_logger
from .models import SecureRecord
from .session import Session
from .storage import StorageProvider, load_storage_provider
from .sync import SyncEngine, SyncReport
from .transport import RemoteStore, transport_factory

log = get_logger("keeper.service")


@dataclass
class PartialFailure:
    """Remote step committed; ``step`` on the local side failed with ``cause``."""
    step: str
    cause: Exception

    def __str__(self) -> str:
        return f"{self.step} committed remotely but local cache failed: {self.cause}"


@dataclass
class WriteResult:
    record: Optional[SecureRecord] = None
    partial: Optional[PartialFailure] = None

    @property
    def ok(self) -> bool:
        return self.partial is None

    def raise_for_partial(self) -> Optional[SecureRecord]:
        if self.partial is not None:
            raise PartialFailureError(str(self.partial), record=self.record, cause=self.partial.cause)
        return self.record


class KeeperService:
    def __init__(
        self,
        remote: RemoteStore,
        storage: StorageProvider,
        sync_engine: Optional[SyncEngine] = None,
        encrypt_credentials: bool = False,
        session: Optional[Session] = None,
    ):
        self.remote = remote
        self.storage = storage
        self.sync_engine = sync_engine or SyncEngine(remote, storage)
        self.encrypt_credentials = encrypt_credentials
        self.session = session

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def set_encryption(self, password: str, login: str = "") -> None:
        self.session = Session.open(login, password)

    def is_encryption_set(self) -> bool:
        return self.session is not None and self.session.active

    def register(self, login: str, password: str, ctx: Optional[OperationContext] = None) -> None:
        self.remote.register(login, password, ctx=ctx)
        self.set_encryption(password, login)
        log.info(f"registered user={login}")

    def login(self, login: str, password: str, ctx: Optional[OperationContext] = None) -> SyncReport:
        """Authenticate, derive the session key, then run the initial sync.

        A sync failure raises SyncError; the session stays open so cached
        records remain readable and force_sync() can be retried.
        """
        self.remote.login(login, password, ctx=ctx)
        self.set_encryption(password, login)
        log.info(f"login user={login}")
        return self.sync_engine.sync(ctx)

    def logout(self) -> None:
        if self.session is not None:
            self.session.close()
        self.session = None

    def force_sync(self, ctx: Optional[OperationContext] = None) -> SyncReport:
        return self.sync_engine.sync(ctx)

    def _cipher(self):
        if not self.is_encryption_set():
            raise SessionNotInitialized("no active session; log in or register first")
        return self.session.cipher

    def _encrypt(self, record: SecureRecord) -> SecureRecord:
        return encrypt_fields(record, self._cipher(), field_table(record.kind, self.encrypt_credentials))

    def _decrypt(self, record: SecureRecord) -> SecureRecord:
        return decrypt_fields(record, self._cipher(), field_table(record.kind, self.encrypt_credentials))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _local_step(
        self,
        step: str,
        remote_record: Optional[SecureRecord],
        apply: Callable[[], Optional[SecureRecord]],
        ctx: Optional[OperationContext],
    ) -> WriteResult:
        try:
            check(ctx, f"local {step}")
            stored = apply()
        except (LocalStoreError, OperationCancelled) as exc:
            ident = remote_record.id if remote_record is not None else ""
            log.warning(f"{step} {ident} committed remotely, local cache failed: {exc}")
            record = self._decrypt(remote_record) if remote_record is not None else None
            return WriteResult(record=record, partial=PartialFailure(step, exc))
        return WriteResult(record=self._decrypt(stored) if stored is not None else None)

    def create(self, record: SecureRecord, ctx: Optional[OperationContext] = None) -> WriteResult:
        kind = record.kind
        repo = self.storage.repo(kind)
        encrypted = self._encrypt(record.copy(id=""))

        check(ctx, "remote create")
        created = self.remote.create(kind, encrypted, ctx=ctx)
        log.info(f"created {kind} {created.id} remotely")

        return self._local_step("create", created, lambda: repo.create(created), ctx)

    def update(self, record: SecureRecord, ctx: Optional[OperationContext] = None) -> WriteResult:
        if not record.id:
            raise InvalidArgument(f"{record.kind} record id must not be empty")
        kind = record.kind
        repo = self.storage.repo(kind)
        encrypted = self._encrypt(record)

        check(ctx, "remote update")
        updated = self.remote.update(kind, encrypted, ctx=ctx)
        log.info(f"updated {kind} {updated.id} remotely")

        return self._local_step("update", updated, lambda: repo.update(updated), ctx)

    def delete(self, kind: str, record_id: str, ctx: Optional[OperationContext] = None) -> WriteResult:
        repo = self.storage.repo(kind)

        check(ctx, "remote delete")
        self.remote.delete(kind, record_id, ctx=ctx)
        log.info(f"deleted {kind} {record_id} remotely")

        def apply():
            try:
                repo.delete(record_id)
            except NotFound:
                # Already gone locally: that is the intended end state.
                log.debug(f"{kind} {record_id} was not cached")
            return None

        return self._local_step("delete", None, apply, ctx)

    # ------------------------------------------------------------------
    # Reads (local cache only)
    # ------------------------------------------------------------------
    def read(self, kind: str, record_id: str) -> Optional[SecureRecord]:
        record = self.storage.repo(kind).get(record_id)
        if record is None:
            return None
        return self._decrypt(record)

    def read_all(self, kind: str) -> List[SecureRecord]:
        return [self._decrypt(rec) for rec in self.storage.repo(kind).get_all()]

    def close(self) -> None:
        self.logout()
        self.storage.close()
        self.remote.close()


def build_service(config: Optional[KeeperConfig] = None) -> KeeperService:
    """Wire storage, remote store and sync engine from configuration."""
    config = config or KeeperConfig.from_env()
    get_logger(level=config.log_level, to_file=config.log_file)
    storage = load_storage_provider(config)
    remote = transport_factory(config)
    log.info(f"keeper service storage={storage.name} remote={remote.name}")
    return KeeperService(
        remote,
        storage,
        SyncEngine(remote, storage),
        encrypt_credentials=config.encrypt_credentials,
    )
