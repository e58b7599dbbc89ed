"""
keeper_core.sync
----------------
Reconciliation engine: one-directional, remote-wins pull.

For each kind, in the fixed order binaries → cards → credentials → texts:
  1. pull every record of the kind from the remote store
  2. drop every local record that is missing remotely or differs from it
  3. insert every pulled record not already present, ciphertext unchanged

The local table ends up identical to the pull (full replacement); records
whose fingerprint already matches are simply left where they are. The first
failure stops the pass with ``failed to sync <kind>: <cause>``; kinds done
before it stay done. Nothing is ever written to the remote store.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import threading
from .constants import KINDS
from .context import OperationContext, check
from .errors import KeeperError, SyncError
from .logger import get_logger
from .storage.provider import StorageProvider
from .transport.transport_base import RemoteStore
from .utils import now_ts

log = get_logger("keeper.sync")


class SyncState(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"


@dataclass
class KindReport:
    kind: str
    pulled: int = 0
    kept: int = 0
    removed: int = 0
    inserted: int = 0


@dataclass
class SyncReport:
    started_at: str = field(default_factory=now_ts)
    finished_at: Optional[str] = None
    kinds: List[KindReport] = field(default_factory=list)

    def for_kind(self, kind: str) -> Optional[KindReport]:
        return next((k for k in self.kinds if k.kind == kind), None)


class SyncEngine:
    def __init__(self, remote: RemoteStore, storage: StorageProvider):
        self.remote = remote
        self.storage = storage
        self.state = SyncState.IDLE
        self.last_report: Optional[SyncReport] = None
        self._lock = threading.Lock()

    def sync(self, ctx: Optional[OperationContext] = None) -> SyncReport:
        if not self._lock.acquire(blocking=False):
            raise SyncError("sync already in progress")
        self.state = SyncState.SYNCING
        report = SyncReport()
        log.info("sync started")
        try:
            for kind in KINDS:
                try:
                    report.kinds.append(self._sync_kind(kind, ctx))
                except KeeperError as exc:
                    log.error(f"sync aborted at {kind}: {exc}")
                    raise SyncError(f"failed to sync {kind}: {exc}") from exc
            report.finished_at = now_ts()
            self.last_report = report
            log.info("sync finished " + ", ".join(
                f"{k.kind}={k.pulled}(+{k.inserted}/-{k.removed})" for k in report.kinds
            ))
            return report
        finally:
            self.state = SyncState.IDLE
            self._lock.release()

    def _sync_kind(self, kind: str, ctx: Optional[OperationContext]) -> KindReport:
        check(ctx, f"pulling {kind}")
        pulled = self.remote.get_all(kind, ctx=ctx)
        repo = self.storage.repo(kind)
        result = KindReport(kind=kind, pulled=len(pulled))

        wanted = {rec.id: rec for rec in pulled}
        for local in repo.get_all():
            remote_rec = wanted.get(local.id)
            if remote_rec is not None and remote_rec.fingerprint() == local.fingerprint():
                del wanted[local.id]
                result.kept += 1
                continue
            repo.delete(local.id)
            result.removed += 1

        for rec in wanted.values():
            check(ctx, f"inserting {kind}")
            repo.create(rec)
            result.inserted += 1

        log.debug(f"synced {kind}: pulled={result.pulled} kept={result.kept} "
                  f"removed={result.removed} inserted={result.inserted}")
        return result
