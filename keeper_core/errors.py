"""
keeper_core.errors
------------------
Exception taxonomy shared by every component.

    KeeperError
    ├── RemoteError              network or server side, aborts before any local write
    │   ├── RemoteUnavailable
    │   └── RemoteRejected
    │       └── RemoteNotFound
    ├── LocalStoreError          cache side, surfaced verbatim
    │   ├── LocalFailure
    │   ├── NotFound
    │   ├── DuplicateId
    │   └── InvalidArgument
    ├── AuthenticationFailed     wrong or absent key
    │   └── SessionNotInitialized
    ├── OperationCancelled
    ├── SyncError
    └── PartialFailureError
"""

from __future__ import annotations
from typing import Any, Optional


class KeeperError(Exception):
    pass


# --------- Remote store ----------
class RemoteError(KeeperError):
    pass


class RemoteUnavailable(RemoteError):
    pass


class RemoteRejected(RemoteError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RemoteNotFound(RemoteRejected):
    pass


# --------- Local store ----------
class LocalStoreError(KeeperError):
    pass


class LocalFailure(LocalStoreError):
    pass


class NotFound(LocalStoreError):
    pass


class DuplicateId(LocalStoreError):
    pass


class InvalidArgument(LocalStoreError):
    pass


# --------- Crypto ----------
class AuthenticationFailed(KeeperError):
    pass


class SessionNotInitialized(AuthenticationFailed):
    pass


# --------- Orchestration ----------
class OperationCancelled(KeeperError):
    pass


class SyncError(KeeperError):
    pass


class PartialFailureError(KeeperError):
    """Remote mutation committed, local mutation did not."""

    def __init__(self, message: str, record: Any = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.record = record
        self.cause = cause
