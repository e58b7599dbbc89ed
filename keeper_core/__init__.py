"""
Keeper Core Package
===================
Client-side secure cache and synchronization engine for the secrets manager.

Provides:
- Master-password key derivation and AES-GCM field cipher
- Per-kind field-encryption contracts (binaries, cards, credentials, texts)
- Local cache providers (SQLite default, in-memory)
- Remote store adapters (HTTP, in-process)
- Dual-write orchestrator with explicit partial-failure results
- Remote-wins reconciliation engine
"""

from .models import BinaryRecord, CardRecord, CredentialRecord, SecureRecord, TextRecord
from .service import KeeperService, PartialFailure, WriteResult, build_service
from .session import Session
from .sync import SyncEngine, SyncReport, SyncState

__all__ = [
    "BinaryRecord",
    "CardRecord",
    "CredentialRecord",
    "SecureRecord",
    "TextRecord",
    "KeeperService",
    "PartialFailure",
    "WriteResult",
    "build_service",
    "Session",
    "SyncEngine",
    "SyncReport",
    "SyncState",
]
