# keeper_core/storage/provider.py
from __future__ import annotations
from typing import List, Optional
from keeper_core.constants import KINDS
from keeper_core.errors import InvalidArgument
from keeper_core.models import SecureRecord


class RecordRepository:
    """
    Offline CRUD over a single record kind.

    Contract:
      create(record)  -> record   InvalidArgument on empty id, DuplicateId on existing id
      get(id)         -> record | None
      get_all()       -> list (unordered)
      update(record)  -> record   NotFound on absent id
      delete(id)      -> None     NotFound on absent id
      clear()         -> number of records removed
    """
    kind: str = ""

    def create(self, record: SecureRecord) -> SecureRecord:
        raise NotImplementedError

    def get(self, record_id: str) -> Optional[SecureRecord]:
        raise NotImplementedError

    def get_all(self) -> List[SecureRecord]:
        raise NotImplementedError

    def update(self, record: SecureRecord) -> SecureRecord:
        raise NotImplementedError

    def delete(self, record_id: str) -> None:
        raise NotImplementedError

    def clear(self) -> int:
        raise NotImplementedError

    def count(self) -> int:
        return len(self.get_all())

    # ---------------------------
    # Shared validation
    # ---------------------------
    def _check_record(self, record: SecureRecord) -> None:
        if record.kind != self.kind:
            raise InvalidArgument(f"{self.kind} repository cannot store {record.kind or 'untyped'} records")
        if not record.id:
            raise InvalidArgument(f"{self.kind} record id must not be empty")


class StorageProvider:
    """Local cache: one repository per record kind."""
    name: str = "base"

    binaries: RecordRepository
    cards: RecordRepository
    credentials: RecordRepository
    texts: RecordRepository

    def repo(self, kind: str) -> RecordRepository:
        if kind not in KINDS:
            raise InvalidArgument(f"unknown record kind: {kind}")
        return getattr(self, kind)

    def flush(self) -> None:
        return

    def close(self) -> None:
        return
