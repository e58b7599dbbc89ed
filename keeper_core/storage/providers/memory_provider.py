from typing import Dict, List, Optional
from keeper_core.errors import DuplicateId, NotFound
from keeper_core.models import SecureRecord
from keeper_core.storage.provider import RecordRepository, StorageProvider


class InMemoryRecordRepository(RecordRepository):
    def __init__(self, kind: str):
        self.kind = kind
        self.records: Dict[str, SecureRecord] = {}

    def create(self, record):
        self._check_record(record)
        if record.id in self.records:
            raise DuplicateId(f"{self.kind} record {record.id} already exists")
        self.records[record.id] = record.copy()
        return record.copy()

    def get(self, record_id):
        rec = self.records.get(record_id)
        return rec.copy() if rec else None

    def get_all(self) -> List[SecureRecord]:
        return [rec.copy() for rec in self.records.values()]

    def update(self, record):
        self._check_record(record)
        if record.id not in self.records:
            raise NotFound(f"{self.kind} record {record.id} not found")
        self.records[record.id] = record.copy()
        return record.copy()

    def delete(self, record_id: str):
        if self.records.pop(record_id, None) is None:
            raise NotFound(f"{self.kind} record {record_id} not found")

    def clear(self) -> int:
        n = len(self.records)
        self.records.clear()
        return n

    def count(self) -> int:
        return len(self.records)


class InMemoryStorage(StorageProvider):
    name = "memory"

    def __init__(self):
        self.binaries = InMemoryRecordRepository("binaries")
        self.cards = InMemoryRecordRepository("cards")
        self.credentials = InMemoryRecordRepository("credentials")
        self.texts = InMemoryRecordRepository("texts")
