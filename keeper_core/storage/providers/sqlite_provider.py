from __future__ import annotations
from typing import Any, Dict, List, Optional
import contextlib, os, sqlite3, threading
from keeper_core.constants import SCHEMA_VERSION
from keeper_core.errors import DuplicateId, LocalFailure, NotFound
from keeper_core.logger import get_logger
from keeper_core.models import SecureRecord, record_type
from keeper_core.storage.models import SCHEMAS, TableSchema
from keeper_core.storage.provider import RecordRepository, StorageProvider
from keeper_core.utils import now_ts

log = get_logger("keeper.storage.sqlite")


class SQLiteRecordRepository(RecordRepository):
    def __init__(self, storage: "SQLiteStorage", schema: TableSchema):
        self.storage = storage
        self.schema = schema
        self.kind = schema.kind
        self.record_cls = record_type(schema.kind)
        self._select = f"SELECT id, {', '.join(schema.column_names)} FROM {schema.table}"

    def _to_record(self, row: Dict[str, Any]) -> SecureRecord:
        # NULL columns fall back to the dataclass defaults
        return self.record_cls(**{k: v for k, v in row.items() if v is not None})

    def _row(self, record: SecureRecord) -> Dict[str, Any]:
        row = {"id": record.id}
        for name in self.schema.column_names:
            row[name] = getattr(record, name)
        return row

    def _exists(self, record_id: str) -> bool:
        return self.storage.fetch_one(f"SELECT 1 AS hit FROM {self.schema.table} WHERE id=?", (record_id,)) is not None

    def create(self, record):
        self._check_record(record)
        if self._exists(record.id):
            raise DuplicateId(f"{self.kind} record {record.id} already exists")
        try:
            self.storage.insert(self.schema.table, self._row(record))
        except sqlite3.IntegrityError as exc:
            raise DuplicateId(f"{self.kind} record {record.id} already exists") from exc
        return record.copy()

    def get(self, record_id: str) -> Optional[SecureRecord]:
        row = self.storage.fetch_one(f"{self._select} WHERE id=?", (record_id,))
        return self._to_record(row) if row else None

    def get_all(self) -> List[SecureRecord]:
        return [self._to_record(row) for row in self.storage.fetch_all(self._select)]

    def update(self, record):
        self._check_record(record)
        assignments = ", ".join(f"{name}=?" for name in self.schema.column_names)
        values = tuple(getattr(record, name) for name in self.schema.column_names)
        cur = self.storage.execute(
            f"UPDATE {self.schema.table} SET {assignments} WHERE id=?", values + (record.id,), commit=True
        )
        if cur.rowcount == 0:
            raise NotFound(f"{self.kind} record {record.id} not found")
        return record.copy()

    def delete(self, record_id: str) -> None:
        cur = self.storage.execute(f"DELETE FROM {self.schema.table} WHERE id=?", (record_id,), commit=True)
        if cur.rowcount == 0:
            raise NotFound(f"{self.kind} record {record_id} not found")

    def clear(self) -> int:
        cur = self.storage.execute(f"DELETE FROM {self.schema.table}", commit=True)
        return cur.rowcount

    def count(self) -> int:
        row = self.storage.fetch_one(f"SELECT COUNT(*) AS n FROM {self.schema.table}")
        return row["n"]


class SQLiteStorage(StorageProvider):
    name = "sqlite"

    def __init__(self, path="db/keeper_cache.db"):
        # If no directory, default to current working directory
        dir_path = os.path.dirname(path) or "."
        os.makedirs(dir_path, exist_ok=True)
        self.path = path
        self._lock = threading.RLock()
        try:
            self.db = sqlite3.connect(path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise LocalFailure(f"cannot open local cache {path}: {exc}") from exc
        self.db.row_factory = sqlite3.Row

        self._init()

        self.binaries = SQLiteRecordRepository(self, SCHEMAS["binaries"])
        self.cards = SQLiteRecordRepository(self, SCHEMAS["cards"])
        self.credentials = SQLiteRecordRepository(self, SCHEMAS["credentials"])
        self.texts = SQLiteRecordRepository(self, SCHEMAS["texts"])

    def execute(self, sql: str, params: tuple = None, commit: bool = False):
        with self._lock:
            try:
                cur = self.db.execute(sql, params) if params else self.db.execute(sql)
                if commit:
                    self.db.commit()
                return cur
            except sqlite3.IntegrityError:
                self._rollback()
                raise
            except sqlite3.Error as exc:
                self._rollback()
                raise LocalFailure(f"local cache error: {exc}") from exc

    def _rollback(self) -> None:
        # A closed or broken connection has nothing left to roll back.
        with contextlib.suppress(sqlite3.Error):
            self.db.rollback()

    def fetch_one(self, sql: str, params: tuple = None):
        with self._lock:
            row = self.execute(sql, params).fetchone()
        if row is None:
            return None
        # Turn sqlite3.Row into dict
        return dict(row)

    def fetch_all(self, sql: str, params: tuple = None):
        with self._lock:
            rows = self.execute(sql, params).fetchall()
        return [dict(row) for row in rows]

    def insert(self, table: str, record: dict):
        keys = ", ".join(record.keys())
        placeholders = ", ".join(["?"] * len(record))
        values = tuple(record.values())
        self.execute(
            f"INSERT INTO {table} ({keys}) VALUES ({placeholders})",
            values,
            commit=True,
        )

    def _init(self) -> None:
        with self._lock:
            c = self.db.cursor()
            try:
                c.execute("PRAGMA journal_mode=WAL")
                c.execute("""CREATE TABLE IF NOT EXISTS schema_version(
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )""")
                for schema in SCHEMAS.values():
                    cols = ",\n".join(f"{name} {sqltype}" for name, sqltype in schema.columns)
                    c.execute(f"""CREATE TABLE IF NOT EXISTS {schema.table}(
                        id TEXT PRIMARY KEY,
                        {cols}
                    )""")
                c.execute(
                    "INSERT OR IGNORE INTO schema_version(version, applied_at) VALUES(?, ?)",
                    (SCHEMA_VERSION, now_ts()),
                )
                self.db.commit()
            except sqlite3.Error as exc:
                raise LocalFailure(f"cannot initialise local cache {self.path}: {exc}") from exc
        log.debug(f"local cache ready path={self.path} schema={self.schema_version()}")

    def schema_version(self) -> int:
        row = self.fetch_one("SELECT MAX(version) AS v FROM schema_version")
        return row["v"] or 0

    def flush(self):
        with self._lock:
            self.db.commit()

    def close(self):
        with self._lock:
            self.db.close()
