# keeper_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple
from keeper_core.constants import KIND_BINARIES, KIND_CARDS, KIND_CREDENTIALS, KIND_TEXTS


@dataclass(frozen=True)
class TableSchema:
    """
    Storage-level layout of one record kind.

    ``columns`` excludes ``id``, which every table keys on. Values are stored
    exactly as handed in (ciphertext); providers never interpret them.
    """
    kind: str
    table: str
    columns: Tuple[Tuple[str, str], ...]

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.columns)


SCHEMAS: Dict[str, TableSchema] = {
    KIND_BINARIES: TableSchema(KIND_BINARIES, "binaries", (("metadata", "TEXT"), ("data", "BLOB"))),
    KIND_CARDS: TableSchema(
        KIND_CARDS,
        "cards",
        (("metadata", "TEXT"), ("number", "TEXT"), ("holder", "TEXT"), ("expiration", "TEXT"), ("cvv", "TEXT")),
    ),
    KIND_CREDENTIALS: TableSchema(
        KIND_CREDENTIALS, "credentials", (("metadata", "TEXT"), ("login", "TEXT"), ("password", "TEXT"))
    ),
    KIND_TEXTS: TableSchema(KIND_TEXTS, "texts", (("metadata", "TEXT"), ("data", "TEXT"))),
}
