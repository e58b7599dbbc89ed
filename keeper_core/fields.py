"""
keeper_core.fields
------------------
Field-encryption contracts.

Every record kind declares a table of FieldSpec rows naming the fields that
cross the client boundary. One generic pair of operations walks that table:

- encrypt_fields(): plaintext record -> record with sensitive fields encrypted
- decrypt_fields(): the inverse

Empty strings / empty byte strings are skipped in both directions, so "no
data" never turns into ciphertext. ``id`` appears in no table and is never
encrypted.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional, Sequence, Tuple
from .constants import KIND_BINARIES, KIND_CARDS, KIND_CREDENTIALS, KIND_TEXTS
from .crypto import CipherService
from .errors import InvalidArgument


@dataclass(frozen=True)
class FieldSpec:
    name: str
    sensitive: bool = True
    binary: bool = False


FieldTable = Tuple[FieldSpec, ...]

BINARY_FIELDS: FieldTable = (
    FieldSpec("metadata"),
    FieldSpec("data", binary=True),
)

CARD_FIELDS: FieldTable = (
    FieldSpec("metadata"),
    FieldSpec("number"),
    FieldSpec("holder"),
    FieldSpec("expiration"),
    FieldSpec("cvv"),
)

# login/password stay plaintext unless encrypt_credentials is switched on.
CREDENTIAL_FIELDS: FieldTable = (
    FieldSpec("metadata"),
    FieldSpec("login", sensitive=False),
    FieldSpec("password", sensitive=False),
)

TEXT_FIELDS: FieldTable = (
    FieldSpec("metadata"),
    FieldSpec("data"),
)

FIELD_TABLES: Dict[str, FieldTable] = {
    KIND_BINARIES: BINARY_FIELDS,
    KIND_CARDS: CARD_FIELDS,
    KIND_CREDENTIALS: CREDENTIAL_FIELDS,
    KIND_TEXTS: TEXT_FIELDS,
}


def field_table(kind: str, encrypt_credentials: bool = False) -> FieldTable:
    try:
        table = FIELD_TABLES[kind]
    except KeyError:
        raise InvalidArgument(f"unknown record kind: {kind}") from None
    if kind == KIND_CREDENTIALS and encrypt_credentials:
        return tuple(replace(spec, sensitive=True) for spec in table)
    return table


def sensitive_fields(kind: str, encrypt_credentials: bool = False) -> Tuple[str, ...]:
    return tuple(spec.name for spec in field_table(kind, encrypt_credentials) if spec.sensitive)


def _transform(
    record: Any,
    table: FieldTable,
    on_text: Callable[[str], str],
    on_bytes: Callable[[bytes], bytes],
) -> Any:
    changes: Dict[str, Any] = {}
    for spec in table:
        if not spec.sensitive:
            continue
        value = getattr(record, spec.name)
        if not value:
            continue
        changes[spec.name] = on_bytes(value) if spec.binary else on_text(value)
    return replace(record, **changes)


def encrypt_fields(record: Any, cipher: CipherService, table: Optional[Sequence[FieldSpec]] = None) -> Any:
    """Return a copy of ``record`` with every sensitive, non-empty field encrypted."""
    table = tuple(table) if table is not None else field_table(record.kind)
    return _transform(record, table, cipher.encrypt, cipher.encrypt_bytes)


def decrypt_fields(record: Any, cipher: CipherService, table: Optional[Sequence[FieldSpec]] = None) -> Any:
    """Return a copy of ``record`` with every sensitive, non-empty field decrypted.

    Raises AuthenticationFailed if any field does not decrypt under the key.
    """
    table = tuple(table) if table is not None else field_table(record.kind)
    return _transform(record, table, cipher.decrypt, cipher.decrypt_bytes)
