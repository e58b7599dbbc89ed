"""
keeper_core.models
------------------
Record kinds held by the secrets manager.

All kinds share ``id`` (assigned by the remote store, immutable) and
``metadata``. A record with an empty id doubles as the "new record" payload
passed to create.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, ClassVar, Dict, Type
from .constants import KIND_BINARIES, KIND_CARDS, KIND_CREDENTIALS, KIND_TEXTS
from .errors import InvalidArgument
from .utils import b64d, b64e, sha256_parts


@dataclass
class SecureRecord:
    id: str = ""
    metadata: str = ""

    kind: ClassVar[str] = ""
    # field name -> JSON key used by the server, where they differ
    WIRE_NAMES: ClassVar[Dict[str, str]] = {}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SecureRecord":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names and v is not None})

    def to_wire(self) -> Dict[str, Any]:
        return {self.WIRE_NAMES.get(k, k): v for k, v in self.to_dict().items()}

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "SecureRecord":
        fields_by_wire = {wire: name for name, wire in cls.WIRE_NAMES.items()}
        return cls.from_dict({fields_by_wire.get(k, k): v for k, v in data.items()})

    def copy(self, **changes: Any) -> "SecureRecord":
        return replace(self, **changes)

    def fingerprint(self) -> str:
        """SHA-256 over id and every field, NUL separated."""
        parts = []
        for f in fields(self):
            value = getattr(self, f.name)
            parts.append(value if isinstance(value, bytes) else str(value).encode("utf-8"))
        return sha256_parts(parts)

    def encrypt_fields(self, cipher, encrypt_credentials: bool = False) -> "SecureRecord":
        from .fields import encrypt_fields, field_table
        return encrypt_fields(self, cipher, field_table(self.kind, encrypt_credentials))

    def decrypt_fields(self, cipher, encrypt_credentials: bool = False) -> "SecureRecord":
        from .fields import decrypt_fields, field_table
        return decrypt_fields(self, cipher, field_table(self.kind, encrypt_credentials))


@dataclass
class BinaryRecord(SecureRecord):
    data: bytes = b""

    kind: ClassVar[str] = KIND_BINARIES

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["data"] = b64e(self.data)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BinaryRecord":
        raw = data.get("data") or b""
        return cls(
            id=data.get("id") or "",
            metadata=data.get("metadata") or "",
            data=b64d(raw) if isinstance(raw, str) else bytes(raw),
        )


@dataclass
class CardRecord(SecureRecord):
    number: str = ""
    holder: str = ""
    expiration: str = ""
    cvv: str = ""

    kind: ClassVar[str] = KIND_CARDS
    WIRE_NAMES: ClassVar[Dict[str, str]] = {"holder": "card_holder", "expiration": "expiration_date"}


@dataclass
class CredentialRecord(SecureRecord):
    login: str = ""
    password: str = ""

    kind: ClassVar[str] = KIND_CREDENTIALS


@dataclass
class TextRecord(SecureRecord):
    data: str = ""

    kind: ClassVar[str] = KIND_TEXTS


RECORD_TYPES: Dict[str, Type[SecureRecord]] = {
    cls.kind: cls for cls in (BinaryRecord, CardRecord, CredentialRecord, TextRecord)
}


def record_type(kind: str) -> Type[SecureRecord]:
    try:
        return RECORD_TYPES[kind]
    except KeyError:
        raise InvalidArgument(f"unknown record kind: {kind}") from None
