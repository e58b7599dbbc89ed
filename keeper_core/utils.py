"""
keeper_core.utils
-----------------
Lightweight helpers for id generation, timestamping, base64 and hashing.
"""

from __future__ import annotations
import base64, hashlib, time, uuid
from typing import Iterable


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")


def b64d(s: str, validate: bool = False) -> bytes:
    return base64.b64decode(s.encode("ascii"), validate=validate)


def now_ts() -> str:
    # RFC3339 / ISO 8601 in UTC, second precision
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def new_id() -> str:
    return uuid.uuid4().hex


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_parts(parts: Iterable[bytes]) -> str:
    """Hash a sequence of byte strings separated by NUL bytes."""
    h = hashlib.sha256()
    for i, part in enumerate(parts):
        if i:
            h.update(b"\x00")
        h.update(part)
    return h.hexdigest()
