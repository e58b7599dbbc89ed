"""
keeper_core.session
-------------------
An explicit, per-login session value. It owns the CipherService so several
sessions (or tests) can coexist in one process without sharing key state.
Nothing here is ever written to disk.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
from .crypto import CipherService
from .utils import now_ts


@dataclass
class Session:
    login: str = ""
    cipher: CipherService = field(default_factory=CipherService)
    started_at: Optional[str] = None

    @classmethod
    def open(cls, login: str, password: str) -> "Session":
        # Key is derived fully before the session is handed to anyone.
        cipher = CipherService.from_password(password)
        return cls(login=login, cipher=cipher, started_at=now_ts())

    @property
    def active(self) -> bool:
        return self.cipher.is_initialized()

    def close(self) -> None:
        self.cipher.wipe()
