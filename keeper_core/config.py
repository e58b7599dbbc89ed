"""
keeper_core.config
------------------
Runtime configuration, read from KEEPER_* environment variables.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional
import os
from .constants import DEFAULT_DB_PATH, DEFAULT_HTTP_TIMEOUT, DEFAULT_SERVER_URL

_TRUE = {"1", "true", "yes", "on"}


@dataclass
class KeeperConfig:
    server_url: str = DEFAULT_SERVER_URL
    db_path: str = DEFAULT_DB_PATH
    storage_provider: str = "sqlite"   # sqlite | memory
    remote_transport: str = "http"     # http | local
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    encrypt_credentials: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "KeeperConfig":
        env = os.environ if env is None else env
        try:
            timeout = float(env.get("KEEPER_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT))
        except ValueError:
            raise ValueError(f"KEEPER_HTTP_TIMEOUT must be a number, got {env.get('KEEPER_HTTP_TIMEOUT')!r}") from None
        return cls(
            server_url=env.get("KEEPER_SERVER_URL", DEFAULT_SERVER_URL),
            db_path=env.get("KEEPER_DB_PATH", DEFAULT_DB_PATH),
            storage_provider=env.get("KEEPER_STORAGE_PROVIDER", "sqlite").lower(),
            remote_transport=env.get("KEEPER_REMOTE_TRANSPORT", "http").lower(),
            http_timeout=timeout,
            encrypt_credentials=env.get("KEEPER_ENCRYPT_CREDENTIALS", "0").lower() in _TRUE,
            log_level=env.get("KEEPER_LOG_LEVEL", "INFO").upper(),
            log_file=env.get("KEEPER_LOG_FILE") or None,
        )
