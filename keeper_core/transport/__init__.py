# keeper_core/transport/__init__.py
import os
from keeper_core.transport.transport_base import RemoteStore
from keeper_core.transport.transport_http import HTTPRemoteStore
from keeper_core.transport.transport_local import LocalRemoteStore


def transport_factory(config=None) -> RemoteStore:
    """
    Select the Remote Store adapter.

      - "http"  → HTTPRemoteStore against KEEPER_SERVER_URL (default)
      - "local" → in-process LocalRemoteStore
    """
    if config is not None:
        mode, url, timeout = config.remote_transport, config.server_url, config.http_timeout
    else:
        mode = os.getenv("KEEPER_REMOTE_TRANSPORT", "http")
        url = os.getenv("KEEPER_SERVER_URL", "http://localhost:8080")
        timeout = float(os.getenv("KEEPER_HTTP_TIMEOUT", "5"))

    mode = mode.lower()
    if mode == "http":
        return HTTPRemoteStore(url, timeout=timeout)

    if mode == "local":
        return LocalRemoteStore()

    raise ValueError(f"Unknown remote transport: {mode}")


__all__ = ["RemoteStore", "HTTPRemoteStore", "LocalRemoteStore", "transport_factory"]
