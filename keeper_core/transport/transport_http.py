# keeper_core/transport/transport_http.py
from typing import List, Optional
import requests
from keeper_core.constants import DEFAULT_HTTP_TIMEOUT, KINDS
from keeper_core.context import OperationContext, check
from keeper_core.errors import RemoteNotFound, RemoteRejected, RemoteUnavailable
from keeper_core.logger import get_logger
from keeper_core.models import SecureRecord, record_type
from keeper_core.transport.transport_base import RemoteStore

log = get_logger("keeper.transport.http")


class HTTPRemoteStore(RemoteStore):
    """
    HTTP adapter for the secrets server.

    Features:
    - requests.Session keeps the session cookie issued by /login and /register.
    - Each call is bounded by ``timeout`` or the caller's remaining deadline,
      whichever is shorter.
    - Records travel as JSON with their sensitive fields already encrypted.
    """
    name = "http"

    def __init__(self, base_url: str, timeout: float = DEFAULT_HTTP_TIMEOUT, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------
    def _timeout(self, ctx: Optional[OperationContext]) -> float:
        remaining = ctx.remaining() if ctx is not None else None
        if remaining is None:
            return self.timeout
        if remaining <= 0:
            # requests rejects a non-positive timeout
            check(ctx, "deadline before request")
        return min(self.timeout, remaining)

    def _request(self, method: str, path: str, expected, ctx=None, json=None):
        check(ctx, f"{method} {path}")
        url = f"{self.base_url}{path}"
        expected = (expected,) if isinstance(expected, int) else tuple(expected)
        log.debug(f"[HTTP] → {method} {url}")
        try:
            res = self.http.request(method, url, json=json, timeout=self._timeout(ctx))
        except requests.Timeout as exc:
            log.warning(f"[HTTP] timeout {method} {url}")
            raise RemoteUnavailable(f"{method} {path} timed out") from exc
        except requests.RequestException as exc:
            log.warning(f"[HTTP] connection error {method} {url}: {exc}")
            raise RemoteUnavailable(f"{method} {path} failed: {exc}") from exc

        log.debug(f"[HTTP] ← {res.status_code} {method} {url}")
        if res.status_code in expected:
            return res
        if res.status_code == 404:
            raise RemoteNotFound(f"{method} {path} failed with status: 404", status=404)
        log.error(f"[HTTP] {method} {url} {res.status_code}")
        raise RemoteRejected(f"{method} {path} failed with status: {res.status_code}", status=res.status_code)

    @staticmethod
    def _json(res, what: str):
        try:
            return res.json()
        except ValueError as exc:
            raise RemoteRejected(f"{what}: response is not valid JSON", status=res.status_code) from exc

    @staticmethod
    def _record(kind: str, item, what: str) -> SecureRecord:
        if not isinstance(item, dict):
            raise RemoteRejected(f"{what}: expected a JSON object, got {type(item).__name__}", status=200)
        return record_type(kind).from_wire(item)

    @staticmethod
    def _path(kind: str) -> str:
        if kind not in KINDS:
            raise RemoteRejected(f"unknown record kind: {kind}", status=400)
        return f"/api/user/{kind}"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------
    def register(self, login, password, ctx=None):
        self._request("POST", "/api/user/register", (200, 201), ctx, json={"login": login, "password": password})
        log.info(f"[HTTP] registered user={login}")

    def login(self, login, password, ctx=None):
        self._request("POST", "/api/user/login", 200, ctx, json={"login": login, "password": password})
        log.info(f"[HTTP] login user={login}")

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------
    def create(self, kind, record, ctx=None) -> SecureRecord:
        payload = record.to_wire()
        payload.pop("id", None)
        res = self._request("POST", self._path(kind), 201, ctx, json=payload)
        return self._record(kind, self._json(res, f"create {kind}"), f"create {kind}")

    def get_all(self, kind, ctx=None) -> List[SecureRecord]:
        res = self._request("GET", self._path(kind), 200, ctx)
        body = self._json(res, f"get {kind}")
        if body is None:
            return []
        if not isinstance(body, list):
            raise RemoteRejected(f"get {kind}: expected a JSON array, got {type(body).__name__}", status=res.status_code)
        return [self._record(kind, item, f"get {kind}") for item in body]

    def update(self, kind, record, ctx=None) -> SecureRecord:
        res = self._request("PUT", self._path(kind), 200, ctx, json=record.to_wire())
        return self._record(kind, self._json(res, f"update {kind}"), f"update {kind}")

    def delete(self, kind, record_id, ctx=None) -> None:
        # Server answers 410 Gone on successful delete
        self._request("DELETE", f"{self._path(kind)}/{record_id}", 410, ctx)

    def healthz(self) -> dict:
        try:
            self.http.get(self.base_url, timeout=self.timeout)
            return {"status": "ok", "transport": self.name}
        except requests.RequestException as exc:
            return {"status": "unreachable", "transport": self.name, "error": str(exc)}

    def close(self) -> None:
        self.http.close()
