from __future__ import annotations

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message: str, *, status_code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class QrApiClient:
    """HTTP client for the HR QR endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http = session or requests.Session()
        if token:
            self._http.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            return self._http.request(method, self._base_url + path, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise ApiError(f"{method} {path} failed: {e}") from e

    @staticmethod
    def _raise_for(resp: requests.Response, action: str) -> None:
        if resp.ok:
            return
        reason = None
        message = resp.text
        try:
            body = resp.json()
            reason = body.get("error")
            message = body.get("message") or message
        except ValueError:
            pass
        raise ApiError(f"{action} failed: {resp.status_code} {message}", status_code=resp.status_code, reason=reason)

    def generate(self, body: dict) -> dict:
        resp = self._request("POST", "/qr/generate", json=body)
        self._raise_for(resp, "generate")
        return resp.json()["session"]

    def current(self) -> Optional[dict]:
        resp = self._request("GET", "/qr/current")
        if resp.status_code == 404:
            return None
        self._raise_for(resp, "current")
        return resp.json()["session"]

    def revoke(self) -> int:
        resp = self._request("POST", "/qr/revoke", json={})
        self._raise_for(resp, "revoke")
        return int(resp.json().get("revokedCount", 0))
