# Overview: HTTP client for the Distrack API; used by the allocation session.

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx


class ApiError(Exception):
    """
    Non-2xx answer from the API.

    str(error) is the server's "error" message verbatim, so callers can show it
    to the operator unchanged.
    """

    def __init__(self, status_code: int, message: str, payload: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}
        super().__init__(message)


class DistrackClient:
    """
    HTTP client wrapper with bearer authentication and convenience methods.

    Pass transport=httpx.WSGITransport(app=flask_app) to talk to an
    in-process app without a running server.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:5001",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        token: Optional[str] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)
        self.token = token
        self.current_user: Optional[Dict] = None
        self.company_id: Optional[int] = None

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "DistrackClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.client.request(method, path, headers=self._headers(), **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_success:
            return body

        payload = body if isinstance(body, dict) else {}
        message = payload.get("error") or f"HTTP {response.status_code}"
        raise ApiError(response.status_code, message, payload)

    def _remember_session(self, body: Dict[str, Any]) -> Dict[str, Any]:
        self.token = body.get("token")
        self.current_user = body.get("user")
        self.company_id = body.get("company_id")
        return body

    # -- auth --

    def register(self, *, company_name: str, user_id: str, password: str, name: str, role: str) -> Dict:
        """Register and keep the returned token."""
        body = self._request("POST", "/api/auth/register", json={
            "company_name": company_name,
            "user_id": user_id,
            "password": password,
            "name": name,
            "role": role,
        })
        return self._remember_session(body)

    def login(self, *, company_name: str, user_id: str, password: str) -> Dict:
        """Authenticate and keep the returned token."""
        body = self._request("POST", "/api/auth/login", json={
            "company_name": company_name,
            "user_id": user_id,
            "password": password,
        })
        return self._remember_session(body)

    def logout(self) -> None:
        if not self.token:
            return
        self._request("POST", "/api/auth/logout")
        self.token = None
        self.current_user = None
        self.company_id = None

    # -- stock and distributions --

    def available_products(self) -> list[Dict]:
        """Products with remaining stock > 0: [{id, name, category, remaining_quantity}]."""
        return self._request("GET", "/api/products/available")

    def submit_distribution(
        self,
        *,
        worker_name: str,
        worker_gender: Optional[str],
        worker_mobile: Optional[str],
        allocations: list[Dict[str, int]],
    ) -> Dict:
        """POST one worker's allocations; raises ApiError on rejection."""
        return self._request("POST", "/api/distributions", json={
            "worker_name": worker_name,
            "worker_gender": worker_gender,
            "worker_mobile": worker_mobile,
            "allocations": allocations,
        })

    def previous_workers(self, limit: int = 20) -> list[Dict]:
        return self._request("GET", "/api/distributions/workers", params={"limit": limit})
