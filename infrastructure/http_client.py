"""HTTP boundary to the commission backend.

Every call goes through ``ApiClient.request`` which attaches the bearer
credential held at dispatch time and turns a 401 into a credential clear plus
one ``auth:unauthorized`` notification before the caller sees the failure.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from infrastructure.events import UNAUTHORIZED, EventBus
from use_cases.errors import ApiError, AuthenticationError, AuthorizationExpiredError

log = logging.getLogger(__name__)

MAX_PARALLEL_FETCHES = 8


class CredentialHolder:
    """The single bearer token shared by the session store and the client."""

    def __init__(self, token: Optional[str] = None):
        self._token = token
        self._lock = threading.Lock()

    @property
    def token(self) -> Optional[str]:
        with self._lock:
            return self._token

    def set(self, token: Optional[str]) -> None:
        with self._lock:
            self._token = token or None

    def clear(self) -> bool:
        """Drop the token; returns True when there was one to drop."""
        with self._lock:
            had_token = self._token is not None
            self._token = None
            return had_token


@dataclass(frozen=True)
class FetchOutcome:
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _extract_message(resp, fallback: str) -> str:
    try:
        body = resp.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, list):
            message = "; ".join(str(m) for m in message)
        if message:
            return str(message)
    return fallback


class ApiClient:
    def __init__(
        self,
        base_url: str,
        events: EventBus,
        credentials: Optional[CredentialHolder] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.events = events
        self.credentials = credentials or CredentialHolder()
        self.timeout = timeout
        self._session = session or requests.Session()

    # --- credential -------------------------------------------------------

    @property
    def has_credential(self) -> bool:
        return self.credentials.token is not None

    # --- dispatch ---------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.credentials.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _handle_unauthorized(self, method: str, path: str) -> None:
        self.credentials.clear()
        log.warning(f"401 on {method} {path}: credential dropped")
        self.events.publish(UNAUTHORIZED, path=path)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        files: Any = None,
        expect_auth_failure: bool = False,
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty).

        ``expect_auth_failure`` marks the login call: its 401 means wrong
        credentials, not an expired session, and is raised as
        ``AuthenticationError`` without touching the session.
        """
        url = f"{self.base_url}{path}"
        resp = self._session.request(
            method,
            url,
            params=params,
            json=json,
            files=files,
            headers=self._headers(),
            timeout=self.timeout,
        )
        status = resp.status_code

        if status == 401:
            if expect_auth_failure:
                raise AuthenticationError(_extract_message(resp, "Login failed"))
            self._handle_unauthorized(method, path)
            raise AuthorizationExpiredError("Session expired. Please log in again.")

        if not 200 <= status < 300:
            message = _extract_message(resp, f"Request failed with HTTP {status}")
            log.error(f"❌ {method} {path} -> {status}: {message}")
            raise ApiError(status, message, path=path)

        if status == 204 or not resp.content:
            return None
        return resp.json()

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        return self.request("DELETE", path, **kwargs)

    def fetch_all(self, calls: Dict[str, Callable[[], Any]]) -> Dict[str, FetchOutcome]:
        """Run independent calls concurrently; each resolves or fails on its own."""
        if not calls:
            return {}
        workers = min(len(calls), MAX_PARALLEL_FETCHES)
        outcomes: Dict[str, FetchOutcome] = {}
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {name: pool.submit(call) for name, call in calls.items()}
            for name, future in futures.items():
                try:
                    outcomes[name] = FetchOutcome(value=future.result())
                except Exception as exc:
                    outcomes[name] = FetchOutcome(error=exc)
        return outcomes
