"""
A thin HTTP client for the Blog CMS JSON API.
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import ApiError, raise_for_api_error

logger = logging.getLogger(__name__)

SESSION_COOKIE = "blog_cms.session_token"


class ApiClient:
    """
    HTTP client for the Blog CMS API.

    Handles the session cookie, envelope unwrapping, typed errors, and a
    retry policy for idempotent reads (429/5xx, exponential backoff capped
    at 30 seconds). Mutations are never retried automatically.

    Args:
        base_url: Server root (e.g. 'https://blog.example.com')
        api_prefix: API prefix (default: '/api')
        timeout: Default request timeout in seconds (default: 30.0)
        retries: Retry attempts for GET/HEAD/OPTIONS (default: 2)
        backoff_factor: Base of the exponential backoff in seconds (default: 1.0)
        session_token: Existing session token to send as a Bearer header

    Example:
        >>> client = ApiClient('http://localhost:8000')
        >>> client.sign_in('ada@example.com', 'secret123')
        >>> client.get('articles/', page=1)['metadata']['totalPages']
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_prefix: str = "/api",
        timeout: float = 30.0,
        retries: int = 2,
        backoff_factor: float = 1.0,
        session_token: Optional[str] = None,
        pool_connections: int = 3,
        pool_maxsize: int = 10,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix.strip("/")
        self.timeout = timeout

        self._session = requests.Session()
        retry_strategy = Retry(
            total=retries,
            backoff_factor=backoff_factor,
            backoff_max=30,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=frozenset({"GET", "HEAD", "OPTIONS"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(
            pool_connections=pool_connections,
            pool_maxsize=pool_maxsize,
            max_retries=retry_strategy,
        )
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)
        self._session.headers.update({"Accept": "application/json"})

        self._token = session_token

    # ------------------------------------------------------------------
    # URL helpers
    # ------------------------------------------------------------------

    def _join(self, base: str, path: str) -> str:
        return urllib.parse.urljoin(base.rstrip("/") + "/", path.lstrip("/"))

    @property
    def api_base(self) -> str:
        return self._join(self.base_url, self.api_prefix)

    def endpoint(self, endpoint: str) -> str:
        """Absolute URL for an API path such as 'articles/12/'."""
        return self._join(self.api_base, endpoint)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def session_token(self) -> Optional[str]:
        """The explicit token if one was given, else the stored cookie."""
        return self._token or self._session.cookies.get(SESSION_COOKIE)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.session_token)

    def sign_up(self, name: str, email: str, password: str, repeat_password: Optional[str] = None) -> Dict[str, Any]:
        payload = {
            "name": name,
            "email": email,
            "password": password,
            "repeatPassword": password if repeat_password is None else repeat_password,
        }
        return self.post("auth/sign-up/email/", json=payload)

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """Start a session; the server's cookie is kept on the underlying session."""
        return self.post("auth/sign-in/email/", json={"email": email, "password": password})

    def sign_out(self) -> None:
        try:
            self.post("auth/sign-out/")
        finally:
            self._token = None
            self._session.cookies.clear()

    def get_session(self) -> Optional[Dict[str, Any]]:
        return self.get("auth/get-session/")

    # ------------------------------------------------------------------
    # Low-level request
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Send a request and return the envelope's ``data``.

        Returns None for 204 responses. Raises an ApiError subclass for error
        statuses, and ApiError(status_code=0) when no response arrived.
        """
        req_headers: Dict[str, str] = dict(headers or {})
        if self._token:
            req_headers["Authorization"] = f"Bearer {self._token}"

        url = self.endpoint(endpoint)
        try:
            resp = self._session.request(
                method.upper(),
                url,
                params=params,
                headers=req_headers,
                timeout=self.timeout if timeout is None else timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method.upper(), url, exc)
            raise ApiError(status_code=0, message=str(exc)) from exc

        if resp.status_code == 401:
            logger.info("Unauthorized response from %s", url)
        raise_for_api_error(resp)

        if resp.status_code == 204 or not resp.content:
            return None
        body = resp.json()
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def get(self, endpoint: str, **params: Any) -> Any:
        return self.request("GET", endpoint, params=params or None)

    def post(self, endpoint: str, **kwargs: Any) -> Any:
        return self.request("POST", endpoint, **kwargs)

    def put(self, endpoint: str, **kwargs: Any) -> Any:
        return self.request("PUT", endpoint, **kwargs)

    def patch(self, endpoint: str, **kwargs: Any) -> Any:
        return self.request("PATCH", endpoint, **kwargs)

    def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return self.request("DELETE", endpoint, **kwargs)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["ApiClient", "SESSION_COOKIE"]
