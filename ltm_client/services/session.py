# ltm_client/services/session.py
"""
Token-authenticated access to the BIG-IP iControl REST API.

The device issues a token valid for 20 minutes. LTMClient keeps one session per
client instance and lazily logs in again once the token is older than the renewal
margin (18 minutes by default). The check happens on the next call; there is no
background refresh.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional
from urllib.parse import urlsplit

import requests
import urllib3
from requests.adapters import HTTPAdapter

from ltm_client.core import config
from ltm_client.core.exceptions import AuthenticationError, ConfigurationError, TransportError
from ltm_client.core.logger import get_f5_logger

logger = get_f5_logger()

LOGIN_PATH = "/mgmt/shared/authn/login"
AUTH_HEADER = "X-F5-Auth-Token"


@dataclass(frozen=True)
class LTMSession:
    """An issued token and the (monotonic) time it was obtained."""
    token: str
    issued_at: float
    start_time: Optional[str] = None  # device-side issue time, informational only


def _body_excerpt(resp: requests.Response, limit: int = 300) -> str:
    text = (resp.text or "").strip()
    return text if len(text) <= limit else text[:limit] + "..."


class LTMClient:
    """
    Holds the authenticated session for one BIG-IP and performs signed calls.
    Safe to share between threads: session read/refresh is serialized.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        verify=None,
        timeout: Optional[float] = None,
        login_provider: Optional[str] = None,
        renewal_margin: Optional[timedelta] = None,
        http: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
        pool_size: Optional[int] = None,
    ):
        for field, value in (("host", host), ("username", username), ("password", password)):
            if not value or not str(value).strip():
                raise ConfigurationError(field, "must not be empty")

        self.host = host.strip()
        self.base_url = f"https://{self.host}"
        self.username = username
        self._password = password
        self.verify = config.F5_VERIFY_TLS if verify is None else verify
        self.timeout = config.F5_TIMEOUT if timeout is None else timeout
        self.login_provider = login_provider or config.F5_LOGIN_PROVIDER
        self.renewal_margin = renewal_margin or timedelta(minutes=config.F5_SESSION_RENEWAL_MINUTES)
        self._clock = clock
        self._http = http or self._build_http(pool_size or config.F5_MAX_WORKERS)
        self._lock = threading.Lock()
        self._session: Optional[LTMSession] = None

        if self.verify is False:
            # Management interfaces usually run on self-signed certificates
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @classmethod
    def from_env(cls, **kwargs) -> "LTMClient":
        """Build a client from F5_HOST / F5_USERNAME / F5_PASSWORD."""
        return cls(
            host=config.require_env("F5_HOST", "BIG-IP management address (host or host:port)"),
            username=config.require_env("F5_USERNAME", "BIG-IP user allowed to call iControl REST"),
            password=config.require_env("F5_PASSWORD", "Password for F5_USERNAME"),
            **kwargs,
        )

    @staticmethod
    def _build_http(pool_size: int) -> requests.Session:
        http = requests.Session()
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=max(10, pool_size))
        http.mount("https://", adapter)
        return http

    # ----------------------------
    # Session handling
    # ----------------------------

    def _is_stale(self, session: LTMSession) -> bool:
        return self._clock() - session.issued_at >= self.renewal_margin.total_seconds()

    def ensure_session(self) -> LTMSession:
        """Return a session valid for the upcoming call, logging in again if it is stale."""
        with self._lock:
            if self._session is None:
                self._session = self._login()
            elif self._is_stale(self._session):
                logger.info(f"Token for {self.host} is older than {self.renewal_margin}; re-authenticating")
                self._session = self._login()
            return self._session

    def _login(self) -> LTMSession:
        payload = {
            "username": self.username,
            "password": self._password,
            "loginProviderName": self.login_provider,
        }
        try:
            resp = self._http.request(
                "POST",
                self.base_url + LOGIN_PATH,
                json=payload,
                verify=self.verify,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(self.host, "authentication", str(e)) from e

        if resp.status_code == 401:
            raise AuthenticationError(self.host, detail=_body_excerpt(resp))
        if not 200 <= resp.status_code < 300:
            raise TransportError(self.host, "authentication", _body_excerpt(resp), status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError as e:
            raise TransportError(self.host, "authentication", f"malformed JSON: {e}") from e

        token_info = body.get("token") if isinstance(body, dict) else None
        token = token_info.get("token") if isinstance(token_info, dict) else None
        if not token:
            raise AuthenticationError(self.host, detail="login response carried no token")

        logger.info(f"Authenticated to {self.host} as {self.username}")
        return LTMSession(token=token, issued_at=self._clock(), start_time=token_info.get("startTime"))

    # ----------------------------
    # Calls
    # ----------------------------

    def resolve_link(self, link: str) -> str:
        """
        Turn a device-generated link (https://localhost/mgmt/...?ver=...) into a path
        on this client's host. Only path and query survive.
        """
        parts = urlsplit(link)
        path = parts.path or "/"
        return f"{path}?{parts.query}" if parts.query else path

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            path = self.resolve_link(path)
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url + path

    def request(
        self,
        method: str,
        path: str,
        headers: Optional[dict] = None,
        json=None,
        data=None,
        params: Optional[dict] = None,
        phase: Optional[str] = None,
    ) -> requests.Response:
        """
        Perform an authenticated call. 401 raises AuthenticationError, every other
        failure (network, TLS, non-2xx) raises TransportError.
        """
        phase = phase or f"{method} {path}"
        session = self.ensure_session()

        merged = {AUTH_HEADER: session.token}
        if headers:
            merged.update(headers)

        try:
            resp = self._http.request(
                method,
                self._url(path),
                headers=merged,
                json=json,
                data=data,
                params=params,
                verify=self.verify,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(self.host, phase, str(e)) from e

        if resp.status_code == 401:
            raise AuthenticationError(self.host, phase=phase, detail=_body_excerpt(resp))
        if not 200 <= resp.status_code < 300:
            raise TransportError(self.host, phase, _body_excerpt(resp), status_code=resp.status_code)
        return resp

    def request_json(self, method: str, path: str, phase: Optional[str] = None, **kwargs) -> dict:
        """request() and decode the body; anything but a JSON object is a TransportError."""
        phase = phase or f"{method} {path}"
        resp = self.request(method, path, phase=phase, **kwargs)
        try:
            body = resp.json()
        except ValueError as e:
            raise TransportError(self.host, phase, f"malformed JSON: {e}") from e
        if not isinstance(body, dict):
            raise TransportError(self.host, phase, "expected a JSON object")
        return body

    def get_json(self, path: str, params: Optional[dict] = None, phase: Optional[str] = None) -> dict:
        return self.request_json("GET", path, params=params, phase=phase)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "LTMClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
