from __future__ import annotations

import logging
import threading
import time
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config.settings import HTTP_RETRY_BACKOFF, HTTP_RETRY_TOTAL, HTTP_TIMEOUT_SECONDS, USER_AGENT
from metadata.errors import MalformedUpstreamResponse, UpstreamError

logger = logging.getLogger(__name__)


class ApiClient:
    """requests session with retry, optional pacing and uniform error mapping.

    Non-2xx responses raise ``UpstreamError`` and undecodable bodies raise
    ``MalformedUpstreamResponse``; an empty result set is returned as data.
    """

    def __init__(
        self,
        name: str,
        *,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        timeout_seconds: float = HTTP_TIMEOUT_SECONDS,
        min_interval_seconds: float = 0.0,
        retry_methods: frozenset[str] = frozenset({"GET"}),
    ) -> None:
        self.name = name.upper()
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.min_interval_seconds = max(0.0, min_interval_seconds)
        self._headers = {"User-Agent": USER_AGENT, "Accept": "application/json", **(headers or {})}
        self._rate_lock = threading.Lock()
        self._last_request_ts = 0.0
        self._session = requests.Session()
        retry = Retry(
            total=HTTP_RETRY_TOTAL,
            backoff_factor=HTTP_RETRY_BACKOFF,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=retry_methods,
            respect_retry_after_header=True,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

    def _sleep_for_rate_limit(self) -> None:
        if self.min_interval_seconds <= 0:
            return
        with self._rate_lock:
            now = time.monotonic()
            wait_for = self.min_interval_seconds - (now - self._last_request_ts)
            if wait_for > 0:
                time.sleep(wait_for)
            self._last_request_ts = time.monotonic()

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: str | bytes | None = None,
        json_body: Any = None,
    ) -> Any:
        self._sleep_for_rate_limit()
        url = self._url(endpoint)
        try:
            resp = self._session.request(
                method,
                url,
                params=params or None,
                headers={**self._headers, **(headers or {})},
                data=data,
                json=json_body,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.warning("[%s] request=%s status=error error=%s", self.name, endpoint, exc)
            raise UpstreamError(None, url, message=str(exc)) from exc

        status = int(resp.status_code)
        logger.info("[%s] request=%s status=%s", self.name, endpoint, status)
        if not 200 <= status < 300:
            raise UpstreamError(status, url)
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            logger.error("[%s] request=%s undecodable body", self.name, endpoint)
            raise MalformedUpstreamResponse(f"{self.name} {endpoint}", "body is not JSON") from exc

    def get_json(self, endpoint: str, *, params: dict[str, Any] | None = None, headers: dict[str, str] | None = None) -> Any:
        return self.request_json("GET", endpoint, params=params, headers=headers)

    def post_json(
        self,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: str | bytes | None = None,
        json_body: Any = None,
    ) -> Any:
        return self.request_json("POST", endpoint, params=params, headers=headers, data=data, json_body=json_body)
