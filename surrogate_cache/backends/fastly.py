from __future__ import annotations

import logging
import threading
from typing import Any, Optional
from urllib.parse import quote, urlsplit

import httpx

from ..conf import get_setting
from .base import BasePurgeBackend, PurgeRequest, PurgeResult

logger = logging.getLogger(__name__)


class FastlyBackend(BasePurgeBackend):
    """
    Backend issuing purges through the Fastly API.

    Options (each falls back to the matching setting):
        api_key: Fastly API token, sent as the Fastly-Key header
        service_id: Fastly service id used for key and whole-service purges
        api_endpoint: API base URL (default: https://api.fastly.com/)
        timeout: Request timeout in seconds (default: 10)
        client: Preconfigured httpx.Client, mostly useful for tests

    Example:
        from surrogate_cache.backends.fastly import FastlyBackend

        backend = FastlyBackend(api_key="...", service_id="...")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        service_id: Optional[str] = None,
        api_endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        client: httpx.Client | None = None,
        **options: Any,
    ) -> None:
        super().__init__(**options)
        self.api_key = api_key if api_key is not None else get_setting("fastly_key")
        self.service_id = (
            service_id if service_id is not None else get_setting("fastly_service_id")
        )
        self.api_endpoint = api_endpoint or get_setting("api_endpoint")
        if not self.api_endpoint.endswith("/"):
            self.api_endpoint += "/"
        self.timeout = timeout if timeout is not None else get_setting("api_timeout")
        self._client = client
        self._client_lock = threading.Lock()

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def _headers(self, request: PurgeRequest, soft: bool = True) -> dict[str, str]:
        headers = {"Fastly-Key": self.api_key, "Accept": "application/json"}
        if soft and request.soft:
            headers["Fastly-Soft-Purge"] = "1"
        return headers

    def _service_url(self, path: str) -> str:
        return f"{self.api_endpoint}service/{self.service_id}/{path}"

    def purge_url(self, request: PurgeRequest) -> PurgeResult:
        if urlsplit(request.target).scheme not in ("http", "https"):
            return PurgeResult.error(
                request, detail=f"Not an absolute http(s) URL: {request.target!r}"
            )
        return self._request(request, "PURGE", request.target, self._headers(request))

    def purge_surrogate_key(self, request: PurgeRequest) -> PurgeResult:
        url = self._service_url(f"purge/{quote(request.target, safe='')}")
        return self._request(request, "POST", url, self._headers(request))

    def purge_all(self, request: PurgeRequest) -> PurgeResult:
        # purge_all has no soft variant
        url = self._service_url("purge_all")
        return self._request(request, "POST", url, self._headers(request, soft=False))

    def _request(
        self,
        request: PurgeRequest,
        method: str,
        url: str,
        headers: dict[str, str],
    ) -> PurgeResult:
        logger.debug("Sending %s %s", method, url)
        try:
            response = self.client.request(
                method, url, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            return PurgeResult.error(
                request,
                detail=e.response.text or e.response.reason_phrase,
                status_code=e.response.status_code,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return PurgeResult.error(request, detail=str(e) or type(e).__name__)

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {"response": payload}

        if payload.get("status") != "ok":
            return PurgeResult.failed(
                request,
                detail=f"Purge not confirmed: {response.text}",
                status_code=response.status_code,
                payload=payload,
            )

        return PurgeResult.success(
            request, status_code=response.status_code, payload=payload
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
