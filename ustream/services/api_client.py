"""HTTP adapter for authenticated Ustream API calls."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import ApiError, UstreamError
from ..models import ClientConfig

logger = logging.getLogger(__name__)


class HTTPAPIClient:
    """
    HTTP client adapter for API calls.

    Implements IRequestContext protocol. Bodies are form-encoded, responses
    are parsed as JSON. Server errors and transport failures are retried
    with a linear backoff; 4xx responses raise ``ApiError`` immediately.
    """

    def __init__(self, config: Optional[ClientConfig] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._config = config or ClientConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._token: Optional[str] = self._config.access_token
        self._token_lock = asyncio.Lock()

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._config.api_url,
            timeout=self._config.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def _uses_client_credentials(self) -> bool:
        return bool(self._config.client_id and self._config.client_secret)

    async def _ensure_token(self) -> str:
        if self._token:
            return self._token
        if not self._uses_client_credentials:
            raise UstreamError("No access token or client credentials configured")

        async with self._token_lock:
            if self._token:
                return self._token

            logger.debug("Requesting access token from %s", self._config.token_url)
            response = await self._client.post(
                self._config.token_url,
                data={"grant_type": "client_credentials", "token_type": "bearer"},
                auth=(self._config.client_id, self._config.client_secret),
            )
            if response.status_code >= 400:
                raise ApiError(response.status_code, "post", self._config.token_url, self._error_detail(response))

            token = self._parse(response, "post", self._config.token_url).get("access_token")
            if not token:
                raise UstreamError("Token endpoint returned no access_token")
            self._token = token
            return token

    @staticmethod
    def _error_detail(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _parse(response: httpx.Response, method: str, path: str) -> Dict[str, Any]:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(response.status_code, method, path, f"invalid JSON body: {response.text[:200]}") from exc

    async def auth_request(
        self,
        method: str,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")

        max_retries = self._config.max_retries
        last_exception = None
        refreshed = False
        attempt = 0

        while attempt < max_retries:
            token = await self._ensure_token()
            try:
                logger.debug("%s %s", method.upper(), path)
                response = await self._client.request(
                    method.upper(),
                    path,
                    data=data,
                    params=params,
                    headers={"Authorization": f"Bearer {token}"},
                )

                if response.status_code == 401 and self._uses_client_credentials and not refreshed:
                    # Expired token: fetch a new one and replay once.
                    self._token = None
                    refreshed = True
                    continue

                if response.status_code >= 500 and attempt < max_retries - 1:
                    attempt += 1
                    await asyncio.sleep(0.5 * attempt)
                    continue

                if response.status_code >= 400:
                    raise ApiError(response.status_code, method, path, self._error_detail(response))

                return self._parse(response, method, path)
            except (httpx.RequestError, httpx.TimeoutException) as exc:
                last_exception = exc
                attempt += 1
                if attempt < max_retries:
                    logger.warning("%s %s failed (%s), retrying", method.upper(), path, exc)
                    await asyncio.sleep(0.5 * attempt)
                    continue
                raise

        if last_exception:
            raise last_exception
        raise UstreamError(f"Failed to {method.upper()} {path} after {max_retries} attempts")
