"""
HTTP Fetch Provider

Default transport: GET the endpoint with a JSON content type and parse the
body as JSON. Reuses a single httpx client across calls.
"""

from typing import Any

import httpx

from remote_config.common.logging_setup import get_service_logger

logger = get_service_logger("providers.fetch")

DEFAULT_TIMEOUT_SECONDS = 30.0


class HttpFetchProvider:
    """
    Fetch JSON configuration over HTTP.

    Non-2xx responses raise httpx.HTTPStatusError and invalid bodies raise
    ValueError; the resolver turns either into a FetchError.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
    ):
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self._client = client
        # Only close clients we created ourselves
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def __call__(self, url: str) -> Any:
        client = await self._get_client()
        response = await client.get(url, headers=self.headers)
        response.raise_for_status()
        logger.debug(
            f"Fetched {url} ({response.status_code})",
            extra={"endpoint": url, "status_code": response.status_code},
        )
        return response.json()

    async def aclose(self) -> None:
        """Close HTTP client"""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
