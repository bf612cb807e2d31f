"""
Configuration Sync

Fetches the remote JSON config over HTTP.
One GET per call, no retry. Every failure comes back as a FetchResult.
"""

import json

import httpx

from prompt_config.common.exceptions import FetchError
from prompt_config.common.logging_setup import get_service_logger, log_fetch_failure

from .result import (
    FetchResult,
    REASON_HTTP_STATUS,
    REASON_INVALID_JSON,
    REASON_TRANSPORT,
)

logger = get_service_logger("fetcher.sync")


class ConfigSync:
    """
    Pulls the config document from a fixed URL.

    The HTTP client is created lazily and reused across calls.
    """

    def __init__(
        self,
        url: str,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout_s = timeout_s
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            kwargs = {}
            if self.timeout_s is not None:
                kwargs["timeout"] = self.timeout_s
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def fetch(self) -> FetchResult:
        """
        Fetch and parse the remote config.

        Returns:
            FetchResult.success with the parsed payload, or
            FetchResult.failure with one of the REASON_* codes
        """
        try:
            payload, status_code = await self._request()
        except FetchError as e:
            log_fetch_failure(logger, self.url, e.reason, e.message, e.status_code)
            return FetchResult.failure(e.reason, e.message, e.status_code)

        logger.info(
            f"Config fetched from {self.url}",
            extra={"url": self.url, "status_code": status_code},
        )
        return FetchResult.success(payload, status_code)

    async def _request(self) -> tuple[object, int]:
        """Issue the GET; raises FetchError classified by reason"""
        client = await self._get_client()

        try:
            response = await client.get(self.url)
        except httpx.HTTPError as e:
            raise FetchError(
                f"{type(e).__name__}: {e}", REASON_TRANSPORT, url=self.url
            ) from e

        if not response.is_success:
            raise FetchError(
                f"HTTP error! status: {response.status_code}",
                REASON_HTTP_STATUS,
                url=self.url,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FetchError(
                f"Invalid JSON body: {e}",
                REASON_INVALID_JSON,
                url=self.url,
                status_code=response.status_code,
            ) from e

        return payload, response.status_code
