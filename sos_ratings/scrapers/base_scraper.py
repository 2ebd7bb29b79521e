from typing import Any, Dict, Optional

import httpx
from loguru import logger

from sos_ratings.config.settings import settings


class ScraperError(Exception):
    """Custom exception for scraper-related errors."""

    pass


class FetchError(ScraperError):
    """A single request failed: transport, HTTP status, or unparseable payload."""

    pass


class DiscoveryError(FetchError):
    """Team discovery failed; there is nothing to rate."""

    pass


class BaseScraper:
    """Shared HTTP plumbing for data provider scrapers.

    Requests are attempted exactly once; callers decide whether a failure
    is fatal or dropped.
    """

    source: str = "unknown"

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout),
            follow_redirects=True,
            headers={"User-Agent": settings.user_agent},
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> httpx.Response:
        """Makes a single asynchronous HTTP request, raising FetchError on failure."""
        logger.debug("Making request", method=method, url=url, params=params)
        try:
            response = await self.client.request(method, url, params=params, **kwargs)
            response.raise_for_status()  # Raises HTTPStatusError for 4xx/5xx
            logger.debug(f"Request successful: {response.status_code} for {url}")
            return response
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"HTTP error {e.response.status_code} from {self.source} at {url}"
            ) from e
        except httpx.RequestError as e:
            # Network errors, timeouts etc.
            raise FetchError(
                f"Request error for {self.source} at {url}: {e!r}"
            ) from e

    async def _get_json(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        response = await self._make_request("GET", url, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {self.source} at {url}: {e}") from e

    async def close(self):
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.debug(f"Closed HTTP client for {self.source}")
