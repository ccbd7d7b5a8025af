"""Documentation page fetching over HTTP."""

import time
from typing import Protocol

import httpx
import logfire

from docgap.constants import AUDITOR_USER_AGENT, PAGE_FETCH_TIMEOUT_SECONDS


class PageFetchError(Exception):
    """Raised by strict fetches when a page or sitemap cannot be retrieved."""


class PageFetcher(Protocol):
    """Protocol for fetching documentation pages."""

    def resolve_url(self, domain: str, path_or_url: str) -> str:
        """Turn a sitemap path or absolute URL into a fetchable URL."""
        ...

    async def fetch(self, url: str) -> str:
        """Fetch a page body. Returns "" when the page is unavailable."""
        ...

    async def fetch_strict(self, url: str) -> str:
        """Fetch a page body.

        Raises:
            PageFetchError: on an invalid URL, timeout, transport error or
                HTTP error status
        """
        ...


class HttpxPageFetcher:
    """Fetch documentation pages and sitemaps with httpx."""

    DEFAULT_HEADERS = {
        "User-Agent": AUDITOR_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }

    def __init__(
        self,
        timeout: float = PAGE_FETCH_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
    ):
        """Initialize the page fetcher.

        Args:
            timeout: HTTP timeout in seconds
            headers: Optional custom headers (defaults to the auditor headers)
        """
        self._timeout = timeout
        self._headers = headers or self.DEFAULT_HEADERS.copy()

    def resolve_url(self, domain: str, path_or_url: str) -> str:
        if path_or_url.startswith(("http://", "https://")):
            return path_or_url
        path = path_or_url if path_or_url.startswith("/") else f"/{path_or_url}"
        return f"https://{domain}{path}"

    async def fetch_strict(self, url: str) -> str:
        start_time = time.time()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers=self._headers,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PageFetchError(
                f"Failed to fetch {url}: HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise PageFetchError(f"Failed to fetch {url}: {e}") from e

        logfire.info(
            "Page fetched",
            url=url,
            status_code=response.status_code,
            content_length=len(response.text),
            response_time_ms=(time.time() - start_time) * 1000,
        )
        return response.text

    async def fetch(self, url: str) -> str:
        try:
            return await self.fetch_strict(url)
        except PageFetchError as e:
            logfire.warn("Page fetch failed", url=url, error=str(e))
            return ""
