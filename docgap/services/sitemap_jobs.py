"""In-process sitemap discovery and link health-probe jobs."""

import asyncio
import gzip
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Sequence, Set, Tuple
from urllib.parse import urlparse

import httpx
import logfire
from bs4 import BeautifulSoup

from docgap.constants import (
    AUDITOR_USER_AGENT,
    HEALTH_PROBE_CONCURRENCY,
    HEALTH_PROBE_TIMEOUT_SECONDS,
    MAX_SITEMAP_DEPTH,
    PAGE_FETCH_TIMEOUT_SECONDS,
)
from docgap.models.sitemap_models import (
    DiscoveryResult,
    LinkIssue,
    ProbeHealthSummary,
    ProbeResult,
)

_GZIP_MAGIC = b"\x1f\x8b"

# Called after each probe batch with (processed_count, total_urls)
BatchCallback = Callable[[int, int], Awaitable[None]]


def _is_http_url(url: str) -> bool:
    return urlparse(url).scheme in ("http", "https")


def _loc_text(element) -> str | None:
    loc = element.find("loc")
    if loc is None:
        return None
    text = loc.get_text().strip()
    return text or None


class HttpSitemapDiscoveryJob:
    """Enumerates page URLs from a sitemap, following sitemap indexes."""

    def __init__(
        self,
        timeout: float = PAGE_FETCH_TIMEOUT_SECONDS,
        max_depth: int = MAX_SITEMAP_DEPTH,
    ):
        self._timeout = timeout
        self._max_depth = max_depth

    async def discover(self, sitemap_url: str) -> DiscoveryResult:
        start_time = time.time()
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            headers={"User-Agent": AUDITOR_USER_AGENT},
        ) as client:
            try:
                xml = await self._fetch_xml(client, sitemap_url)
            except (httpx.HTTPError, OSError) as e:
                logfire.error(
                    "Sitemap discovery failed", sitemap_url=sitemap_url, error=str(e)
                )
                return DiscoveryResult(
                    success=False, message=f"Sitemap parsing failed: {e}"
                )
            processed: Set[str] = {sitemap_url}
            urls, nested = await self._parse(client, xml, 0, processed)

        unique_urls = list(dict.fromkeys(urls))
        logfire.info(
            "Sitemap discovery completed",
            sitemap_url=sitemap_url,
            url_count=len(unique_urls),
            nested_sitemaps=nested,
            total_time_ms=(time.time() - start_time) * 1000,
        )
        return DiscoveryResult(
            success=True,
            urls=unique_urls,
            nested_sitemaps=nested,
            message=f"Successfully parsed sitemap with {len(unique_urls)} URLs",
        )

    async def _fetch_xml(self, client: httpx.AsyncClient, url: str) -> str:
        response = await client.get(url)
        response.raise_for_status()
        body = response.content
        if body[:2] == _GZIP_MAGIC:
            body = gzip.decompress(body)
        return body.decode(response.encoding or "utf-8", errors="replace")

    async def _parse(
        self, client: httpx.AsyncClient, xml: str, depth: int, processed: Set[str]
    ) -> Tuple[List[str], int]:
        soup = BeautifulSoup(xml, "html.parser")
        urls: List[str] = []
        nested = 0

        if soup.find("sitemapindex") is not None:
            for entry in soup.find_all("sitemap"):
                nested_url = _loc_text(entry)
                if nested_url is None:
                    continue
                child_urls, child_nested = await self._visit(
                    client, nested_url, depth + 1, processed
                )
                urls.extend(child_urls)
                nested += 1 + child_nested

        if soup.find("urlset") is not None:
            for entry in soup.find_all("url"):
                url = _loc_text(entry)
                if url and _is_http_url(url):
                    urls.append(url)

        return urls, nested

    async def _visit(
        self, client: httpx.AsyncClient, url: str, depth: int, processed: Set[str]
    ) -> Tuple[List[str], int]:
        """Parse a nested sitemap. Failures skip the sitemap rather than the run."""
        if depth > self._max_depth:
            logfire.warn("Max sitemap depth reached, skipping", sitemap_url=url)
            return [], 0
        if url in processed:
            return [], 0
        processed.add(url)
        try:
            xml = await self._fetch_xml(client, url)
        except (httpx.HTTPError, OSError) as e:
            logfire.warn("Nested sitemap failed, skipping", sitemap_url=url, error=str(e))
            return [], 0
        return await self._parse(client, xml, depth, processed)


class HttpHealthProbeJob:
    """Probes URLs in fixed-size concurrent batches and summarises their health."""

    def __init__(
        self,
        timeout: float = HEALTH_PROBE_TIMEOUT_SECONDS,
        concurrency: int = HEALTH_PROBE_CONCURRENCY,
    ):
        self._timeout = timeout
        self._concurrency = concurrency

    async def probe(
        self, urls: Sequence[str], on_batch: BatchCallback | None = None
    ) -> ProbeResult:
        start_time = time.time()
        unique_urls = list(dict.fromkeys(urls))
        if not unique_urls:
            return ProbeResult(
                success=True,
                message="No URLs to check",
                health_summary=ProbeHealthSummary(
                    timestamp=datetime.now(timezone.utc).isoformat()
                ),
            )

        link_issues: List[LinkIssue] = []
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            headers={"User-Agent": AUDITOR_USER_AGENT},
        ) as client:
            for i in range(0, len(unique_urls), self._concurrency):
                batch = unique_urls[i : i + self._concurrency]
                results = await asyncio.gather(
                    *(self._probe_one(client, url) for url in batch)
                )
                link_issues.extend(issue for issue in results if issue is not None)
                if on_batch is not None:
                    await on_batch(i + len(batch), len(unique_urls))

        total = len(unique_urls)
        healthy = total - len(link_issues)
        counts = {
            issue_type: sum(1 for issue in link_issues if issue.issue_type == issue_type)
            for issue_type in ("404", "access-denied", "timeout", "error")
        }
        summary = ProbeHealthSummary(
            total_urls=total,
            healthy_urls=healthy,
            link_issues=link_issues,
            health_percentage=round(healthy / total * 100),
            processing_time=int((time.time() - start_time) * 1000),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        logfire.info(
            "Health probe completed",
            total_urls=total,
            healthy_urls=healthy,
            health_percentage=summary.health_percentage,
            response_time_ms=summary.processing_time,
        )
        return ProbeResult(
            success=True,
            message=(
                f"Health check complete: {healthy}/{total} URLs healthy "
                f"({summary.health_percentage}%)"
            ),
            total_urls=total,
            healthy_urls=healthy,
            broken_urls=counts["404"],
            access_denied_urls=counts["access-denied"],
            timeout_urls=counts["timeout"],
            other_error_urls=counts["error"],
            health_summary=summary,
        )

    async def _probe_one(self, client: httpx.AsyncClient, url: str) -> LinkIssue | None:
        try:
            response = await client.get(url)
        except httpx.TimeoutException:
            return LinkIssue(
                url=url,
                status="timeout",
                message=f"Request timeout (>{self._timeout:g} seconds)",
                issue_type="timeout",
            )
        except httpx.HTTPError as e:
            return LinkIssue(
                url=url, status="error", message=str(e) or type(e).__name__, issue_type="error"
            )

        status = response.status_code
        if status == 404:
            return LinkIssue(
                url=url, status=404, message="Page not found (404)", issue_type="404"
            )
        if status == 403:
            return LinkIssue(
                url=url,
                status=403,
                message="Access denied (403 Forbidden)",
                issue_type="access-denied",
            )
        if status >= 400:
            return LinkIssue(
                url=url,
                status=status,
                message=f"HTTP {status}: {response.reason_phrase}",
                issue_type="error",
            )
        return None
