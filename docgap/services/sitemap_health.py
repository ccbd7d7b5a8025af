"""Domain-level sitemap health aggregation with a per-domain cache."""

import time
from typing import Protocol, Sequence

import logfire
from pydantic import ValidationError

from docgap.constants import HEALTH_CHECK_PHASE
from docgap.models.sitemap_models import DiscoveryResult, ProbeResult, SitemapHealthSummary
from docgap.services.domain import (
    normalize_domain,
    resolve_sitemap_config,
    sitemap_health_cache_key,
    url_path,
)
from docgap.services.progress import ProgressPublisher
from docgap.services.sitemap_jobs import BatchCallback
from docgap.storage import ObjectStore, ObjectStoreError, read_json, write_json_best_effort


class SitemapDiscoveryJob(Protocol):
    async def discover(self, sitemap_url: str) -> DiscoveryResult: ...


class HealthProbeJob(Protocol):
    async def probe(
        self, urls: Sequence[str], on_batch: BatchCallback | None = None
    ) -> ProbeResult: ...


class SitemapHealthAggregator:
    """Discovers a domain's documentation URLs, probes them and caches the summary.

    A cached summary is returned as stored; there is no staleness check.
    Documentation URLs are selected by path prefix for every domain. When a
    session ID is given, probe progress is published in the
    ``sitemap-health-check`` phase.
    """

    def __init__(
        self,
        store: ObjectStore,
        discovery_job: SitemapDiscoveryJob,
        probe_job: HealthProbeJob,
        progress: ProgressPublisher | None = None,
    ):
        self._store = store
        self._discovery_job = discovery_job
        self._probe_job = probe_job
        self._progress = progress

    async def check(
        self, domain: str, session_id: str | None = None
    ) -> SitemapHealthSummary | None:
        """Health summary for the domain, or None when the check was skipped."""
        normalized = normalize_domain(domain)
        try:
            return await self._check(normalized, session_id)
        except Exception as e:
            logfire.error(
                "Sitemap health check failed",
                domain=normalized,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def invalidate(self, domain: str) -> None:
        """Delete the cached health summary for a domain."""
        normalized = normalize_domain(domain)
        await self._store.delete(sitemap_health_cache_key(normalized))
        logfire.info("Sitemap health cache invalidated", domain=normalized)

    async def _check(
        self, domain: str, session_id: str | None
    ) -> SitemapHealthSummary | None:
        cache_key = sitemap_health_cache_key(domain)
        cached = await self._read_cached(cache_key)
        if cached is not None:
            logfire.info("Sitemap health cache hit", domain=domain)
            return cached

        start_time = time.time()
        config = resolve_sitemap_config(domain)
        discovery = await self._discovery_job.discover(config.sitemap_url)
        if not discovery.success:
            logfire.warn(
                "Sitemap discovery failed, skipping health check",
                domain=domain,
                message=discovery.message,
            )
            return None

        doc_urls = [
            url for url in discovery.urls if url_path(url).startswith(config.doc_filter)
        ]
        logfire.info(
            "Probing documentation URLs",
            domain=domain,
            discovered=len(discovery.urls),
            documentation_urls=len(doc_urls),
        )

        on_batch = None
        if self._progress is not None and session_id:
            await self._progress.progress(
                session_id,
                f"Starting bulk health check for {len(doc_urls)} URLs from sitemap",
                phase=HEALTH_CHECK_PHASE,
            )
            on_batch = self._batch_reporter(session_id)

        probe = await self._probe_job.probe(doc_urls, on_batch=on_batch)
        if not probe.success or probe.health_summary is None:
            logfire.warn(
                "Health probe failed, skipping health check",
                domain=domain,
                message=probe.message,
            )
            return None

        summary = SitemapHealthSummary(
            **probe.health_summary.model_dump(),
            broken_urls=probe.broken_urls,
            access_denied_urls=probe.access_denied_urls,
            timeout_urls=probe.timeout_urls,
            other_error_urls=probe.other_error_urls,
        )
        await write_json_best_effort(
            self._store, cache_key, summary.model_dump(mode="json", by_alias=True)
        )
        logfire.info(
            "Sitemap health check completed",
            domain=domain,
            total_urls=summary.total_urls,
            health_percentage=summary.health_percentage,
            total_time_ms=(time.time() - start_time) * 1000,
        )
        return summary

    def _batch_reporter(self, session_id: str) -> BatchCallback:
        async def report(processed: int, total: int) -> None:
            percentage = round(processed / total * 100)
            await self._progress.progress(
                session_id,
                f"Health check progress: {processed}/{total} URLs checked ({percentage}%)",
                phase=HEALTH_CHECK_PHASE,
                processed_count=processed,
                total_urls=total,
                progress_percentage=percentage,
            )

        return report

    async def _read_cached(self, key: str) -> SitemapHealthSummary | None:
        try:
            payload = await read_json(self._store, key)
        except ObjectStoreError as e:
            logfire.warn("Sitemap health cache read failed", key=key, error=str(e))
            return None
        if payload is None:
            return None
        try:
            return SitemapHealthSummary.model_validate(payload)
        except ValidationError as e:
            logfire.warn("Sitemap health cache malformed", key=key, error=str(e))
            return None
