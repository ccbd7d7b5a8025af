"""Issue validation pipeline: candidate selection, evidence, status and report."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List

import logfire

from docgap.config import Settings, get_settings
from docgap.constants import NO_DOCUMENTATION_CONFIDENCE
from docgap.models.issue_models import CandidatePage, Issue
from docgap.models.validation_models import (
    Evidence,
    GapAnalysis,
    ValidationRequest,
    ValidationResult,
    ValidationSummary,
    ValidatorOutput,
)
from docgap.services.classifier import classify, collect_missing_elements
from docgap.services.content_extractor import ContentExtractor, get_content_extractor
from docgap.services.domain import normalize_domain, session_output_key
from docgap.services.embedding_cache import EmbeddingCache
from docgap.services.embedding_service import GatewayEmbeddingClient
from docgap.services.evidence import analyze_page_content
from docgap.services.generation_service import GatewayTextGenerationClient
from docgap.services.keywords import extract_keywords
from docgap.services.page_fetcher import HttpxPageFetcher, PageFetcher
from docgap.services.progress import ProgressPublisher
from docgap.services.recommendations import RecommendationGenerator
from docgap.services.retrieval import KeywordRetriever, SemanticRetriever
from docgap.services.sitemap_health import SitemapHealthAggregator
from docgap.services.sitemap_jobs import HttpHealthProbeJob, HttpSitemapDiscoveryJob
from docgap.storage import (
    ObjectStore,
    ObjectStoreError,
    SupabaseObjectStore,
    write_json_best_effort,
)
from docgap.storage.client import get_supabase_client

logger = logging.getLogger(__name__)


@dataclass
class ValidatorClients:
    """Long-lived collaborators, built once per process and injected."""

    store: ObjectStore
    fetcher: PageFetcher
    extractor: ContentExtractor
    embedding_cache: EmbeddingCache
    semantic_retriever: SemanticRetriever
    keyword_retriever: KeywordRetriever
    recommendations: RecommendationGenerator
    health: SitemapHealthAggregator
    progress: ProgressPublisher


def _no_documentation_result(issue: Issue, keywords: List[str]) -> ValidationResult:
    return ValidationResult(
        issue_id=issue.id,
        issue_title=issue.title,
        status="critical-gap",
        evidence=[],
        missing_elements=["Complete documentation page"],
        potential_gaps=[
            GapAnalysis(
                gap_type="critical-gap",
                missing_content=[
                    "Complete documentation page missing",
                    "Code examples needed",
                    "Troubleshooting guide needed",
                    "Production deployment guidance needed",
                ],
                reasoning=(
                    "Searched sitemap.xml but found no pages matching keywords: "
                    + ", ".join(keywords)
                ),
                developer_impact=(
                    f"{issue.frequency} developers affected - reporting this issue "
                    f"since {issue.last_seen}"
                ),
            )
        ],
        critical_gaps=[f'No documentation page found addressing "{issue.title}"'],
        confidence=NO_DOCUMENTATION_CONFIDENCE,
        recommendations=[
            f"Create new documentation page addressing: {issue.title}",
            f"Include code examples for {issue.category}",
            "Add troubleshooting section",
            f"Reference: {issue.primary_source}",
        ],
    )


class IssueValidator:
    """Validates issues against a domain's documentation."""

    def __init__(self, clients: ValidatorClients):
        self.clients = clients

    async def select_candidates(self, issue: Issue, domain: str) -> List[CandidatePage]:
        """Pre-curated pages, then semantic search, then keyword search."""
        if issue.related_pages:
            return [CandidatePage(url=page, title=page) for page in issue.related_pages]

        candidates = await self.clients.semantic_retriever.search(issue, domain)
        if candidates:
            return candidates

        logfire.info("Falling back to keyword search", issue_id=issue.id, domain=domain)
        return await self.clients.keyword_retriever.search(issue, domain)

    async def collect_evidence(
        self, issue: Issue, domain: str, candidates: List[CandidatePage]
    ) -> List[Evidence]:
        evidence: List[Evidence] = []
        for candidate in candidates:
            url = self.clients.fetcher.resolve_url(domain, candidate.url)
            content = await self.clients.fetcher.fetch(url)
            if not content:
                continue
            evidence.append(
                analyze_page_content(
                    content,
                    issue,
                    candidate.url,
                    candidate.similarity,
                    self.clients.extractor,
                )
            )
        return evidence

    async def validate_issue(self, issue: Issue, domain: str) -> ValidationResult:
        with logfire.span("validate_issue", issue_id=issue.id, domain=domain):
            candidates = await self.select_candidates(issue, domain)
            evidence = (
                await self.collect_evidence(issue, domain, candidates)
                if candidates
                else []
            )
            if not evidence:
                logfire.info(
                    "No documentation found for issue",
                    issue_id=issue.id,
                    candidate_count=len(candidates),
                )
                return _no_documentation_result(issue, extract_keywords(issue))

            classification = classify(evidence)
            recommendations = await self.clients.recommendations.generate(
                issue, evidence, classification.status, domain
            )
            return ValidationResult(
                issue_id=issue.id,
                issue_title=issue.title,
                status=classification.status,
                evidence=evidence,
                missing_elements=collect_missing_elements(evidence),
                confidence=classification.confidence,
                recommendations=recommendations,
            )

    async def invalidate_caches(self, domain: str) -> None:
        """Drop the domain's embedding and sitemap health caches.

        Raises:
            ObjectStoreError: if either delete fails
        """
        await self.clients.embedding_cache.invalidate(domain)
        await self.clients.health.invalidate(domain)

    async def run(self, request: ValidationRequest) -> ValidatorOutput:
        """Validate every issue and the domain's sitemap health concurrently.

        Never raises: an unexpected failure yields an empty output carrying
        the error message.
        """
        start_time = time.time()
        try:
            return await self._run(request, start_time)
        except Exception as e:
            logger.exception(f"Issue validation failed for session {request.session_id}")
            await self.clients.progress.error(
                request.session_id, f"Issue validation failed: {e}"
            )
            return ValidatorOutput(
                processing_time=int((time.time() - start_time) * 1000),
                error="Issue validation failed",
                message=str(e),
            )

    async def _run(self, request: ValidationRequest, start_time: float) -> ValidatorOutput:
        domain = normalize_domain(request.domain)
        session_id = request.session_id
        logger.info(
            f"Validating {len(request.issues)} issues for {domain} (session {session_id})"
        )
        await self.clients.progress.info(
            session_id,
            f"Validating {len(request.issues)} issues against {domain} documentation",
            issue_count=len(request.issues),
        )

        if request.refresh_cache:
            try:
                await self.invalidate_caches(domain)
            except ObjectStoreError as e:
                logfire.warn("Cache refresh failed", domain=domain, error=str(e))

        *results, sitemap_health = await asyncio.gather(
            *(self.validate_issue(issue, domain) for issue in request.issues),
            self.clients.health.check(domain, session_id),
        )
        summary = ValidationSummary.from_results(results)
        output = ValidatorOutput(
            validation_results=results,
            summary=summary,
            processing_time=int((time.time() - start_time) * 1000),
            sitemap_health=sitemap_health,
        )

        await write_json_best_effort(
            self.clients.store,
            session_output_key(session_id),
            output.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        await self.clients.progress.success(
            session_id,
            f"Validation complete: {summary.confirmed} confirmed, "
            f"{summary.resolved} resolved, {summary.potential_gaps} potential gaps, "
            f"{summary.critical_gaps} critical gaps",
            processing_time=output.processing_time,
        )
        logfire.info(
            "Issue validation completed",
            domain=domain,
            session_id=session_id,
            total_issues=summary.total_issues,
            processing_time_ms=output.processing_time,
        )
        return output


def build_validator(settings: Settings | None = None) -> IssueValidator:
    """Wire the production collaborators from settings."""
    settings = settings or get_settings()
    store = SupabaseObjectStore(get_supabase_client(settings), settings.storage_bucket)
    fetcher = HttpxPageFetcher(timeout=settings.page_fetch_timeout_seconds)
    progress = ProgressPublisher(settings.progress_webhook_url)
    extractor = get_content_extractor(settings.content_extractor)
    embedder = GatewayEmbeddingClient(settings.embedding_model)
    embedding_cache = EmbeddingCache(
        store,
        fetcher,
        extractor,
        embedder,
        page_delay_seconds=settings.embedding_page_delay_seconds,
    )
    generator = RecommendationGenerator(
        GatewayTextGenerationClient(
            settings.default_model, settings.recommendation_temperature
        ),
        fetcher,
        max_attempts=settings.max_continuation_attempts,
        max_tokens=settings.recommendation_max_tokens,
    )
    health = SitemapHealthAggregator(
        store,
        HttpSitemapDiscoveryJob(timeout=settings.page_fetch_timeout_seconds),
        HttpHealthProbeJob(
            timeout=settings.health_probe_timeout_seconds,
            concurrency=settings.health_probe_concurrency,
        ),
        progress=progress,
    )
    return IssueValidator(
        ValidatorClients(
            store=store,
            fetcher=fetcher,
            extractor=extractor,
            embedding_cache=embedding_cache,
            semantic_retriever=SemanticRetriever(embedding_cache, embedder),
            keyword_retriever=KeywordRetriever(fetcher),
            recommendations=generator,
            health=health,
            progress=progress,
        )
    )
