"""Candidate page retrieval: semantic search with a keyword fallback."""

from typing import List

import logfire

from docgap.constants import DOC_PATH_SCORE_BONUS, MAX_CANDIDATE_PAGES
from docgap.models.issue_models import CandidatePage, Issue
from docgap.services.domain import normalize_domain, resolve_sitemap_config
from docgap.services.embedding_cache import EmbeddingCache, cosine_similarity
from docgap.services.embedding_service import EmbeddingClient
from docgap.services.keywords import extract_keywords
from docgap.services.page_fetcher import PageFetcher
from docgap.services.sitemap_reader import fetch_documentation_paths


def build_issue_query_text(issue: Issue) -> str:
    """Composite search text: core fields first, then any rich content."""
    parts = [issue.title, issue.description, issue.category]
    if issue.full_content:
        parts.append(issue.full_content)
    if issue.code_snippets:
        parts.append(" ".join(issue.code_snippets))
    if issue.error_messages:
        parts.append(" ".join(issue.error_messages))
    if issue.tags:
        parts.append(" ".join(issue.tags))
    if issue.stack_trace:
        parts.append(issue.stack_trace)
    return " ".join(parts)


class SemanticRetriever:
    """Ranks cached page embeddings by cosine similarity to the issue."""

    def __init__(self, cache: EmbeddingCache, embedder: EmbeddingClient):
        self._cache = cache
        self._embedder = embedder

    async def search(self, issue: Issue, domain: str) -> List[CandidatePage]:
        """Top pages by similarity. Any failure yields an empty list."""
        try:
            records = await self._cache.load_or_generate(domain)
            if not records:
                return []

            query_embedding = await self._embedder.embed_query(
                build_issue_query_text(issue)
            )
            scored = [
                (cosine_similarity(query_embedding, r.embedding), r) for r in records
            ]
            scored.sort(key=lambda pair: pair[0], reverse=True)
        except Exception as e:
            logfire.warn(
                "Semantic search failed",
                issue_id=issue.id,
                domain=domain,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        candidates = [
            CandidatePage(url=record.url, title=record.title, similarity=score)
            for score, record in scored[:MAX_CANDIDATE_PAGES]
        ]
        logfire.info(
            "Semantic search completed",
            issue_id=issue.id,
            domain=domain,
            candidate_count=len(candidates),
            top_similarity=candidates[0].similarity if candidates else None,
        )
        return candidates


def score_paths_by_keywords(
    keywords: List[str], paths: List[str], doc_marker: str
) -> List[CandidatePage]:
    """Rank sitemap paths by keyword hits, with a bonus for documentation paths.

    Paths scoring zero are dropped. Ties keep sitemap order.
    """
    scored = []
    for path in paths:
        lowered = path.lower()
        score = float(sum(1 for keyword in keywords if keyword in lowered))
        if doc_marker in path:
            score += DOC_PATH_SCORE_BONUS
        if score > 0:
            scored.append((score, path))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [CandidatePage(url=path, title=path) for _, path in scored[:MAX_CANDIDATE_PAGES]]


class KeywordRetriever:
    """Fallback retrieval by keyword matching against sitemap paths."""

    def __init__(self, fetcher: PageFetcher):
        self._fetcher = fetcher

    async def search(self, issue: Issue, domain: str) -> List[CandidatePage]:
        normalized = normalize_domain(domain)
        paths = await fetch_documentation_paths(normalized, self._fetcher)
        if not paths:
            return []
        config = resolve_sitemap_config(normalized)
        candidates = score_paths_by_keywords(
            extract_keywords(issue), paths, config.doc_filter
        )
        logfire.info(
            "Keyword search completed",
            issue_id=issue.id,
            domain=normalized,
            candidate_count=len(candidates),
        )
        return candidates
