"""Per-domain cache of documentation page embeddings.

Embeddings for a domain are built once from its sitemap and stored in the
object store under ``rich-content-embeddings-{domain}.json``. There is no
expiry; callers bust the cache explicitly with :meth:`EmbeddingCache.invalidate`.
"""

import asyncio
import math
import time
from typing import Dict, List, Sequence

import logfire
from pydantic import TypeAdapter, ValidationError

from docgap.constants import (
    EMBEDDING_PAGE_DELAY_SECONDS,
    MAX_EMBEDDING_CONTENT_CHARS,
    MIN_EMBEDDING_TEXT_CHARS,
)
from docgap.models.embedding_models import PageEmbeddingRecord
from docgap.services.content_extractor import ContentExtractor
from docgap.services.domain import embeddings_cache_key, normalize_domain
from docgap.services.embedding_service import EmbeddingClient
from docgap.services.page_fetcher import PageFetcher
from docgap.services.sitemap_reader import fetch_documentation_paths
from docgap.storage import ObjectStore, ObjectStoreError, read_json, write_json_best_effort

_records_adapter = TypeAdapter(List[PageEmbeddingRecord])


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        ValueError: if the vectors differ in length
    """
    if len(a) != len(b):
        raise ValueError(f"Vector length mismatch: {len(a)} != {len(b)}")
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class EmbeddingCache:
    """Loads a domain's page embeddings from storage, building them on a miss.

    Concurrent callers for the same normalized domain share one in-flight
    load, so a cold domain is only crawled and embedded once.
    """

    def __init__(
        self,
        store: ObjectStore,
        fetcher: PageFetcher,
        extractor: ContentExtractor,
        embedder: EmbeddingClient,
        page_delay_seconds: float = EMBEDDING_PAGE_DELAY_SECONDS,
    ):
        self._store = store
        self._fetcher = fetcher
        self._extractor = extractor
        self._embedder = embedder
        self._page_delay_seconds = page_delay_seconds
        self._in_flight: Dict[str, asyncio.Future] = {}

    async def load_or_generate(self, domain: str) -> List[PageEmbeddingRecord]:
        normalized = normalize_domain(domain)
        task = self._in_flight.get(normalized)
        if task is None:
            task = asyncio.ensure_future(self._load_or_generate(normalized))
            self._in_flight[normalized] = task
            task.add_done_callback(lambda _: self._in_flight.pop(normalized, None))
        else:
            logfire.debug("Joining in-flight embedding load", domain=normalized)
        return await asyncio.shield(task)

    async def invalidate(self, domain: str) -> None:
        """Delete the cached embeddings for a domain."""
        normalized = normalize_domain(domain)
        await self._store.delete(embeddings_cache_key(normalized))
        logfire.info("Embedding cache invalidated", domain=normalized)

    async def _load_or_generate(self, domain: str) -> List[PageEmbeddingRecord]:
        cached = await self._read_cached(domain)
        if cached is not None:
            logfire.info("Embedding cache hit", domain=domain, page_count=len(cached))
            return cached

        records = await self._generate(domain)
        if not records:
            # Nothing to cache; the next search retries generation
            logfire.warn("No pages embedded, cache not written", domain=domain)
            return records
        await write_json_best_effort(
            self._store,
            embeddings_cache_key(domain),
            [r.model_dump() for r in records],
        )
        return records

    async def _read_cached(self, domain: str) -> List[PageEmbeddingRecord] | None:
        key = embeddings_cache_key(domain)
        try:
            payload = await read_json(self._store, key)
        except ObjectStoreError as e:
            logfire.warn("Embedding cache read failed, regenerating", key=key, error=str(e))
            return None
        if payload is None:
            return None
        try:
            return _records_adapter.validate_python(payload)
        except ValidationError as e:
            logfire.warn("Embedding cache malformed, regenerating", key=key, error=str(e))
            return None

    async def _generate(self, domain: str) -> List[PageEmbeddingRecord]:
        start_time = time.time()
        paths = await fetch_documentation_paths(domain, self._fetcher)
        logfire.info("Generating embeddings", domain=domain, page_count=len(paths))

        records: List[PageEmbeddingRecord] = []
        for index, path in enumerate(paths):
            if index > 0 and self._page_delay_seconds > 0:
                await asyncio.sleep(self._page_delay_seconds)
            url = self._fetcher.resolve_url(domain, path)
            try:
                record = await self._embed_page(url)
            except Exception as e:
                logfire.warn(
                    "Skipping page during embedding generation",
                    url=url,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            if record is not None:
                records.append(record)

        logfire.info(
            "Embeddings generated",
            domain=domain,
            page_count=len(paths),
            embedded_count=len(records),
            total_time_ms=(time.time() - start_time) * 1000,
        )
        return records

    async def _embed_page(self, url: str) -> PageEmbeddingRecord | None:
        html = await self._fetcher.fetch(url)
        if not html:
            return None
        extracted = self._extractor.extract(html)
        content = extracted.content[:MAX_EMBEDDING_CONTENT_CHARS]
        text = f"{extracted.title} {extracted.description} {content}".strip()
        if len(text) < MIN_EMBEDDING_TEXT_CHARS:
            return None
        embedding = await self._embedder.embed_document(text)
        return PageEmbeddingRecord(
            url=url,
            title=extracted.title,
            description=extracted.description,
            content=content,
            embedding=embedding,
        )
