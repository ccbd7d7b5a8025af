"""Domain normalization, cache keys and per-domain sitemap configuration."""

import re
from urllib.parse import urlparse

from docgap.constants import (
    DEFAULT_DOC_FILTER,
    DOMAIN_REWRITES,
    DOMAIN_SITEMAP_CONFIG,
)
from docgap.models.sitemap_models import SitemapConfig

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_domain(raw: str) -> str:
    """Canonicalize a user-supplied domain or site URL.

    Strips the scheme and trailing slashes, lower-cases, and rewrites known
    product domains to their documentation subdomain. Idempotent.
    """
    cleaned = raw
    while True:
        stripped = _SCHEME_RE.sub("", cleaned.strip()).rstrip("/").strip().lower()
        if stripped == cleaned:
            break
        cleaned = stripped
    return DOMAIN_REWRITES.get(cleaned, cleaned)


def domain_cache_slug(domain: str) -> str:
    return normalize_domain(domain).replace(".", "-")


def embeddings_cache_key(domain: str) -> str:
    return f"rich-content-embeddings-{domain_cache_slug(domain)}.json"


def sitemap_health_cache_key(domain: str) -> str:
    return f"sitemap-health-{domain_cache_slug(domain)}.json"


def session_output_key(session_id: str) -> str:
    return f"sessions/{session_id}/issue-validation-results.json"


def resolve_sitemap_config(domain: str) -> SitemapConfig:
    """Look up the sitemap URL and documentation filter for a domain."""
    normalized = normalize_domain(domain)
    config = DOMAIN_SITEMAP_CONFIG.get(normalized)
    if config is None:
        return SitemapConfig(
            sitemap_url=f"https://{normalized}/sitemap.xml",
            doc_filter=DEFAULT_DOC_FILTER,
            configured=False,
        )
    return SitemapConfig(
        sitemap_url=config["sitemap_url"],
        doc_filter=config["doc_filter"],
        configured=True,
    )


def url_path(url: str) -> str:
    """Path component of a full URL; paths are returned unchanged."""
    if url.startswith(("http://", "https://")):
        return urlparse(url).path or "/"
    return url


def is_documentation_path(path: str, config: SitemapConfig) -> bool:
    """Configured domains match by prefix, unconfigured ones by substring."""
    if config.configured:
        return path.startswith(config.doc_filter)
    return config.doc_filter in path
