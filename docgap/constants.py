"""Application-wide constants.

This module centralizes all magic numbers and fixed lookup tables used by
the validation pipeline so there is a single source of truth for them.

Constants are organized by pipeline stage.
"""

# =============================================================================
# HTTP Configuration
# =============================================================================

# Timeout for documentation page and sitemap fetches (seconds)
PAGE_FETCH_TIMEOUT_SECONDS = 10.0

# User-Agent sent with every documentation request
AUDITOR_USER_AGENT = "DocGap-Documentation-Auditor/1.0"

# =============================================================================
# Domain Configuration
# =============================================================================

# Parent product domains rewritten to their documentation subdomain
DOMAIN_REWRITES: dict[str, str] = {
    "knock.app": "docs.knock.app",
}

# Per-domain sitemap location and documentation path prefix
DOMAIN_SITEMAP_CONFIG: dict[str, dict[str, str]] = {
    "resend.com": {
        "sitemap_url": "https://resend.com/docs/sitemap.xml",
        "doc_filter": "/docs/",
    },
    "liveblocks.io": {
        "sitemap_url": "https://liveblocks.io/sitemap.xml",
        "doc_filter": "/docs",
    },
}

# Documentation path marker used when a domain has no configuration
DEFAULT_DOC_FILTER = "/docs"

# =============================================================================
# Keyword Extraction
# =============================================================================

STOP_WORDS = frozenset(
    (
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "is", "are", "was", "were", "been", "be", "have", "has",
        "had", "do", "does", "did", "will", "would", "should", "could", "may",
        "might", "must", "can",
    )
)

CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "deployment": ["deploy", "production", "environment", "vercel", "netlify", "hosting"],
    "email-delivery": ["email", "spam", "deliverability", "dns", "spf", "dkim", "gmail"],
    "api-usage": ["api", "endpoint", "request", "response", "integration"],
    "authentication": ["auth", "key", "token", "credential", "permission"],
    "documentation": ["docs", "guide", "tutorial", "example"],
}

# =============================================================================
# Retrieval
# =============================================================================

# Number of candidate pages returned by either retrieval strategy
MAX_CANDIDATE_PAGES = 5

# Score bonus for sitemap paths containing the documentation marker
DOC_PATH_SCORE_BONUS = 0.5

# =============================================================================
# Embedding Configuration
# =============================================================================

# Maximum extracted page content kept per embedding record (chars)
MAX_EMBEDDING_CONTENT_CHARS = 8000

# Pages whose combined title/description/content is shorter are skipped
MIN_EMBEDDING_TEXT_CHARS = 10

# Delay between page fetches while building embeddings (seconds)
EMBEDDING_PAGE_DELAY_SECONDS = 0.1

# =============================================================================
# Evidence Extraction
# =============================================================================

# Keyword matches required before a page counts as relevant
MIN_RELEVANT_KEYWORD_MATCHES = 2

PRODUCTION_KEYWORDS = ("production", "deploy", "environment", "configuration", "setup")

# Hosting platforms checked for deployment issues
HOSTING_PLATFORMS = ("vercel", "netlify")

# =============================================================================
# Status Classification
# =============================================================================

RESOLVED_SEMANTIC_THRESHOLD = 0.85
POTENTIAL_GAP_SEMANTIC_THRESHOLD = 0.6

NO_DOCUMENTATION_CONFIDENCE = 95
RESOLVED_CONFIDENCE = 90
POTENTIAL_GAP_CONFIDENCE = 75
CONFIRMED_CONFIDENCE = 70
CRITICAL_GAP_CONFIDENCE = 85

# =============================================================================
# Recommendation Generation
# =============================================================================

# Minimum semantic score of the best page before the model is consulted
MIN_RECOMMENDATION_SEMANTIC_SCORE = 0.5

MAX_RECOMMENDATIONS = 5

MAX_CONTINUATION_ATTEMPTS = 5

RECOMMENDATION_MAX_TOKENS = 4096

RECOMMENDATION_TEMPERATURE = 0.3

CONTINUATION_PROMPT = (
    "Please continue from where you left off. "
    "Complete the code example and explanation."
)

# Code snippets extracted from a documentation page for the prompt
MAX_PAGE_CODE_SNIPPETS = 5

# Snippets shorter than this are ignored (chars)
MIN_TAGGED_SNIPPET_CHARS = 10

# Untagged <code> elements longer than this always count as code (chars)
MIN_UNTAGGED_SNIPPET_CHARS = 50

# Characters of each snippet quoted in the prompt
PROMPT_SNIPPET_PREVIEW_CHARS = 500

# Characters of the issue's full content quoted in the prompt
PROMPT_FULL_CONTENT_PREVIEW_CHARS = 1000

# =============================================================================
# Sitemap Health
# =============================================================================

# Nested sitemap index depth followed by discovery
MAX_SITEMAP_DEPTH = 3

# Concurrent requests per health-probe batch
HEALTH_PROBE_CONCURRENCY = 10

# Timeout for a single health probe request (seconds)
HEALTH_PROBE_TIMEOUT_SECONDS = 8.0

# Progress phase for health-probe events
HEALTH_CHECK_PHASE = "sitemap-health-check"

# =============================================================================
# Storage
# =============================================================================

DEFAULT_STORAGE_BUCKET = "doc-gap-validator"
