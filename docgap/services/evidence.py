"""Evidence extraction from a fetched documentation page."""

import re

from docgap.constants import (
    HOSTING_PLATFORMS,
    MIN_RELEVANT_KEYWORD_MATCHES,
    PRODUCTION_KEYWORDS,
)
from docgap.models.issue_models import Issue
from docgap.models.validation_models import Evidence
from docgap.services.content_extractor import ContentExtractor
from docgap.services.keywords import extract_keywords

_CODE_MARKER_RE = re.compile(r"<code|<pre|```", re.IGNORECASE)


def _has_any(text: str, terms) -> bool:
    return any(term in text for term in terms)


def _content_gaps(
    issue: Issue, lowered: str, code_examples: int, production_guidance: bool
) -> list[str]:
    gaps = []
    if code_examples == 0:
        gaps.append("Missing code examples")

    if issue.category == "deployment" and not production_guidance:
        gaps.append("Missing production deployment guidance")

    if not _has_any(lowered, ("error", "troubleshoot")):
        gaps.append("Missing error handling and troubleshooting steps")

    if issue.category == "email-delivery":
        if not _has_any(lowered, ("spam", "deliverability")):
            gaps.append("Missing spam/deliverability troubleshooting")
        if not _has_any(lowered, ("dns", "spf", "dkim")):
            gaps.append("Missing DNS configuration examples")

    if issue.category == "deployment":
        title = issue.title.lower()
        named = [p for p in HOSTING_PLATFORMS if p in title]
        if named and not _has_any(lowered, named):
            gaps.append("Missing platform-specific deployment examples (Vercel/Netlify)")
        if not _has_any(lowered, ("environment variable", "env")):
            gaps.append("Missing environment variable configuration")

    return gaps


def analyze_page_content(
    content: str,
    issue: Issue,
    page_url: str,
    semantic_score: float | None,
    extractor: ContentExtractor,
) -> Evidence:
    """Derive an evidence record for one candidate page.

    Relevance, production guidance and gaps are judged on the lower-cased
    raw content; code examples are counted from markup markers.
    """
    lowered = content.lower()
    title = extractor.extract(content).title or page_url

    keywords = extract_keywords(issue)
    matches = sum(1 for keyword in keywords if keyword in lowered)
    code_examples = len(_CODE_MARKER_RE.findall(content))
    production_guidance = _has_any(lowered, PRODUCTION_KEYWORDS)

    return Evidence(
        page_url=page_url,
        page_title=title,
        has_relevant_content=matches >= MIN_RELEVANT_KEYWORD_MATCHES,
        content_gaps=_content_gaps(issue, lowered, code_examples, production_guidance),
        code_examples=code_examples,
        production_guidance=production_guidance,
        semantic_score=semantic_score,
    )
