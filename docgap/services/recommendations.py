"""Recommendation generation with a bounded truncation-continuation loop.

The text-generation service caps each reply at ``max_tokens``. When a reply
is cut off, the partial text is fed back as an assistant turn followed by a
fixed "please continue" prompt, up to ``max_attempts`` calls in total. The
loop itself is a pure state transition (:func:`advance`) so it can be
tested without a model.
"""

import re
import time
from dataclasses import replace
from typing import List

import logfire

from docgap.constants import (
    CONTINUATION_PROMPT,
    MAX_CONTINUATION_ATTEMPTS,
    MAX_RECOMMENDATIONS,
    MIN_RECOMMENDATION_SEMANTIC_SCORE,
    PROMPT_FULL_CONTENT_PREVIEW_CHARS,
    PROMPT_SNIPPET_PREVIEW_CHARS,
    RECOMMENDATION_MAX_TOKENS,
)
from docgap.models.generation_models import (
    CodeSnippet,
    ContinuationProgress,
    ContinuationResult,
    ContinuationState,
    ConversationTurn,
    GenerationResponse,
)
from docgap.models.issue_models import Issue
from docgap.models.validation_models import Evidence, IssueStatus
from docgap.services.content_extractor import extract_code_snippets
from docgap.services.generation_service import TextGenerationClient
from docgap.services.page_fetcher import PageFetcher

_NUMBERED_LINE_RE = re.compile(r"^\d+\.\s")

# =============================================================================
# Continuation state machine
# =============================================================================


def start_continuation(prompt: str) -> ContinuationProgress:
    return ContinuationProgress(
        state=ContinuationState.ACCUMULATING,
        turns=(ConversationTurn(role="user", content=prompt),),
    )


def advance(
    progress: ContinuationProgress,
    response: GenerationResponse,
    max_attempts: int = MAX_CONTINUATION_ATTEMPTS,
) -> ContinuationProgress:
    """Apply one service reply to the loop state."""
    attempts = progress.attempts + 1
    text = progress.text + response.text

    if response.stop_reason != "length":
        return replace(
            progress, state=ContinuationState.COMPLETE, text=text, attempts=attempts
        )
    if attempts >= max_attempts:
        return replace(
            progress, state=ContinuationState.EXHAUSTED, text=text, attempts=attempts
        )
    return ContinuationProgress(
        state=ContinuationState.ACCUMULATING,
        turns=progress.turns
        + (
            ConversationTurn(role="assistant", content=response.text),
            ConversationTurn(role="user", content=CONTINUATION_PROMPT),
        ),
        text=text,
        attempts=attempts,
    )


async def run_continuation(
    client: TextGenerationClient,
    prompt: str,
    max_attempts: int = MAX_CONTINUATION_ATTEMPTS,
    max_tokens: int = RECOMMENDATION_MAX_TOKENS,
) -> ContinuationResult:
    """Drive the continuation loop to completion or exhaustion.

    Raises:
        GenerationError: if any service call fails
    """
    progress = start_continuation(prompt)
    while progress.state is ContinuationState.ACCUMULATING:
        logfire.debug(
            "Generation attempt",
            attempt=progress.attempts + 1,
            max_attempts=max_attempts,
        )
        response = await client.generate(progress.turns, max_tokens)
        progress = advance(progress, response, max_attempts)

    if progress.state is ContinuationState.EXHAUSTED:
        logfire.warn(
            "Reached maximum continuation attempts, response may be incomplete",
            attempts=progress.attempts,
            text_length=len(progress.text),
        )
    return ContinuationResult(
        text=progress.text, attempts=progress.attempts, state=progress.state
    )


# =============================================================================
# Parsing
# =============================================================================


def parse_recommendations(text: str, limit: int = MAX_RECOMMENDATIONS) -> List[str]:
    """Split model output into recommendations at numbered lines.

    Non-numbered lines, fenced code included, stay with the recommendation
    they follow so code blocks are never split.
    """
    recommendations: List[str] = []
    current = ""
    for line in text.split("\n"):
        if _NUMBERED_LINE_RE.match(line):
            if current.strip():
                recommendations.append(current.strip())
            current = _NUMBERED_LINE_RE.sub("", line, count=1)
        elif current or line.strip():
            current = f"{current}\n{line}" if current else line
    if current.strip():
        recommendations.append(current.strip())
    return recommendations[:limit]


# =============================================================================
# Prompt
# =============================================================================


def _format_snippets(snippets: List[CodeSnippet]) -> str:
    if not snippets:
        return "No code examples found on page"
    return "\n\n".join(
        f"Example {i}:\n```{s.language or ''}\n{s.code[:PROMPT_SNIPPET_PREVIEW_CHARS]}\n```"
        for i, s in enumerate(snippets, start=1)
    )


def build_prompt(
    issue: Issue, best: Evidence, snippets: List[CodeSnippet], domain: str
) -> str:
    error = issue.error_messages[0] if issue.error_messages else "N/A"
    tags = ", ".join(issue.tags) if issue.tags else "None"
    full_content = (
        issue.full_content[:PROMPT_FULL_CONTENT_PREVIEW_CHARS]
        if issue.full_content
        else "Not available"
    )
    gaps = ", ".join(best.content_gaps) if best.content_gaps else "None detected"
    score = (best.semantic_score or 0.0) * 100

    return f"""You are a technical documentation expert analyzing a developer issue against {domain}.

DEVELOPER ISSUE:
- Title: {issue.title}
- Category: {issue.category}
- Description: {issue.description}
- Error: {error}
- Tags: {tags}
- Source: {issue.primary_source}
- Full content preview: {full_content}

DOCUMENTATION PAGE: {best.page_url}
- Title: {best.page_title}
- Semantic match: {score:.1f}%
- Has code examples: {"Yes" if best.code_examples > 0 else "No"}
- Has production guidance: {"Yes" if best.production_guidance else "No"}
- Content gaps: {gaps}

EXISTING CODE ON PAGE:
{_format_snippets(snippets)}

YOUR TASK: Write at most {MAX_RECOMMENDATIONS} surgical recommendations that close the gap between this issue and the page.

OUTPUT FORMAT (follow exactly):
- Start every recommendation on its own line with its number, e.g. "1. Add retry handling to the send example".
- Explain what is missing in 2-3 sentences.
- Show the existing page code (BEFORE) and the improved code (AFTER) in fenced code blocks.
- Code must be complete and copy-paste ready, with imports and error handling.
- Never start any other line with a number followed by a period.
"""


# =============================================================================
# Generator
# =============================================================================


def _generic_recommendations(issue: Issue) -> List[str]:
    return [
        f"Create new documentation page addressing: {issue.title}",
        f"Include code examples for {issue.category}",
        "Add troubleshooting section for common errors",
        f"Reference: {issue.primary_source}",
    ]


def _update_page_recommendations(issue: Issue, page_url: str) -> List[str]:
    return [
        f"Update {page_url} to address: {issue.title}",
        f"Add code examples for {issue.category}",
        "Include troubleshooting section for common errors",
        f"Reference: {issue.primary_source}",
    ]


def _fallback_recommendations(issue: Issue) -> List[str]:
    return [
        f'Add troubleshooting section for "{issue.title}" with specific error handling',
        f"Include code examples addressing {issue.category} issues",
        f"Add production deployment guidance for common {issue.category} problems",
        f"Reference developer issue: {issue.primary_source}",
    ]


class RecommendationGenerator:
    """Produces fix recommendations for one validated issue. Never raises."""

    def __init__(
        self,
        client: TextGenerationClient,
        fetcher: PageFetcher,
        max_attempts: int = MAX_CONTINUATION_ATTEMPTS,
        max_tokens: int = RECOMMENDATION_MAX_TOKENS,
    ):
        self._client = client
        self._fetcher = fetcher
        self._max_attempts = max_attempts
        self._max_tokens = max_tokens

    async def generate(
        self,
        issue: Issue,
        evidence: List[Evidence],
        status: IssueStatus,
        domain: str,
    ) -> List[str]:
        try:
            return await self._generate(issue, evidence, status, domain)
        except Exception as e:
            logfire.error(
                "Recommendation generation failed, using fallback",
                issue_id=issue.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return _fallback_recommendations(issue)

    async def _generate(
        self,
        issue: Issue,
        evidence: List[Evidence],
        status: IssueStatus,
        domain: str,
    ) -> List[str]:
        best = (
            max(evidence, key=lambda e: e.semantic_score or 0.0) if evidence else None
        )
        if (
            best is None
            or not best.semantic_score
            or best.semantic_score < MIN_RECOMMENDATION_SEMANTIC_SCORE
        ):
            logfire.info(
                "No strong semantic match, using generic recommendations",
                issue_id=issue.id,
                best_score=best.semantic_score if best else None,
            )
            return _generic_recommendations(issue)

        page_html = await self._fetcher.fetch(
            self._fetcher.resolve_url(domain, best.page_url)
        )
        if not page_html:
            return _update_page_recommendations(issue, best.page_url)

        snippets = extract_code_snippets(page_html)
        prompt = build_prompt(issue, best, snippets, domain)

        start_time = time.time()
        result = await run_continuation(
            self._client, prompt, self._max_attempts, self._max_tokens
        )
        recommendations = parse_recommendations(result.text)
        logfire.info(
            "Recommendations generated",
            issue_id=issue.id,
            status=status,
            page_url=best.page_url,
            snippet_count=len(snippets),
            attempts=result.attempts,
            incomplete=result.exhausted,
            recommendation_count=len(recommendations),
            response_time_ms=(time.time() - start_time) * 1000,
        )
        if not recommendations:
            return _fallback_recommendations(issue)
        return recommendations
