"""Deterministic issue status classification."""

from typing import List

from docgap.constants import (
    CONFIRMED_CONFIDENCE,
    CRITICAL_GAP_CONFIDENCE,
    NO_DOCUMENTATION_CONFIDENCE,
    POTENTIAL_GAP_CONFIDENCE,
    POTENTIAL_GAP_SEMANTIC_THRESHOLD,
    RESOLVED_CONFIDENCE,
    RESOLVED_SEMANTIC_THRESHOLD,
)
from docgap.models.validation_models import Classification, Evidence


def _score(item: Evidence) -> float:
    return item.semantic_score if item.semantic_score is not None else 0.0


def classify(evidence: List[Evidence]) -> Classification:
    """Turn an evidence set into a status and confidence. First matching rule wins."""
    if not evidence:
        return Classification("critical-gap", NO_DOCUMENTATION_CONFIDENCE)

    if any(
        e.has_relevant_content
        and not e.content_gaps
        and _score(e) > RESOLVED_SEMANTIC_THRESHOLD
        for e in evidence
    ):
        return Classification("resolved", RESOLVED_CONFIDENCE)

    if any(_score(e) > POTENTIAL_GAP_SEMANTIC_THRESHOLD for e in evidence):
        return Classification("potential-gap", POTENTIAL_GAP_CONFIDENCE)

    if any(e.has_relevant_content for e in evidence):
        return Classification("confirmed", CONFIRMED_CONFIDENCE)

    return Classification("critical-gap", CRITICAL_GAP_CONFIDENCE)


def collect_missing_elements(evidence: List[Evidence]) -> List[str]:
    """Ordered, deduplicated union of every evidence item's content gaps."""
    return list(dict.fromkeys(gap for e in evidence for gap in e.content_gaps))
