"""Tests for the status classifier."""

import pytest

from docgap.models.validation_models import Evidence
from docgap.services.classifier import classify, collect_missing_elements


def _evidence(relevant=False, gaps=None, score=None, url="/docs/a"):
    return Evidence(
        page_url=url,
        page_title=url,
        has_relevant_content=relevant,
        content_gaps=gaps or [],
        semantic_score=score,
    )


class TestClassify:
    """Decision table, first matching rule wins."""

    def test_empty_evidence_is_critical_gap_95(self):
        result = classify([])

        assert (result.status, result.confidence) == ("critical-gap", 95)

    def test_resolved(self):
        result = classify([_evidence(relevant=True, score=0.9)])

        assert (result.status, result.confidence) == ("resolved", 90)

    def test_resolved_threshold_is_strict(self):
        result = classify([_evidence(relevant=True, score=0.85)])

        assert result.status == "potential-gap"

    def test_resolved_requires_no_gaps(self):
        result = classify([_evidence(relevant=True, gaps=["Missing code examples"], score=0.95)])

        assert (result.status, result.confidence) == ("potential-gap", 75)

    def test_potential_gap(self):
        result = classify([_evidence(score=0.7)])

        assert (result.status, result.confidence) == ("potential-gap", 75)

    def test_potential_gap_threshold_is_strict(self):
        assert classify([_evidence(score=0.6)]).status == "critical-gap"

    def test_confirmed(self):
        result = classify([_evidence(relevant=True, gaps=["x"]), _evidence(score=0.2)])

        assert (result.status, result.confidence) == ("confirmed", 70)

    @pytest.mark.parametrize("score", [None, 0.0, 0.3])
    def test_critical_gap(self, score):
        result = classify([_evidence(score=score)])

        assert (result.status, result.confidence) == ("critical-gap", 85)

    def test_any_item_can_match(self):
        evidence = [_evidence(score=0.1), _evidence(relevant=True, score=0.99, url="/docs/b")]

        assert classify(evidence).status == "resolved"


class TestCollectMissingElements:
    def test_ordered_union(self):
        evidence = [_evidence(gaps=["a", "b"]), _evidence(gaps=["b", "c"])]

        assert collect_missing_elements(evidence) == ["a", "b", "c"]

    def test_empty(self):
        assert collect_missing_elements([]) == []
