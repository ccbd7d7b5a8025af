"""Tests for keyword extraction."""

from docgap.models.issue_models import Issue
from docgap.services.keywords import extract_keywords


class TestExtractKeywords:
    """Test extract_keywords()."""

    def test_drops_stop_words_and_short_tokens(self):
        issue = Issue(id="1", title="The API is down", category="other", description="an error")

        keywords = extract_keywords(issue)

        assert keywords == ["api", "down", "error", "other"]

    def test_appends_category_keywords(self, email_issue):
        keywords = extract_keywords(email_issue)

        assert keywords[:2] == ["messages", "landing"]
        for term in ("spam", "deliverability", "dns", "spf", "dkim", "gmail"):
            assert term in keywords

    def test_deduplicates_preserving_first_occurrence(self):
        issue = Issue(
            id="1",
            title="deploy deploy vercel",
            category="deployment",
            description="Deploy to Vercel",
        )

        keywords = extract_keywords(issue)

        assert len(keywords) == len(set(keywords))
        assert keywords.index("deploy") < keywords.index("vercel")
        assert keywords[0] == "deploy"

    def test_deterministic(self, sample_issue):
        assert extract_keywords(sample_issue) == extract_keywords(sample_issue)
