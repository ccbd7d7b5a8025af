"""Tests for sitemap reading."""

import pytest

from docgap.services.page_fetcher import PageFetchError
from docgap.services.sitemap_reader import fetch_documentation_paths, parse_sitemap_locations

SITEMAP = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://resend.com/docs/send-with-nextjs</loc></url>
  <url><loc> https://resend.com/docs/dashboard/domains </loc></url>
  <url><loc>https://resend.com/blog/launch</loc></url>
</urlset>
"""


class TestParseSitemapLocations:
    def test_extracts_trimmed_locations(self):
        assert parse_sitemap_locations(SITEMAP) == [
            "https://resend.com/docs/send-with-nextjs",
            "https://resend.com/docs/dashboard/domains",
            "https://resend.com/blog/launch",
        ]

    def test_no_locations(self):
        assert parse_sitemap_locations("<urlset></urlset>") == []


class TestFetchDocumentationPaths:
    """Test fetch_documentation_paths()."""

    @pytest.mark.asyncio
    async def test_filters_to_documentation_paths(self, mock_fetcher):
        mock_fetcher.fetch_strict.return_value = SITEMAP

        paths = await fetch_documentation_paths("https://Resend.com", mock_fetcher)

        mock_fetcher.fetch_strict.assert_awaited_once_with(
            "https://resend.com/docs/sitemap.xml"
        )
        assert paths == ["/docs/send-with-nextjs", "/docs/dashboard/domains"]

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_empty(self, mock_fetcher):
        mock_fetcher.fetch_strict.side_effect = PageFetchError("HTTP 404")

        assert await fetch_documentation_paths("resend.com", mock_fetcher) == []
