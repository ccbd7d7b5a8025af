"""Sitemap reading for documentation path discovery."""

from typing import List

import logfire
from bs4 import BeautifulSoup

from docgap.services.domain import (
    is_documentation_path,
    normalize_domain,
    resolve_sitemap_config,
    url_path,
)
from docgap.services.page_fetcher import PageFetcher, PageFetchError


def parse_sitemap_locations(xml: str) -> List[str]:
    """Return the stripped text of every ``<loc>`` element, in document order."""
    soup = BeautifulSoup(xml, "html.parser")
    locations = []
    for loc in soup.find_all("loc"):
        text = loc.get_text().strip()
        if text:
            locations.append(text)
    return locations


async def fetch_documentation_paths(domain: str, fetcher: PageFetcher) -> List[str]:
    """Fetch the domain's sitemap and return its documentation paths.

    Returns an empty list when the sitemap cannot be fetched.
    """
    normalized = normalize_domain(domain)
    config = resolve_sitemap_config(normalized)
    try:
        xml = await fetcher.fetch_strict(config.sitemap_url)
    except PageFetchError as e:
        logfire.error(
            "Sitemap fetch failed",
            domain=normalized,
            sitemap_url=config.sitemap_url,
            error=str(e),
        )
        return []

    paths = [url_path(loc) for loc in parse_sitemap_locations(xml)]
    doc_paths = [p for p in paths if is_documentation_path(p, config)]
    logfire.info(
        "Sitemap read",
        domain=normalized,
        sitemap_url=config.sitemap_url,
        total_paths=len(paths),
        documentation_paths=len(doc_paths),
    )
    return doc_paths
