"""Models for sitemap configuration, discovery and health probing."""

from dataclasses import dataclass
from typing import Literal

from pydantic import Field

from docgap.models.base import CamelModel

LinkIssueType = Literal["404", "access-denied", "timeout", "error"]


@dataclass(frozen=True)
class SitemapConfig:
    """Where a domain's sitemap lives and which paths are documentation."""

    sitemap_url: str
    doc_filter: str
    configured: bool


class LinkIssue(CamelModel):
    """A sitemap URL that failed its health probe."""

    url: str
    status: int | Literal["timeout", "error"]
    message: str
    issue_type: LinkIssueType


class ProbeHealthSummary(CamelModel):
    """Health summary as reported by the probe job."""

    total_urls: int = 0
    healthy_urls: int = 0
    link_issues: list[LinkIssue] = Field(default_factory=list)
    health_percentage: int = 100
    processing_time: int = Field(default=0, description="Milliseconds")
    timestamp: str = ""


class SitemapHealthSummary(ProbeHealthSummary):
    """Domain-level health summary with breakdown counts, cached per domain."""

    broken_urls: int = 0
    access_denied_urls: int = 0
    timeout_urls: int = 0
    other_error_urls: int = 0


class DiscoveryResult(CamelModel):
    """Reply from the sitemap discovery job."""

    success: bool
    urls: list[str] = Field(default_factory=list)
    nested_sitemaps: int = 0
    message: str = ""


class ProbeResult(CamelModel):
    """Reply from the sitemap health-probe job."""

    success: bool
    message: str = ""
    total_urls: int = 0
    healthy_urls: int = 0
    broken_urls: int = 0
    access_denied_urls: int = 0
    timeout_urls: int = 0
    other_error_urls: int = 0
    health_summary: ProbeHealthSummary | None = None
