"""Evidence, classification and report models for issue validation."""

from dataclasses import dataclass
from typing import Literal

from pydantic import Field

from docgap.models.base import CamelModel
from docgap.models.issue_models import Issue
from docgap.models.sitemap_models import SitemapHealthSummary

IssueStatus = Literal["resolved", "confirmed", "potential-gap", "critical-gap"]


class Evidence(CamelModel):
    """Result of analyzing one candidate documentation page against one issue."""

    page_url: str
    page_title: str
    has_relevant_content: bool
    content_gaps: list[str] = Field(default_factory=list)
    code_examples: int = Field(default=0, ge=0)
    production_guidance: bool = False
    semantic_score: float | None = None


class GapAnalysis(CamelModel):
    """Structured description of a documentation gap."""

    gap_type: Literal["potential-gap", "critical-gap", "resolved"]
    page_url: str | None = None
    page_title: str | None = None
    missing_content: list[str] = Field(default_factory=list)
    reasoning: str
    developer_impact: str


@dataclass(frozen=True)
class Classification:
    """Status classifier output."""

    status: IssueStatus
    confidence: int


class ValidationResult(CamelModel):
    """Validation outcome for a single issue."""

    issue_id: str
    issue_title: str
    status: IssueStatus
    evidence: list[Evidence] = Field(default_factory=list)
    missing_elements: list[str] = Field(default_factory=list)
    potential_gaps: list[GapAnalysis] = Field(default_factory=list)
    critical_gaps: list[str] = Field(default_factory=list)
    confidence: int = Field(..., ge=0, le=100)
    recommendations: list[str] = Field(default_factory=list)


class ValidationSummary(CamelModel):
    """Issue counts by status."""

    total_issues: int = 0
    confirmed: int = 0
    resolved: int = 0
    potential_gaps: int = 0
    critical_gaps: int = 0

    @classmethod
    def from_results(cls, results: list[ValidationResult]) -> "ValidationSummary":
        statuses = [r.status for r in results]
        return cls(
            total_issues=len(results),
            confirmed=statuses.count("confirmed"),
            resolved=statuses.count("resolved"),
            potential_gaps=statuses.count("potential-gap"),
            critical_gaps=statuses.count("critical-gap"),
        )


class ValidationRequest(CamelModel):
    """Pipeline entry payload."""

    issues: list[Issue]
    domain: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    refresh_cache: bool = Field(
        default=False,
        description="Drop the domain's embedding and sitemap health caches first",
    )


class ValidatorOutput(CamelModel):
    """The pipeline's single output artifact."""

    validation_results: list[ValidationResult] = Field(default_factory=list)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)
    processing_time: int = Field(default=0, description="Milliseconds")
    sitemap_health: SitemapHealthSummary | None = None

    # Only set on the top-level failure path
    error: str | None = None
    message: str | None = None


class CacheInvalidationRequest(CamelModel):
    """Request to drop a domain's embedding and sitemap health caches."""

    domain: str = Field(..., min_length=1)


class CacheInvalidationResponse(CamelModel):
    domain: str
    invalidated_keys: list[str]
