"""Issue input and retrieval candidate models."""

from typing import Literal

from pydantic import ConfigDict, Field

from docgap.models.base import CamelModel


class Issue(CamelModel):
    """A developer pain point reported or discovered for a documentation site."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    category: str
    description: str
    frequency: int = Field(default=0, ge=0, description="Number of reports seen")
    sources: list[str] = Field(default_factory=list, description="Origin URLs")
    last_seen: str = ""
    severity: Literal["high", "medium", "low"] = "medium"
    related_pages: list[str] = Field(
        default_factory=list, description="Pre-curated candidate page paths or URLs"
    )

    # Rich content captured by issue discovery (all optional)
    full_content: str | None = None
    code_snippets: list[str] | None = None
    error_messages: list[str] | None = None
    tags: list[str] | None = None
    stack_trace: str | None = None

    @property
    def primary_source(self) -> str:
        """First origin URL, or "N/A" when the issue has none."""
        return self.sources[0] if self.sources else "N/A"


class CandidatePage(CamelModel):
    """A documentation page selected for evidence extraction."""

    url: str
    title: str
    similarity: float | None = None
