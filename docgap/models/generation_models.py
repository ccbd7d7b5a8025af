"""Models for the text-generation continuation protocol."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

StopReason = Literal["end", "length"]


@dataclass(frozen=True)
class ConversationTurn:
    role: Literal["user", "assistant"]
    content: str


@dataclass(frozen=True)
class GenerationResponse:
    """One reply from the text-generation service."""

    text: str
    stop_reason: StopReason


class ContinuationState(str, Enum):
    ACCUMULATING = "accumulating"
    COMPLETE = "complete"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class ContinuationProgress:
    """Immutable snapshot of the continuation loop."""

    state: ContinuationState
    turns: tuple[ConversationTurn, ...]
    text: str = ""
    attempts: int = 0


@dataclass(frozen=True)
class ContinuationResult:
    """Accumulated output of a continuation run."""

    text: str
    attempts: int
    state: ContinuationState

    @property
    def exhausted(self) -> bool:
        """True when the output may be incomplete (attempt limit reached while truncated)."""
        return self.state is ContinuationState.EXHAUSTED


@dataclass(frozen=True)
class CodeSnippet:
    """A code example extracted from a documentation page."""

    code: str
    language: str | None = field(default=None)
