"""Progress notification models."""

import time
from typing import Any, Literal

from pydantic import BaseModel, Field


class ProgressEvent(BaseModel):
    """A progress notification published to the session's dashboard."""

    type: Literal["info", "success", "error", "progress"]
    message: str
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))
    phase: str | None = None
    metadata: dict[str, Any] | None = None
