"""Fire-and-forget progress notifications for a validation session."""

from typing import Any

import httpx
import logfire

from docgap.models.progress_models import ProgressEvent

_WEBHOOK_TIMEOUT_SECONDS = 5.0


class ProgressPublisher:
    """Publishes progress events to Logfire and, optionally, an HTTP webhook.

    Delivery is best-effort: failures are logged and never raised.
    """

    def __init__(self, webhook_url: str | None = None):
        self._webhook_url = webhook_url

    async def publish(self, session_id: str, event: ProgressEvent) -> None:
        logfire.info(
            "Progress: {message}",
            message=event.message,
            session_id=session_id,
            event_type=event.type,
            phase=event.phase,
        )
        if not self._webhook_url:
            return
        try:
            async with httpx.AsyncClient(timeout=_WEBHOOK_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    self._webhook_url,
                    json={"sessionId": session_id, **event.model_dump(exclude_none=True)},
                )
                response.raise_for_status()
        except Exception as e:
            logfire.warn(
                "Progress publish failed",
                session_id=session_id,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def info(self, session_id: str, message: str, **metadata: Any) -> None:
        await self.publish(session_id, self._event("info", message, metadata))

    async def progress(
        self, session_id: str, message: str, phase: str | None = None, **metadata: Any
    ) -> None:
        await self.publish(session_id, self._event("progress", message, metadata, phase))

    async def success(self, session_id: str, message: str, **metadata: Any) -> None:
        await self.publish(session_id, self._event("success", message, metadata))

    async def error(self, session_id: str, message: str, **metadata: Any) -> None:
        await self.publish(session_id, self._event("error", message, metadata))

    @staticmethod
    def _event(
        event_type: str,
        message: str,
        metadata: dict[str, Any],
        phase: str | None = None,
    ) -> ProgressEvent:
        return ProgressEvent(
            type=event_type, message=message, phase=phase, metadata=metadata or None
        )
