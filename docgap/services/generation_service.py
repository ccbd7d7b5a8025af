"""Long-form text generation via PydanticAI Gateway."""

import logging
from typing import Protocol, Sequence

import logfire
from pydantic_ai import ModelRequest, ModelResponse, ModelSettings, TextPart
from pydantic_ai.direct import model_request
from pydantic_ai.messages import ModelMessage

from docgap.models.generation_models import ConversationTurn, GenerationResponse

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the text-generation service call fails."""


class TextGenerationClient(Protocol):
    """Protocol for a text-generation service that reports truncation."""

    async def generate(
        self, conversation: Sequence[ConversationTurn], max_tokens: int
    ) -> GenerationResponse:
        """Send the whole conversation and return the next reply.

        Raises:
            GenerationError: if the service call fails
        """
        ...


def _to_messages(conversation: Sequence[ConversationTurn]) -> list[ModelMessage]:
    messages: list[ModelMessage] = []
    for turn in conversation:
        if turn.role == "assistant":
            messages.append(ModelResponse(parts=[TextPart(content=turn.content)]))
        else:
            messages.append(ModelRequest.user_text_prompt(turn.content))
    return messages


class GatewayTextGenerationClient:
    """TextGenerationClient using a single direct model request per call."""

    def __init__(self, model: str, temperature: float):
        self._model = model
        self._temperature = temperature
        logger.info(f"GatewayTextGenerationClient initialized with model: {model}")

    async def generate(
        self, conversation: Sequence[ConversationTurn], max_tokens: int
    ) -> GenerationResponse:
        try:
            with logfire.span(
                "text_generation", model=self._model, turn_count=len(conversation)
            ):
                response = await model_request(
                    self._model,
                    _to_messages(conversation),
                    model_settings=ModelSettings(
                        max_tokens=max_tokens, temperature=self._temperature
                    ),
                )
        except Exception as e:
            raise GenerationError(f"Text generation failed: {e}") from e

        stop_reason = "length" if response.finish_reason == "length" else "end"
        return GenerationResponse(text=response.text or "", stop_reason=stop_reason)
