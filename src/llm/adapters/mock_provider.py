# src/llm/adapters/mock_provider.py — v1
"""Offline mock provider: deterministic canned answers, no network I/O.

Default backend on hosted deployments where no local daemon exists.
"""

from __future__ import annotations

from typing import Any

from lexassist.llm.base_provider import BaseModelProvider
from lexassist.llm.models import ImageData, ModelAvailability, ModelConfig, ModelMessage, ModelResponse

_MOCK_ANSWER = (
    "This is a demonstration response from the mock legal assistant. "
    "Your question was: \"{question}\". "
    "In a live deployment a language model would provide general legal "
    "information here. Please consult a qualified attorney for advice "
    "specific to your situation."
)

_MOCK_IMAGE_ANALYSIS = (
    "Mock analysis of {file_name} ({mime_type}, {size} bytes). "
    "No vision model is attached to this deployment."
)

_QUESTION_PREVIEW_CHARS = 200


class MockProvider(BaseModelProvider):
    """Deterministic provider for demos and offline tests."""

    def __init__(self, config: ModelConfig, **kwargs: Any) -> None:
        super().__init__(config)

    async def check_availability(self) -> ModelAvailability:
        return ModelAvailability(text_model_ready=True, vision_model_ready=True)

    async def generate_text(self, messages: list[ModelMessage]) -> ModelResponse:
        question = next(
            (m.content for m in reversed(messages) if m.role == "user"), "",
        )
        preview = " ".join(question.split())[:_QUESTION_PREVIEW_CHARS]
        return self._success(_MOCK_ANSWER.format(question=preview), self.config.text_model)

    async def analyze_image(self, image: ImageData, prompt: str) -> ModelResponse:
        return self._success(
            _MOCK_IMAGE_ANALYSIS.format(
                file_name=image.file_name, mime_type=image.mime_type, size=image.size,
            ),
            self.config.vision_model,
        )
