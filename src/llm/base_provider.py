# src/llm/base_provider.py — v1
"""Abstract model provider interface.

Every backend (local inference daemon, hosted API, mock) implements the
same three operations so the orchestrator never depends on backend
specifics. Implementations normalize all failures into result values:
none of the operations may raise.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lexassist.llm.models import ImageData, ModelAvailability, ModelConfig, ModelMessage, ModelResponse

VISION_PROMPT_TEMPLATE = (
    "Please analyze this image and provide a detailed description. "
    "Context from user: {prompt}"
)


class BaseModelProvider(ABC):
    """Unified interface for all model providers."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config

    @property
    def config(self) -> ModelConfig:
        return self._config

    @property
    def name(self) -> str:
        """Human description of the backend, used in model attribution."""
        return self._config.description

    @abstractmethod
    async def check_availability(self) -> ModelAvailability:
        """Check whether the text and vision models are reachable."""

    @abstractmethod
    async def generate_text(self, messages: list[ModelMessage]) -> ModelResponse:
        """Send the full message list (system prompt included) to the text model."""

    @abstractmethod
    async def analyze_image(self, image: ImageData, prompt: str) -> ModelResponse:
        """Describe one image, using the user's prompt as context."""

    def format_image_for_provider(self, image: ImageData) -> str:
        return image.data

    @staticmethod
    def vision_prompt(prompt: str) -> str:
        return VISION_PROMPT_TEMPLATE.format(prompt=prompt)

    def _success(self, content: str, model: str) -> ModelResponse:
        return ModelResponse(success=True, content=content, model_used=f"{model} ({self.name})")

    @staticmethod
    def _failure(error: str, model: str) -> ModelResponse:
        return ModelResponse(success=False, error=error, model_used=model)
